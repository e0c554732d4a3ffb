"""lyricgate - lyrics-gated audio uploads with synced LRC timelines."""

__version__ = "0.1.0"
