"""Custom exceptions for lyricgate."""


class LyricGateError(Exception):
    """Base exception for lyricgate."""
    pass


class ConfigError(LyricGateError):
    """Invalid configuration value."""
    pass


class ValidationError(LyricGateError):
    """Invalid file or parameter."""
    pass


class CapacityExceededError(LyricGateError):
    """Owner already holds the maximum number of songs."""

    def __init__(self, limit: int):
        super().__init__(f"Song limit reached: maximum of {limit} songs allowed")
        self.limit = limit


class LyricsUnavailableError(LyricGateError):
    """No synced lyrics could be obtained for the track."""

    def __init__(self, artist: str, title: str):
        super().__init__(f"No synced lyrics available for '{title}' by '{artist}'")
        self.artist = artist
        self.title = title


class QuotaExceededError(LyricGateError):
    """Daily request limit reached for a credential."""
    pass


class NotFoundError(LyricGateError):
    """Unknown asset or credential, or owner mismatch."""
    pass


class InvalidCredentialError(NotFoundError):
    """Unknown API key."""
    pass


class StorageError(LyricGateError):
    """Error with object or record store operations."""
    pass
