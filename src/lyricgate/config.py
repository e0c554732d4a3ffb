"""Configuration settings for lyricgate."""

import os
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path
from typing import Tuple

from .exceptions import ConfigError

# Directories
DEFAULT_DATA_DIR = Path.home() / ".local" / "share" / "lyricgate"

# Lyrics source (can be overridden via environment variables)
LRCLIB_BASE_URL = os.getenv("LYRICGATE_LRCLIB_URL", "https://lrclib.net/api")
LYRICS_TIMEOUT = float(os.getenv("LYRICGATE_LYRICS_TIMEOUT", "10"))
USER_AGENT = "lyricgate/0.1 (https://github.com/lyricgate/lyricgate)"

# Upload limits
MAX_SONGS_PER_OWNER = 10
LYRICS_PREVIEW_LINES = 4
MAX_AUDIO_SIZE = 100 * 1024 * 1024  # 100MB
MAX_VIDEO_SIZE = 50 * 1024 * 1024  # 50MB

AUDIO_EXTENSIONS = ("mp3", "wav", "ogg", "flac")
AUDIO_MIME_TYPES = (
    "audio/mpeg",
    "audio/mp3",
    "audio/wav",
    "audio/wave",
    "audio/x-wav",
    "audio/ogg",
    "audio/flac",
    "audio/x-flac",
)
VIDEO_EXTENSIONS = ("mp4",)
VIDEO_MIME_TYPES = ("video/mp4",)

# Per-song settings
FREQUENCY_WEIGHT_RANGE = (1, 5)
DEFAULT_FREQUENCY_WEIGHT = 3
SYNC_OFFSET_RANGE = (-60_000, 60_000)  # milliseconds

# Embed access
MAX_DAILY_REQUESTS = 1000
SIGNED_URL_TTL = timedelta(days=365)


def validate_config() -> None:
    """Validate configuration values."""
    if LYRICS_TIMEOUT <= 0:
        raise ConfigError("Lyrics timeout must be positive")

    if not LRCLIB_BASE_URL.startswith(("http://", "https://")):
        raise ConfigError(f"Invalid LRCLIB base URL: {LRCLIB_BASE_URL}")

    low, high = FREQUENCY_WEIGHT_RANGE
    if not low <= DEFAULT_FREQUENCY_WEIGHT <= high:
        raise ConfigError("Default frequency weight outside allowed range")


def get_data_dir() -> Path:
    """Get data directory from environment or default."""
    data_dir = os.getenv("LYRICGATE_DATA_DIR")
    if data_dir:
        return Path(data_dir)
    return DEFAULT_DATA_DIR


def get_signing_key() -> bytes:
    """Key used to sign local object URLs."""
    return os.getenv("LYRICGATE_SIGNING_KEY", "lyricgate-dev-signing-key").encode()


# Validate config on import
validate_config()


@dataclass(frozen=True)
class WorkflowConfig:
    """Limits passed explicitly into the upload and embed services."""

    max_assets_per_owner: int = MAX_SONGS_PER_OWNER
    lyrics_preview_lines: int = LYRICS_PREVIEW_LINES
    daily_request_limit: int = MAX_DAILY_REQUESTS
    signed_url_ttl: timedelta = SIGNED_URL_TTL
    frequency_weight_range: Tuple[int, int] = FREQUENCY_WEIGHT_RANGE
    sync_offset_range: Tuple[int, int] = SYNC_OFFSET_RANGE
    lyrics_timeout: float = LYRICS_TIMEOUT

    def __post_init__(self):
        if self.max_assets_per_owner <= 0:
            raise ConfigError("max_assets_per_owner must be positive")
        if self.daily_request_limit <= 0:
            raise ConfigError("daily_request_limit must be positive")
        if self.lyrics_preview_lines < 0:
            raise ConfigError("lyrics_preview_lines must be non-negative")
