"""Utility modules."""

from .logging import setup_logging, get_logger
from .validation import (
    get_file_extension,
    validate_audio_file,
    validate_video_file,
    validate_frequency_weight,
    validate_sync_offset,
    validate_track_info,
)

__all__ = [
    "setup_logging",
    "get_logger",
    "get_file_extension",
    "validate_audio_file",
    "validate_video_file",
    "validate_frequency_weight",
    "validate_sync_offset",
    "validate_track_info",
]
