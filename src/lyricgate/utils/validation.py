"""Validation utilities."""

from typing import Optional, Sequence, Tuple

from ..config import (
    AUDIO_EXTENSIONS,
    AUDIO_MIME_TYPES,
    FREQUENCY_WEIGHT_RANGE,
    MAX_AUDIO_SIZE,
    MAX_VIDEO_SIZE,
    SYNC_OFFSET_RANGE,
    VIDEO_EXTENSIONS,
    VIDEO_MIME_TYPES,
)
from ..core.models import UploadFile
from ..exceptions import ValidationError


def get_file_extension(filename: Optional[str]) -> str:
    """Lowercase extension without the dot, or '' if there is none."""
    if not filename:
        return ""
    _, dot, ext = filename.rpartition(".")
    if not dot:
        return ""
    return ext.lower()


def is_valid_audio_mime_type(mime_type: Optional[str]) -> bool:
    if not mime_type:
        return False
    mime_type = mime_type.lower()
    return mime_type in AUDIO_MIME_TYPES or mime_type.startswith("audio/")


def _validate_file(
    upload: Optional[UploadFile],
    *,
    max_size: int,
    extensions: Sequence[str],
) -> UploadFile:
    if upload is None or upload.size == 0:
        raise ValidationError("File is required")

    if upload.size > max_size:
        limit_mb = max_size // (1024 * 1024)
        raise ValidationError(
            f"File size exceeds the maximum allowed limit of {limit_mb}MB"
        )

    if get_file_extension(upload.filename) not in extensions:
        raise ValidationError(
            f"Invalid file format. Allowed formats: {', '.join(extensions)}"
        )
    return upload


def validate_audio_file(upload: Optional[UploadFile]) -> UploadFile:
    """Validate an uploaded audio file."""
    upload = _validate_file(
        upload, max_size=MAX_AUDIO_SIZE, extensions=AUDIO_EXTENSIONS
    )

    # A missing content type is accepted; a present one must look like audio
    if upload.content_type is not None and not is_valid_audio_mime_type(
        upload.content_type
    ):
        raise ValidationError("Invalid file type. Please upload an audio file.")
    return upload


def validate_video_file(upload: Optional[UploadFile]) -> UploadFile:
    """Validate an uploaded background video."""
    upload = _validate_file(
        upload, max_size=MAX_VIDEO_SIZE, extensions=VIDEO_EXTENSIONS
    )

    content_type = (upload.content_type or "").lower()
    if content_type not in VIDEO_MIME_TYPES:
        raise ValidationError("Invalid video type. Only MP4 videos are allowed.")
    return upload


def _validate_range(value: int, bounds: Tuple[int, int], label: str) -> int:
    low, high = bounds
    if not low <= value <= high:
        raise ValidationError(f"{label} must be between {low} and {high}")
    return value


def validate_frequency_weight(
    weight: int, bounds: Tuple[int, int] = FREQUENCY_WEIGHT_RANGE
) -> int:
    """Validate song frequency weight."""
    return _validate_range(weight, bounds, "Frequency weight")


def validate_sync_offset(
    offset_ms: int, bounds: Tuple[int, int] = SYNC_OFFSET_RANGE
) -> int:
    """Validate lyrics sync offset in milliseconds."""
    return _validate_range(offset_ms, bounds, "Sync offset")


def validate_track_info(title: str, artist: str) -> Tuple[str, str]:
    """Validate and normalize the title and artist used for lyrics lookup."""
    title = (title or "").strip()
    artist = (artist or "").strip()
    if not title:
        raise ValidationError("Title cannot be empty")
    if not artist:
        raise ValidationError("Artist cannot be empty")
    return title, artist
