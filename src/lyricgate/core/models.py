"""Data models for lyrics, uploaded songs and API credentials."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, Tuple

from ..config import DEFAULT_FREQUENCY_WEIGHT


class SyncClassification(str, Enum):
    """What kind of lyrics data was obtained for a track."""

    SYNCED = "SYNCED"
    UNSYNCED = "UNSYNCED"
    ABSENT = "ABSENT"


@dataclass(frozen=True)
class TimedLine:
    """A single lyric line placed on the song timeline."""

    offset_ms: int
    text: str

    def __post_init__(self):
        if self.offset_ms < 0:
            raise ValueError("TimedLine offset must be non-negative")


@dataclass(frozen=True)
class LyricsResult:
    """Outcome of a lyrics lookup."""

    raw_text: Optional[str] = None
    timeline: Optional[Tuple[TimedLine, ...]] = None
    classification: SyncClassification = SyncClassification.ABSENT

    def __post_init__(self):
        if self.timeline is not None and not isinstance(self.timeline, tuple):
            object.__setattr__(self, "timeline", tuple(self.timeline))
        has_timeline = bool(self.timeline)
        if has_timeline != (self.classification == SyncClassification.SYNCED):
            raise ValueError(
                "classification must be SYNCED exactly when the timeline is non-empty"
            )

    @property
    def is_synced(self) -> bool:
        return self.classification == SyncClassification.SYNCED

    @classmethod
    def absent(cls) -> "LyricsResult":
        return cls()


@dataclass(frozen=True)
class UploadFile:
    """An uploaded file as received from the caller."""

    filename: str
    content: bytes
    content_type: Optional[str] = None

    @property
    def size(self) -> int:
        return len(self.content)


@dataclass(frozen=True)
class Asset:
    """An uploaded song with its lyrics.

    A freshly uploaded asset has ``confirmed=False`` and already holds a live
    object-store reference. It only shows up in listings once confirmed.
    """

    id: str
    owner_id: str
    title: str
    artist: str
    object_ref: str
    byte_size: int
    format: str
    timeline: Tuple[TimedLine, ...] = ()
    raw_text: Optional[str] = None
    classification: SyncClassification = SyncClassification.SYNCED
    frequency_weight: int = DEFAULT_FREQUENCY_WEIGHT
    sync_offset_ms: int = 0
    confirmed: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def last_modified(self) -> Optional[datetime]:
        return self.updated_at if self.updated_at is not None else self.created_at


# An Asset that has not been confirmed yet
PendingAsset = Asset


@dataclass(frozen=True)
class UploadReceipt:
    """Returned by a successful upload so the caller can preview lyrics."""

    asset_id: str
    title: str
    artist: str
    lyrics_preview: str
    classification: SyncClassification
    line_count: int


@dataclass(frozen=True)
class QuotaRecord:
    """API credential with its daily request counter."""

    credential_id: str
    owner_id: str
    daily_count: int = 0
    reset_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    last_used: Optional[datetime] = None

    def __post_init__(self):
        if self.daily_count < 0:
            raise ValueError("daily_count must be non-negative")


@dataclass(frozen=True)
class EmbedSong:
    """A confirmed song as handed to the embeddable player."""

    id: str
    title: str
    artist: str
    audio_url: str
    frequency_weight: int
    sync_offset_ms: int
    classification: SyncClassification
    timeline: Tuple[TimedLine, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class EmbedCheck:
    has_changes: bool
    last_update: Optional[datetime]


@dataclass(frozen=True)
class EmbedSongs:
    owner_id: str
    songs: Tuple[EmbedSong, ...]
    total: int
    last_update: datetime
