"""Lyrics-gated song upload workflow.

Each upload attempt runs as a sequential pipeline::

    REQUESTED -> VALIDATING -> LYRICS_CHECKED -> STORED -> CONFIRMED | REJECTED

Synced lyrics are looked up *before* anything is written to the object
store, so a track without usable lyrics never costs storage. A stored song
stays pending (``confirmed=False``) and hidden from listings until the
caller confirms it; rejecting it deletes the object and then the record.
"""

import uuid
from dataclasses import replace
from datetime import datetime, timezone
from enum import Enum
from functools import partial
from typing import Callable, List, Optional

from ..config import WorkflowConfig
from ..exceptions import (
    CapacityExceededError,
    LyricsUnavailableError,
    NotFoundError,
)
from ..utils.logging import get_logger
from ..utils.validation import (
    get_file_extension,
    validate_audio_file,
    validate_frequency_weight,
    validate_sync_offset,
    validate_track_info,
)
from .lrc import lyrics_preview
from .lyrics_fetch import acquire_synced
from .lrclib import LrcLibClient
from .models import Asset, LyricsResult, UploadFile, UploadReceipt
from .storage import ObjectStore, RecordStore

logger = get_logger(__name__)


class UploadState(str, Enum):
    """Stages of a single upload attempt."""

    REQUESTED = "REQUESTED"
    VALIDATING = "VALIDATING"
    LYRICS_CHECKED = "LYRICS_CHECKED"
    STORED = "STORED"
    CONFIRMED = "CONFIRMED"
    REJECTED = "REJECTED"


_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UploadWorkflow:
    """Uploads, confirms and manages an owner's songs."""

    def __init__(
        self,
        object_store: ObjectStore,
        record_store: RecordStore,
        *,
        config: Optional[WorkflowConfig] = None,
        lyrics_fn: Optional[Callable[[str, str], LyricsResult]] = None,
        validate_fn: Callable[[UploadFile], UploadFile] = validate_audio_file,
        now_fn: Callable[[], datetime] = _utcnow,
    ):
        self.object_store = object_store
        self.record_store = record_store
        self.config = config or WorkflowConfig()
        self.lyrics_fn = lyrics_fn or partial(
            acquire_synced, client=LrcLibClient(timeout=self.config.lyrics_timeout)
        )
        self.validate_fn = validate_fn
        self.now_fn = now_fn

    def _transition(self, asset_ref: str, state: UploadState) -> None:
        logger.debug(f"Upload {asset_ref}: {state.value}")

    def _check_capacity(self, owner_id: str) -> None:
        # Soft limit: concurrent calls may race past this check
        current = self.record_store.count_by_owner(owner_id, confirmed=True)
        if current >= self.config.max_assets_per_owner:
            logger.info(f"Owner {owner_id} already has {current} songs")
            raise CapacityExceededError(self.config.max_assets_per_owner)

    # ------------------------------------------------------------------
    # Two-phase upload
    # ------------------------------------------------------------------

    def upload(
        self, file: UploadFile, title: str, artist: str, owner_id: str
    ) -> UploadReceipt:
        """Store a song as pending once synced lyrics are confirmed to exist.

        Raises:
            CapacityExceededError: owner already has the maximum number of songs
            ValidationError: bad file, title or artist
            LyricsUnavailableError: no synced lyrics for the track
        """
        attempt = f"{owner_id}:{title}"
        self._transition(attempt, UploadState.REQUESTED)

        self._check_capacity(owner_id)

        self._transition(attempt, UploadState.VALIDATING)
        self.validate_fn(file)
        title, artist = validate_track_info(title, artist)

        lyrics = self.lyrics_fn(artist, title)
        if not lyrics.is_synced:
            logger.info(
                f"Upload rejected: no synced lyrics available for '{title}' by '{artist}'"
            )
            raise LyricsUnavailableError(artist, title)
        self._transition(attempt, UploadState.LYRICS_CHECKED)

        fmt = get_file_extension(file.filename)
        object_ref = self.object_store.put(owner_id, file.content, fmt)

        asset = Asset(
            id=uuid.uuid4().hex,
            owner_id=owner_id,
            title=title,
            artist=artist,
            object_ref=object_ref,
            byte_size=file.size,
            format=fmt,
            timeline=tuple(lyrics.timeline or ()),
            raw_text=lyrics.raw_text,
            classification=lyrics.classification,
            confirmed=False,
            created_at=self.now_fn(),
        )
        try:
            self.record_store.put(asset)
        except Exception:
            # No compensation here; the object is left for an external sweep
            logger.error(f"Record write failed, orphaned object: {object_ref}")
            raise
        self._transition(asset.id, UploadState.STORED)

        logger.info(
            f"Song uploaded: {title} by {artist} for {owner_id} "
            f"(synced lyrics: {len(asset.timeline)} lines)"
        )
        return UploadReceipt(
            asset_id=asset.id,
            title=asset.title,
            artist=asset.artist,
            lyrics_preview=lyrics_preview(
                asset.timeline, asset.raw_text, self.config.lyrics_preview_lines
            ),
            classification=asset.classification,
            line_count=len(asset.timeline),
        )

    def _get_owned(self, asset_id: str, owner_id: str) -> Asset:
        asset = self.record_store.get(asset_id)
        if asset is None or asset.owner_id != owner_id:
            raise NotFoundError(f"Song not found: {asset_id}")
        return asset

    def _get_pending(self, asset_id: str, owner_id: str) -> Asset:
        asset = self._get_owned(asset_id, owner_id)
        if asset.confirmed:
            raise NotFoundError(f"No pending song: {asset_id}")
        return asset

    def _get_confirmed(self, asset_id: str, owner_id: str) -> Asset:
        asset = self._get_owned(asset_id, owner_id)
        if not asset.confirmed:
            raise NotFoundError(f"Song not found: {asset_id}")
        return asset

    def confirm(self, asset_id: str, owner_id: str) -> Asset:
        """Make a pending song durable and visible.

        Capacity is checked again here since several uploads can be pending
        at once. A song refused for capacity stays pending and can still be
        rejected.
        """
        asset = self._get_pending(asset_id, owner_id)
        self._check_capacity(owner_id)
        if not self.object_store.exists(asset.object_ref):
            # Left behind by an interrupted rejection
            raise NotFoundError(f"Audio for song {asset_id} no longer exists")
        asset = replace(asset, confirmed=True, updated_at=self.now_fn())
        self.record_store.put(asset)
        self._transition(asset_id, UploadState.CONFIRMED)
        logger.info(f"Lyrics confirmed for song: {asset_id}")
        return asset

    def reject(self, asset_id: str, owner_id: str) -> None:
        """Discard a pending song: object first, then the record."""
        asset = self._get_pending(asset_id, owner_id)
        self._remove(asset)
        self._transition(asset_id, UploadState.REJECTED)
        logger.info(f"Song upload rejected and deleted: {asset_id}")

    def confirm_lyrics(
        self, asset_id: str, owner_id: str, confirmed: bool
    ) -> Optional[Asset]:
        """Confirm or reject a pending song in one call."""
        if confirmed:
            return self.confirm(asset_id, owner_id)
        self.reject(asset_id, owner_id)
        return None

    def _remove(self, asset: Asset) -> None:
        # Best effort: an interrupted removal leaves at worst an orphaned object
        try:
            self.object_store.delete(asset.object_ref)
        except Exception as e:
            logger.error(f"Failed to delete object {asset.object_ref}: {e}")
        try:
            self.record_store.delete(asset.id)
        except Exception as e:
            logger.error(f"Failed to delete record {asset.id}: {e}")

    # ------------------------------------------------------------------
    # Confirmed songs
    # ------------------------------------------------------------------

    def delete(self, asset_id: str, owner_id: str) -> None:
        asset = self._get_confirmed(asset_id, owner_id)
        self._remove(asset)
        logger.info(f"Song deleted: {asset_id} by {owner_id}")

    def update_weight(self, asset_id: str, owner_id: str, weight: int) -> Asset:
        validate_frequency_weight(weight, self.config.frequency_weight_range)
        asset = self._get_confirmed(asset_id, owner_id)
        asset = replace(asset, frequency_weight=weight, updated_at=self.now_fn())
        self.record_store.put(asset)
        logger.info(f"Song weight updated: {asset_id} to {weight} by {owner_id}")
        return asset

    def update_settings(
        self, asset_id: str, owner_id: str, frequency_weight: int, sync_offset_ms: int
    ) -> Asset:
        validate_frequency_weight(frequency_weight, self.config.frequency_weight_range)
        validate_sync_offset(sync_offset_ms, self.config.sync_offset_range)
        asset = self._get_confirmed(asset_id, owner_id)
        asset = replace(
            asset,
            frequency_weight=frequency_weight,
            sync_offset_ms=sync_offset_ms,
            updated_at=self.now_fn(),
        )
        self.record_store.put(asset)
        logger.info(
            f"Song settings updated: {asset_id} - weight={frequency_weight}, "
            f"offset={sync_offset_ms}ms by {owner_id}"
        )
        return asset

    def get_asset(self, asset_id: str, owner_id: str) -> Asset:
        return self._get_owned(asset_id, owner_id)

    def list_assets(self, owner_id: str) -> List[Asset]:
        assets = self.record_store.list_by_owner(owner_id, confirmed=True)
        return sorted(assets, key=lambda a: a.created_at or _EPOCH)

    def asset_count(self, owner_id: str) -> int:
        return self.record_store.count_by_owner(owner_id, confirmed=True)

    def latest_update_time(self, owner_id: str) -> Optional[datetime]:
        """Most recent change across the owner's confirmed songs."""
        times = [
            a.last_modified
            for a in self.record_store.list_by_owner(owner_id, confirmed=True)
            if a.last_modified is not None
        ]
        return max(times) if times else None

    def signed_url(self, asset: Asset) -> str:
        if not self.object_store.exists(asset.object_ref):
            raise NotFoundError(f"Audio for song {asset.id} no longer exists")
        return self.object_store.signed_url(asset.object_ref, self.config.signed_url_ttl)
