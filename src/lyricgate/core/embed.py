"""API-key access for the embeddable player.

Every call validates the key and checks its daily quota before doing any
work, then counts the request.
"""

from datetime import datetime, timezone
from functools import partial
from typing import Callable, Optional

from ..config import WorkflowConfig
from ..exceptions import NotFoundError, QuotaExceededError
from ..utils.logging import get_logger
from ..utils.validation import validate_track_info
from .lrc import apply_sync_offset
from .lrclib import LrcLibClient
from .lyrics_fetch import acquire_synced
from .models import EmbedCheck, EmbedSong, EmbedSongs, LyricsResult
from .quota import QuotaTracker
from .upload import UploadWorkflow

logger = get_logger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class EmbedService:
    """Quota-guarded read access to an owner's confirmed songs."""

    def __init__(
        self,
        tracker: QuotaTracker,
        workflow: UploadWorkflow,
        *,
        config: Optional[WorkflowConfig] = None,
        lyrics_fn: Optional[Callable[[str, str], LyricsResult]] = None,
        now_fn: Callable[[], datetime] = _utcnow,
    ):
        self.tracker = tracker
        self.workflow = workflow
        self.config = config or workflow.config
        self.lyrics_fn = lyrics_fn or partial(
            acquire_synced, client=LrcLibClient(timeout=self.config.lyrics_timeout)
        )
        self.now_fn = now_fn

    def _authorize(self, api_key: str) -> str:
        owner_id = self.tracker.validate(api_key)
        if self.tracker.is_exceeded(api_key, self.config.daily_request_limit):
            logger.warning(f"Rate limit exceeded for owner {owner_id}")
            raise QuotaExceededError(
                f"Daily limit of {self.config.daily_request_limit} requests exceeded"
            )
        self.tracker.increment(api_key)
        return owner_id

    def check_changes(self, api_key: str) -> EmbedCheck:
        """Cheap poll so players know whether to refetch songs."""
        owner_id = self._authorize(api_key)
        last_update = self.workflow.latest_update_time(owner_id)
        return EmbedCheck(has_changes=last_update is not None, last_update=last_update)

    def get_songs(self, api_key: str) -> EmbedSongs:
        owner_id = self._authorize(api_key)
        songs = []
        for asset in self.workflow.list_assets(owner_id):
            try:
                audio_url = self.workflow.signed_url(asset)
            except NotFoundError:
                logger.warning(f"Skipping song {asset.id}: audio object is missing")
                continue
            songs.append(
                EmbedSong(
                    id=asset.id,
                    title=asset.title,
                    artist=asset.artist,
                    audio_url=audio_url,
                    frequency_weight=asset.frequency_weight,
                    sync_offset_ms=asset.sync_offset_ms,
                    classification=asset.classification,
                    timeline=tuple(
                        apply_sync_offset(asset.timeline, asset.sync_offset_ms)
                    ),
                )
            )
        last_update = self.workflow.latest_update_time(owner_id) or self.now_fn()
        logger.debug(f"Embed songs returned for owner: {owner_id} ({len(songs)} songs)")
        return EmbedSongs(
            owner_id=owner_id,
            songs=tuple(songs),
            total=len(songs),
            last_update=last_update,
        )

    def lookup_lyrics(self, api_key: str, artist: str, title: str) -> LyricsResult:
        """Quota-guarded lyrics lookup; the quota is checked before LRCLIB is called."""
        self._authorize(api_key)
        title, artist = validate_track_info(title, artist)
        return self.lyrics_fn(artist, title)
