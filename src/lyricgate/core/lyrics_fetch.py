"""Synced lyrics acquisition from LRCLIB.

Absence of lyrics is an expected outcome, so nothing here raises: every
failure mode of the lyrics source is classified as ``ABSENT``.
"""

from typing import Any, Dict, Optional

from ..utils.logging import get_logger
from .lrc import parse_lrc
from .lrclib import LrcLibClient
from .models import LyricsResult, SyncClassification

logger = get_logger(__name__)


def _text_field(record: Dict[str, Any], key: str) -> Optional[str]:
    value = record.get(key)
    if not isinstance(value, str) or not value.strip():
        return None
    return value


def classify_record(record: Optional[Dict[str, Any]]) -> LyricsResult:
    """Turn an LRCLIB record into a classified LyricsResult."""
    if not record:
        return LyricsResult.absent()

    plain = _text_field(record, "plainLyrics")
    synced = _text_field(record, "syncedLyrics")

    if synced:
        timeline = parse_lrc(synced)
        if not timeline:
            # Provider claims synced lyrics but nothing parses
            return LyricsResult.absent()
        return LyricsResult(
            raw_text=plain,
            timeline=tuple(timeline),
            classification=SyncClassification.SYNCED,
        )

    if plain:
        return LyricsResult(raw_text=plain, classification=SyncClassification.UNSYNCED)

    return LyricsResult.absent()


def acquire_synced(
    artist: str, title: str, client: Optional[LrcLibClient] = None
) -> LyricsResult:
    """Look up lyrics for a track with a single bounded LRCLIB call."""
    client = client or LrcLibClient()
    logger.debug(f"Checking synced lyrics availability for '{title}' by '{artist}'")

    result = classify_record(client.get_lyrics(artist, title))

    if result.is_synced:
        logger.info(
            f"Found synced lyrics for '{title}' by '{artist}' "
            f"({len(result.timeline or ())} lines)"
        )
    elif result.classification == SyncClassification.UNSYNCED:
        logger.info(f"Only unsynced lyrics available for '{title}' by '{artist}'")
    else:
        logger.info(f"No lyrics available for '{title}' by '{artist}'")
    return result


def search_synced(query: str, client: Optional[LrcLibClient] = None) -> LyricsResult:
    """Classify the first LRCLIB search hit for a free-text query."""
    client = client or LrcLibClient()
    items = client.search_lyrics(query)
    if not items:
        logger.info(f"No search results for '{query}'")
        return LyricsResult.absent()
    return classify_record(items[0])
