"""LRC parsing for synced lyrics.

This module handles:
- LRC timestamp parsing
- Metadata tag filtering
- Rendering a timeline back to LRC markup
- Short text previews of a timeline
"""

import re
from typing import Iterable, List, Optional, Sequence

from ..utils.logging import get_logger
from .models import TimedLine

logger = get_logger(__name__)

# ----------------------
# LRC timestamp regex
# ----------------------
# Groups are ASCII digits only, so any matched token converts to ms.
# Anything else in brackets is simply not a token.
_LRC_TS_RE = re.compile(
    r"""
    \[                      # opening bracket
    (?P<min>[0-9]{2})       # minutes
    :
    (?P<sec>[0-9]{2})       # seconds
    [.:]                    # fraction separator
    (?P<frac>[0-9]{2,3})    # centiseconds or milliseconds
    \]                      # closing bracket
    """,
    re.VERBOSE,
)

# ID tags such as [ti:Title] or [length:03:20]
_METADATA_RE = re.compile(r"\[(ti|ar|al|au|length|by|offset|re|ve):.*\]")

NO_LYRICS_PREVIEW = "No lyrics available"


def _timestamp_to_ms(match: re.Match) -> int:
    """Convert a matched timestamp token to milliseconds."""
    fraction = match["frac"]
    frac_ms = int(fraction) * 10 if len(fraction) == 2 else int(fraction)
    return int(match["min"]) * 60_000 + int(match["sec"]) * 1000 + frac_ms


def is_metadata_line(line: str) -> bool:
    """Check if a whole line is an LRC ID tag."""
    return _METADATA_RE.fullmatch(line) is not None


def parse_lrc(markup: Optional[str]) -> List[TimedLine]:
    """Parse LRC markup into a timeline sorted by offset.

    Lines without a usable timestamp, with empty text, or that are ID tags
    are dropped. A line with several timestamps yields one entry per
    timestamp, all sharing the same text.
    """
    entries: List[TimedLine] = []
    if not markup:
        return entries

    for raw_line in markup.splitlines():
        line = raw_line.strip()
        if not line:
            continue

        # Only the leading run of tokens counts; a malformed token ends it
        offsets: List[int] = []
        pos = 0
        match = _LRC_TS_RE.match(line)
        while match:
            offsets.append(_timestamp_to_ms(match))
            pos = match.end()
            match = _LRC_TS_RE.match(line, pos)
        text = line[pos:].strip()

        if not offsets or not text or is_metadata_line(line):
            continue

        entries.extend(TimedLine(offset_ms=o, text=text) for o in offsets)

    # sorted() is stable, so equal offsets keep their order of appearance
    entries = sorted(entries, key=lambda e: e.offset_ms)
    logger.debug(f"Parsed {len(entries)} lyric lines from LRC content")
    return entries


def to_timestamp(milliseconds: int) -> str:
    """Convert milliseconds to an LRC ``[mm:ss.xx]`` timestamp."""
    total_seconds = milliseconds // 1000
    minutes, seconds = divmod(total_seconds, 60)
    centiseconds = (milliseconds % 1000) // 10
    return f"[{minutes:02d}:{seconds:02d}.{centiseconds:02d}]"


def format_lrc(timeline: Iterable[TimedLine]) -> str:
    """Render a timeline back to LRC markup, one timestamp per line."""
    return "\n".join(f"{to_timestamp(e.offset_ms)}{e.text}" for e in timeline)


def apply_sync_offset(
    timeline: Iterable[TimedLine], offset_ms: int
) -> List[TimedLine]:
    """Shift every line by the user's sync offset, clamping at zero."""
    if not offset_ms:
        return list(timeline)
    return [
        TimedLine(offset_ms=max(e.offset_ms + offset_ms, 0), text=e.text)
        for e in timeline
    ]


def lyrics_preview(
    timeline: Optional[Sequence[TimedLine]],
    raw_text: Optional[str],
    lines: int = 4,
) -> str:
    """First few lyric lines, from the timeline if present, else raw text."""
    if timeline:
        return "\n".join(e.text for e in list(timeline)[:lines])
    if raw_text:
        return "\n".join(raw_text.split("\n")[:lines])
    return NO_LYRICS_PREVIEW
