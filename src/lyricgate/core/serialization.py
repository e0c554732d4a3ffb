"""JSON serialization for songs, timelines and credentials."""

from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .models import Asset, QuotaRecord, SyncClassification, TimedLine


def _dt_to_json(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def _dt_from_json(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


def timeline_to_json(timeline: Iterable[TimedLine]) -> List[dict]:
    """Convert timeline entries into JSON-serializable dicts."""
    return [{"offset_ms": e.offset_ms, "text": e.text} for e in timeline]


def timeline_from_json(data: Optional[List[dict]]) -> Tuple[TimedLine, ...]:
    """Convert JSON data back into TimedLine objects."""
    return tuple(
        TimedLine(offset_ms=int(item["offset_ms"]), text=item["text"])
        for item in data or []
    )


def asset_to_json(asset: Asset) -> Dict[str, Any]:
    return {
        "id": asset.id,
        "owner_id": asset.owner_id,
        "title": asset.title,
        "artist": asset.artist,
        "object_ref": asset.object_ref,
        "byte_size": asset.byte_size,
        "format": asset.format,
        "timeline": timeline_to_json(asset.timeline),
        "raw_text": asset.raw_text,
        "classification": asset.classification.value,
        "frequency_weight": asset.frequency_weight,
        "sync_offset_ms": asset.sync_offset_ms,
        "confirmed": asset.confirmed,
        "created_at": _dt_to_json(asset.created_at),
        "updated_at": _dt_to_json(asset.updated_at),
    }


def asset_from_json(data: Dict[str, Any]) -> Asset:
    return Asset(
        id=data["id"],
        owner_id=data["owner_id"],
        title=data["title"],
        artist=data["artist"],
        object_ref=data["object_ref"],
        byte_size=int(data.get("byte_size", 0)),
        format=data.get("format", ""),
        timeline=timeline_from_json(data.get("timeline")),
        raw_text=data.get("raw_text"),
        classification=SyncClassification(data.get("classification", "SYNCED")),
        frequency_weight=int(data.get("frequency_weight", 3)),
        sync_offset_ms=int(data.get("sync_offset_ms", 0)),
        confirmed=bool(data.get("confirmed", False)),
        created_at=_dt_from_json(data.get("created_at")),
        updated_at=_dt_from_json(data.get("updated_at")),
    )


def quota_record_to_json(record: QuotaRecord) -> Dict[str, Any]:
    return {
        "credential_id": record.credential_id,
        "owner_id": record.owner_id,
        "daily_count": record.daily_count,
        "reset_at": _dt_to_json(record.reset_at),
        "created_at": _dt_to_json(record.created_at),
        "last_used": _dt_to_json(record.last_used),
    }


def quota_record_from_json(data: Dict[str, Any]) -> QuotaRecord:
    return QuotaRecord(
        credential_id=data["credential_id"],
        owner_id=data["owner_id"],
        daily_count=int(data.get("daily_count", 0)),
        reset_at=_dt_from_json(data.get("reset_at")),
        created_at=_dt_from_json(data.get("created_at")),
        last_used=_dt_from_json(data.get("last_used")),
    )
