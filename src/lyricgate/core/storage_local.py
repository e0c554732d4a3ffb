"""Filesystem-backed storage used by the command-line interface."""

import hashlib
import hmac
import json
import threading
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional
from urllib.parse import parse_qs, unquote, urlsplit

from ..config import get_signing_key
from ..exceptions import StorageError
from ..utils.logging import get_logger
from .models import Asset, QuotaRecord
from .serialization import (
    asset_from_json,
    asset_to_json,
    quota_record_from_json,
    quota_record_to_json,
)
from .storage import make_object_ref

logger = get_logger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class LocalObjectStore:
    """Stores blobs as files under a root directory."""

    def __init__(
        self,
        root: Path,
        *,
        signing_key: Optional[bytes] = None,
        now_fn: Callable[[], datetime] = _utcnow,
    ):
        self.root = Path(root)
        self.root.mkdir(parents=True, exist_ok=True)
        self.signing_key = signing_key or get_signing_key()
        self.now_fn = now_fn

    def _path(self, ref: str) -> Path:
        path = (self.root / ref).resolve()
        if self.root.resolve() not in path.parents:
            raise StorageError(f"Object reference escapes store root: {ref}")
        return path

    def put(self, owner_id: str, data: bytes, extension: str = "") -> str:
        ref = make_object_ref(owner_id, extension)
        path = self._path(ref)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except OSError as e:
            raise StorageError(f"Failed to store object {ref}: {e}")
        logger.info(f"Stored object: {ref}")
        return ref

    def delete(self, ref: str) -> None:
        path = self._path(ref)
        try:
            path.unlink()
            logger.info(f"Deleted object: {ref}")
        except FileNotFoundError:
            pass
        except OSError as e:
            raise StorageError(f"Failed to delete object {ref}: {e}")

    def exists(self, ref: str) -> bool:
        return self._path(ref).is_file()

    def _signature(self, ref: str, expires: int) -> str:
        message = f"{ref}:{expires}".encode()
        return hmac.new(self.signing_key, message, hashlib.sha256).hexdigest()

    def signed_url(self, ref: str, ttl: timedelta) -> str:
        expires = int((self.now_fn() + ttl).timestamp())
        sig = self._signature(ref, expires)
        return f"{self._path(ref).as_uri()}?expires={expires}&sig={sig}"

    def verify_signed_url(self, url: str) -> bool:
        """Check a URL produced by ``signed_url`` is authentic and unexpired."""
        parts = urlsplit(url)
        query = parse_qs(parts.query)
        try:
            expires = int(query["expires"][0])
            sig = query["sig"][0]
        except (KeyError, IndexError, ValueError):
            return False
        path = Path(unquote(parts.path))
        try:
            ref = path.relative_to(self.root.resolve()).as_posix()
        except ValueError:
            return False
        if expires < int(self.now_fn().timestamp()):
            return False
        return hmac.compare_digest(sig, self._signature(ref, expires))


class _JsonFile:
    """A dict of JSON records persisted to a single file."""

    def __init__(self, path: Path):
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()

    def load(self) -> Dict[str, Dict[str, Any]]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                return json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise StorageError(f"Failed to load {self.path}: {e}")

    def save(self, data: Dict[str, Dict[str, Any]]) -> None:
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            with open(tmp, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            tmp.replace(self.path)
        except OSError as e:
            raise StorageError(f"Failed to save {self.path}: {e}")


class JsonRecordStore(_JsonFile):
    """Song records kept in a JSON file keyed by asset id."""

    def get(self, asset_id: str) -> Optional[Asset]:
        with self._lock:
            data = self.load().get(asset_id)
        return asset_from_json(data) if data else None

    def put(self, asset: Asset) -> Asset:
        with self._lock:
            records = self.load()
            records[asset.id] = asset_to_json(asset)
            self.save(records)
        return asset

    def delete(self, asset_id: str) -> None:
        with self._lock:
            records = self.load()
            if records.pop(asset_id, None) is not None:
                self.save(records)

    def count_by_owner(self, owner_id: str, confirmed: Optional[bool] = None) -> int:
        return len(self._select(owner_id, confirmed))

    def list_by_owner(self, owner_id: str, confirmed: bool = True) -> List[Asset]:
        return self._select(owner_id, confirmed)

    def _select(self, owner_id: str, confirmed: Optional[bool]) -> List[Asset]:
        with self._lock:
            records = self.load()
        assets = [asset_from_json(r) for r in records.values()]
        return [
            a
            for a in assets
            if a.owner_id == owner_id
            and (confirmed is None or a.confirmed == confirmed)
        ]


class JsonCredentialStore(_JsonFile):
    """API credentials kept in a JSON file keyed by credential id."""

    def get(self, credential_id: str) -> Optional[QuotaRecord]:
        with self._lock:
            data = self.load().get(credential_id)
        return quota_record_from_json(data) if data else None

    def put(self, record: QuotaRecord) -> QuotaRecord:
        with self._lock:
            records = self.load()
            records[record.credential_id] = quota_record_to_json(record)
            self.save(records)
        return record

    def find_by_owner(self, owner_id: str) -> Optional[QuotaRecord]:
        with self._lock:
            records = self.load()
        for data in records.values():
            if data.get("owner_id") == owner_id:
                return quota_record_from_json(data)
        return None
