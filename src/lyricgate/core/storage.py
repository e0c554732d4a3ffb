"""Storage collaborator interfaces and in-memory implementations.

The upload workflow and quota tracker only rely on single-record atomic
reads and writes; no transactions are assumed.
"""

import threading
import uuid
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional, Protocol

from .models import Asset, QuotaRecord


class ObjectStore(Protocol):
    """Opaque blob storage."""

    def put(self, owner_id: str, data: bytes, extension: str = "") -> str: ...

    def delete(self, ref: str) -> None: ...

    def exists(self, ref: str) -> bool: ...

    def signed_url(self, ref: str, ttl: timedelta) -> str: ...


class RecordStore(Protocol):
    """Keyed store for song records."""

    def get(self, asset_id: str) -> Optional[Asset]: ...

    def put(self, asset: Asset) -> Asset: ...

    def delete(self, asset_id: str) -> None: ...

    def count_by_owner(self, owner_id: str, confirmed: Optional[bool] = None) -> int: ...

    def list_by_owner(self, owner_id: str, confirmed: bool = True) -> List[Asset]: ...


class CredentialStore(Protocol):
    """Keyed store for API credentials and their quota counters."""

    def get(self, credential_id: str) -> Optional[QuotaRecord]: ...

    def put(self, record: QuotaRecord) -> QuotaRecord: ...

    def find_by_owner(self, owner_id: str) -> Optional[QuotaRecord]: ...


def make_object_ref(owner_id: str, extension: str = "") -> str:
    """Build a unique ``owner/timestamp_suffix.ext`` object name."""
    millis = int(datetime.now(timezone.utc).timestamp() * 1000)
    name = f"{owner_id}/{millis}_{uuid.uuid4().hex[:8]}"
    return f"{name}.{extension}" if extension else name


class InMemoryObjectStore:
    """Object store that keeps blobs in a dict."""

    def __init__(self):
        self.objects: Dict[str, bytes] = {}
        self._lock = threading.Lock()

    def put(self, owner_id: str, data: bytes, extension: str = "") -> str:
        ref = make_object_ref(owner_id, extension)
        with self._lock:
            self.objects[ref] = bytes(data)
        return ref

    def delete(self, ref: str) -> None:
        with self._lock:
            self.objects.pop(ref, None)

    def exists(self, ref: str) -> bool:
        with self._lock:
            return ref in self.objects

    def signed_url(self, ref: str, ttl: timedelta) -> str:
        expires = int((datetime.now(timezone.utc) + ttl).timestamp())
        return f"memory://{ref}?expires={expires}"


class InMemoryRecordStore:
    """Record store backed by a dict keyed by asset id."""

    def __init__(self):
        self.records: Dict[str, Asset] = {}
        self._lock = threading.Lock()

    def get(self, asset_id: str) -> Optional[Asset]:
        with self._lock:
            return self.records.get(asset_id)

    def put(self, asset: Asset) -> Asset:
        with self._lock:
            self.records[asset.id] = asset
        return asset

    def delete(self, asset_id: str) -> None:
        with self._lock:
            self.records.pop(asset_id, None)

    def count_by_owner(self, owner_id: str, confirmed: Optional[bool] = None) -> int:
        return len(self._select(owner_id, confirmed))

    def list_by_owner(self, owner_id: str, confirmed: bool = True) -> List[Asset]:
        return self._select(owner_id, confirmed)

    def _select(self, owner_id: str, confirmed: Optional[bool]) -> List[Asset]:
        with self._lock:
            return [
                a
                for a in self.records.values()
                if a.owner_id == owner_id
                and (confirmed is None or a.confirmed == confirmed)
            ]


class InMemoryCredentialStore:
    """Credential store backed by a dict keyed by credential id."""

    def __init__(self):
        self.records: Dict[str, QuotaRecord] = {}
        self._lock = threading.Lock()

    def get(self, credential_id: str) -> Optional[QuotaRecord]:
        with self._lock:
            return self.records.get(credential_id)

    def put(self, record: QuotaRecord) -> QuotaRecord:
        with self._lock:
            self.records[record.credential_id] = record
        return record

    def find_by_owner(self, owner_id: str) -> Optional[QuotaRecord]:
        with self._lock:
            for record in self.records.values():
                if record.owner_id == owner_id:
                    return record
        return None
