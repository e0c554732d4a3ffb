"""Per-credential daily request quota with a UTC-midnight reset.

``is_exceeded`` and ``increment`` are separate calls made in that order by
callers. The pair is not atomic: concurrent requests on one credential can
be under-counted, but a counter is never reset twice in a day.
"""

import base64
import uuid
from dataclasses import replace
from datetime import datetime, timezone
from typing import Callable, Optional

from ..exceptions import InvalidCredentialError
from ..utils.logging import get_logger
from .models import QuotaRecord
from .storage import CredentialStore

logger = get_logger(__name__)

KEY_LENGTH = 32


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _utc_date(value: datetime):
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).date()


def generate_key(now: Optional[datetime] = None) -> str:
    """Generate a new URL-safe API key."""
    now = now or _utcnow()
    raw = uuid.uuid4().hex + format(int(now.timestamp() * 1000), "x")
    return base64.urlsafe_b64encode(raw.encode()).decode().rstrip("=")[:KEY_LENGTH]


class QuotaTracker:
    """Issues API credentials and counts their daily requests."""

    def __init__(
        self,
        store: CredentialStore,
        *,
        now_fn: Callable[[], datetime] = _utcnow,
    ):
        self.store = store
        self.now_fn = now_fn

    def _require(self, credential_id: str) -> QuotaRecord:
        record = self.store.get(credential_id)
        if record is None:
            raise InvalidCredentialError("Invalid API key")
        return record

    def _rollover_due(self, record: QuotaRecord, now: datetime) -> bool:
        if record.reset_at is None:
            return True
        return _utc_date(record.reset_at) < _utc_date(now)

    # ------------------------------------------------------------------
    # Credential lifecycle
    # ------------------------------------------------------------------

    def create_credential(self, owner_id: str) -> QuotaRecord:
        now = self.now_fn()
        record = QuotaRecord(
            credential_id=generate_key(now),
            owner_id=owner_id,
            created_at=now,
        )
        self.store.put(record)
        logger.info(f"API key created for owner: {owner_id}")
        return record

    def validate(self, credential_id: str) -> str:
        """Return the owner of a credential and stamp its last use."""
        record = self._require(credential_id)
        self.store.put(replace(record, last_used=self.now_fn()))
        return record.owner_id

    def key_for_owner(self, owner_id: str) -> Optional[str]:
        record = self.store.find_by_owner(owner_id)
        return record.credential_id if record else None

    # ------------------------------------------------------------------
    # Counting
    # ------------------------------------------------------------------

    def is_exceeded(self, credential_id: str, daily_limit: int) -> bool:
        """Read-only check against the daily limit.

        A stale counter from an earlier UTC day counts as zero even though it
        is only physically reset by the next ``increment``.
        """
        record = self._require(credential_id)
        if self._rollover_due(record, self.now_fn()):
            return False
        return record.daily_count >= daily_limit

    def increment(self, credential_id: str) -> QuotaRecord:
        record = self._require(credential_id)
        now = self.now_fn()
        if self._rollover_due(record, now):
            if record.reset_at is not None:
                logger.debug(f"Daily count reset for credential of {record.owner_id}")
            record = replace(record, daily_count=0, reset_at=now)
        record = replace(record, daily_count=record.daily_count + 1)
        self.store.put(record)
        return record

    def record_and_check(self, credential_id: str, daily_limit: int) -> bool:
        """Check then count one request. Returns False if over the limit."""
        if self.is_exceeded(credential_id, daily_limit):
            logger.warning(f"Daily request limit of {daily_limit} reached")
            return False
        self.increment(credential_id)
        return True
