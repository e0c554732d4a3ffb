"""Tests for API credentials and the daily quota."""

from dataclasses import replace
from datetime import datetime, timezone

import pytest

from lyricgate.core import quota
from lyricgate.exceptions import InvalidCredentialError, NotFoundError


def test_generate_key_is_url_safe_and_fixed_length():
    key = quota.generate_key()
    assert len(key) == quota.KEY_LENGTH
    assert all(c.isalnum() or c in "-_" for c in key)
    assert key != quota.generate_key()


def test_create_and_validate_credential(tracker, clock):
    record = tracker.create_credential("owner-1")
    assert record.daily_count == 0
    assert record.reset_at is None

    clock.advance(minutes=5)
    assert tracker.validate(record.credential_id) == "owner-1"
    stored = tracker.store.get(record.credential_id)
    assert stored.last_used == clock.now


def test_key_for_owner(tracker):
    record = tracker.create_credential("owner-1")
    assert tracker.key_for_owner("owner-1") == record.credential_id
    assert tracker.key_for_owner("someone-else") is None


def test_unknown_credential_is_not_found(tracker):
    with pytest.raises(InvalidCredentialError):
        tracker.validate("missing")
    with pytest.raises(NotFoundError):
        tracker.is_exceeded("missing", 10)
    with pytest.raises(NotFoundError):
        tracker.increment("missing")


def test_fresh_credential_not_exceeded(tracker):
    key = tracker.create_credential("o").credential_id
    assert tracker.is_exceeded(key, 1) is False


def test_limit_reached_after_daily_limit_increments(tracker):
    key = tracker.create_credential("o").credential_id
    for _ in range(1000):
        tracker.increment(key)
    assert tracker.store.get(key).daily_count == 1000
    assert tracker.is_exceeded(key, 1000) is True
    assert tracker.is_exceeded(key, 1001) is False


def test_day_rollover_resets_check_before_increment(tracker, clock):
    key = tracker.create_credential("o").credential_id
    for _ in range(5):
        tracker.increment(key)
    assert tracker.is_exceeded(key, 5) is True

    clock.now = datetime(2024, 3, 15, 0, 0, 1, tzinfo=timezone.utc)
    assert tracker.is_exceeded(key, 5) is False
    # The stored counter is only physically reset by the next increment
    assert tracker.store.get(key).daily_count == 5

    record = tracker.increment(key)
    assert record.daily_count == 1
    assert record.reset_at == clock.now


def test_same_day_increments_are_monotonic(tracker, clock):
    key = tracker.create_credential("o").credential_id
    counts = []
    for _ in range(3):
        clock.advance(hours=1)
        counts.append(tracker.increment(key).daily_count)
    assert counts == [1, 2, 3]


def test_naive_reset_at_treated_as_utc(tracker, credential_store, clock):
    key = tracker.create_credential("o").credential_id
    record = credential_store.get(key)
    credential_store.put(
        replace(record, daily_count=3, reset_at=datetime(2024, 3, 14, 1, 0))
    )
    assert tracker.is_exceeded(key, 3) is True


def test_record_and_check(tracker):
    key = tracker.create_credential("o").credential_id
    assert tracker.record_and_check(key, 2) is True
    assert tracker.record_and_check(key, 2) is True
    assert tracker.record_and_check(key, 2) is False
    assert tracker.store.get(key).daily_count == 2
