"""Tests for lyrics acquisition and classification."""

import pytest
import requests

from lyricgate.core import lyrics_fetch
from lyricgate.core.lrclib import LrcLibClient
from lyricgate.core.models import LyricsResult, SyncClassification, TimedLine


class StubClient:
    def __init__(self, record=None, search_items=None):
        self.record = record
        self.search_items = search_items or []
        self.get_calls = 0

    def get_lyrics(self, artist, title):
        self.get_calls += 1
        return self.record

    def search_lyrics(self, query):
        return self.search_items


class TestClassifyRecord:
    def test_synced_record(self, lrclib_record):
        result = lyrics_fetch.classify_record(lrclib_record)
        assert result.classification == SyncClassification.SYNCED
        assert result.timeline[0] == TimedLine(960, "One, two, three, four")
        assert result.raw_text == lrclib_record["plainLyrics"]

    def test_plain_only_is_unsynced(self):
        result = lyrics_fetch.classify_record(
            {"syncedLyrics": "", "plainLyrics": "la la la"}
        )
        assert result.classification == SyncClassification.UNSYNCED
        assert result.raw_text == "la la la"
        assert not result.timeline

    def test_unparseable_synced_is_absent(self):
        result = lyrics_fetch.classify_record(
            {"syncedLyrics": "[ti:Only tags]\nno timestamps here", "plainLyrics": "x"}
        )
        assert result.classification == SyncClassification.ABSENT

    def test_neither_field_is_absent(self):
        result = lyrics_fetch.classify_record({"plainLyrics": None, "syncedLyrics": None})
        assert result.classification == SyncClassification.ABSENT

    def test_whitespace_only_fields_are_absent(self):
        result = lyrics_fetch.classify_record({"plainLyrics": "  ", "syncedLyrics": "\n"})
        assert result.classification == SyncClassification.ABSENT

    def test_non_string_fields_are_ignored(self):
        result = lyrics_fetch.classify_record({"plainLyrics": 42, "syncedLyrics": ["x"]})
        assert result.classification == SyncClassification.ABSENT

    def test_missing_record_is_absent(self):
        assert lyrics_fetch.classify_record(None) == LyricsResult.absent()


def test_acquire_synced_uses_single_call(lrclib_record):
    client = StubClient(record=lrclib_record)
    result = lyrics_fetch.acquire_synced("The Beatles", "Yellow Submarine", client=client)
    assert result.is_synced
    assert client.get_calls == 1


def test_acquire_synced_absent_when_not_found():
    result = lyrics_fetch.acquire_synced("Nobody", "Nothing", client=StubClient())
    assert result.classification == SyncClassification.ABSENT


def test_acquire_synced_timeout_degrades_to_absent(fake_session):
    session = fake_session(requests.exceptions.Timeout("slow"))
    client = LrcLibClient(session=session, timeout=0.1)
    result = lyrics_fetch.acquire_synced("a", "b", client=client)
    assert result.classification == SyncClassification.ABSENT
    assert len(session.calls) == 1


def test_acquire_synced_server_error_degrades_to_absent(fake_session, fake_response):
    client = LrcLibClient(session=fake_session(fake_response(status_code=502)))
    assert lyrics_fetch.acquire_synced("a", "b", client=client).classification == (
        SyncClassification.ABSENT
    )


def test_search_synced_classifies_first_hit(lrclib_record):
    client = StubClient(search_items=[lrclib_record, {"plainLyrics": "other"}])
    assert lyrics_fetch.search_synced("submarine", client=client).is_synced


def test_search_synced_no_results():
    result = lyrics_fetch.search_synced("zzz", client=StubClient())
    assert result.classification == SyncClassification.ABSENT


def test_lyrics_result_invariant_enforced():
    with pytest.raises(ValueError):
        LyricsResult(timeline=(), classification=SyncClassification.SYNCED)
    with pytest.raises(ValueError):
        LyricsResult(
            timeline=(TimedLine(0, "a"),), classification=SyncClassification.UNSYNCED
        )
