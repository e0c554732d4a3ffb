"""Test configuration and fixtures.

Provides reusable fixtures for:
- Temporary directories
- Fake LRCLIB HTTP sessions and responses
- In-memory stores and a controllable clock
- Upload workflow and quota tracker instances
"""

import os
import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
import requests

from lyricgate.config import WorkflowConfig
from lyricgate.core.lrc import parse_lrc
from lyricgate.core.models import LyricsResult, SyncClassification, UploadFile
from lyricgate.core.quota import QuotaTracker
from lyricgate.core.storage import (
    InMemoryCredentialStore,
    InMemoryObjectStore,
    InMemoryRecordStore,
)
from lyricgate.core.upload import UploadWorkflow


def pytest_addoption(parser):
    parser.addoption(
        "--run-network",
        action="store_true",
        default=False,
        help="Run tests that require network access",
    )


def pytest_collection_modifyitems(config, items):
    run_network = config.getoption("--run-network") or os.getenv(
        "RUN_INTEGRATION_TESTS"
    ) == "1"
    if run_network:
        return

    skip_network = pytest.mark.skip(
        reason="requires network access (use --run-network or RUN_INTEGRATION_TESTS=1)"
    )
    for item in items:
        if "network" in item.keywords:
            item.add_marker(skip_network)


# =============================================================================
# Basic Fixtures
# =============================================================================


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


class Clock:
    """Callable clock that tests can move forward."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def clock():
    return Clock(datetime(2024, 3, 14, 12, 0, tzinfo=timezone.utc))


# =============================================================================
# LRCLIB Fixtures
# =============================================================================

SAMPLE_LRC = """[ti:Yellow Submarine]
[ar:The Beatles]
[00:00.96]One, two, three, four
[00:04.02]Ooh-ooh, ooh-ooh-ooh
[00:08.50]In the town where I was born
[00:12.10]Lived a man who sailed to sea
"""


@pytest.fixture
def sample_lrc():
    return SAMPLE_LRC


@pytest.fixture
def lrclib_record(sample_lrc):
    """LRCLIB /get response with both plain and synced lyrics."""
    return {
        "id": 3396226,
        "trackName": "Yellow Submarine",
        "artistName": "The Beatles",
        "albumName": "Revolver",
        "duration": 160,
        "instrumental": False,
        "plainLyrics": "One, two, three, four\nOoh-ooh, ooh-ooh-ooh\n"
        "In the town where I was born\nLived a man who sailed to sea",
        "syncedLyrics": sample_lrc,
    }


class FakeResponse:
    def __init__(self, status_code=200, json_data=None):
        self.status_code = status_code
        self._json_data = json_data

    def json(self):
        if isinstance(self._json_data, Exception):
            raise self._json_data
        return self._json_data


class FakeSession:
    """Stands in for requests.Session; records every call."""

    def __init__(self, responses):
        self._responses = list(responses)
        self.calls = []

    def get(self, url, params=None, headers=None, timeout=None):
        self.calls.append({"url": url, "params": params, "timeout": timeout})
        if not self._responses:
            raise requests.exceptions.ConnectionError("no response")
        response = self._responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture
def fake_response():
    return FakeResponse


@pytest.fixture
def fake_session():
    def _make(*responses):
        return FakeSession(responses)

    return _make


# =============================================================================
# Workflow Fixtures
# =============================================================================


class FakeLyricsSource:
    """Callable lyrics lookup returning a canned result."""

    def __init__(self, result: LyricsResult):
        self.result = result
        self.calls = []

    def __call__(self, artist, title):
        self.calls.append((artist, title))
        return self.result


class CountingObjectStore(InMemoryObjectStore):
    def __init__(self):
        super().__init__()
        self.put_calls = 0
        self.delete_calls = 0

    def put(self, owner_id, data, extension=""):
        self.put_calls += 1
        return super().put(owner_id, data, extension)

    def delete(self, ref):
        self.delete_calls += 1
        super().delete(ref)


@pytest.fixture
def synced_result(sample_lrc):
    return LyricsResult(
        raw_text="One, two, three, four",
        timeline=tuple(parse_lrc(sample_lrc)),
        classification=SyncClassification.SYNCED,
    )


@pytest.fixture
def lyrics_source(synced_result):
    return FakeLyricsSource(synced_result)


@pytest.fixture
def object_store():
    return CountingObjectStore()


@pytest.fixture
def record_store():
    return InMemoryRecordStore()


@pytest.fixture
def workflow(object_store, record_store, lyrics_source, clock):
    return UploadWorkflow(
        object_store,
        record_store,
        config=WorkflowConfig(),
        lyrics_fn=lyrics_source,
        now_fn=clock,
    )


@pytest.fixture
def audio_file():
    return UploadFile(
        filename="yellow_submarine.mp3",
        content=b"ID3fake mp3 data",
        content_type="audio/mpeg",
    )


@pytest.fixture
def credential_store():
    return InMemoryCredentialStore()


@pytest.fixture
def tracker(credential_store, clock):
    return QuotaTracker(credential_store, now_fn=clock)
