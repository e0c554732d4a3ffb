"""Tests for configuration."""

from datetime import timedelta

import pytest

from lyricgate import config
from lyricgate.config import WorkflowConfig, get_data_dir
from lyricgate.exceptions import ConfigError


def test_workflow_config_defaults():
    cfg = WorkflowConfig()
    assert cfg.max_assets_per_owner == 10
    assert cfg.lyrics_preview_lines == 4
    assert cfg.daily_request_limit == 1000
    assert cfg.signed_url_ttl == timedelta(days=365)
    assert cfg.frequency_weight_range == (1, 5)


@pytest.mark.parametrize(
    "overrides",
    [
        {"max_assets_per_owner": 0},
        {"daily_request_limit": -1},
        {"lyrics_preview_lines": -1},
    ],
)
def test_workflow_config_rejects_bad_limits(overrides):
    with pytest.raises(ConfigError):
        WorkflowConfig(**overrides)


def test_data_dir_from_environment(monkeypatch, temp_dir):
    monkeypatch.setenv("LYRICGATE_DATA_DIR", str(temp_dir))
    assert get_data_dir() == temp_dir


def test_data_dir_default(monkeypatch):
    monkeypatch.delenv("LYRICGATE_DATA_DIR", raising=False)
    assert get_data_dir() == config.DEFAULT_DATA_DIR


def test_validate_config_rejects_bad_url(monkeypatch):
    monkeypatch.setattr(config, "LRCLIB_BASE_URL", "ftp://lrclib.net")
    with pytest.raises(ConfigError):
        config.validate_config()
