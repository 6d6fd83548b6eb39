"""
Tests for the configuration singleton.
"""

import json

import pytest

from torrentrss.config.settings import TorrentRSSSettings, validate_settings
from torrentrss.core.config import Config, config


@pytest.fixture
def settings_file(tmp_path):
    path = tmp_path / "settings.json"
    config.use_settings_file(path)
    yield path
    config.use_settings_file(None)


def test_is_singleton():
    assert Config() is config


def test_default_when_unset(settings_file):
    assert config.get("TORRENTRSS_TEST_UNSET", 7) == 7


def test_reads_settings_file(settings_file):
    settings_file.write_text(json.dumps({"RSS_MAX_ITEMS": 50}))
    config.refresh()
    assert config.get("RSS_MAX_ITEMS", 200) == 50
    assert config.get_all() == {"RSS_MAX_ITEMS": 50}


def test_env_overrides_settings_file(settings_file, monkeypatch):
    settings_file.write_text(json.dumps({"RSS_MAX_ITEMS": 50}))
    config.refresh()
    monkeypatch.setenv("RSS_MAX_ITEMS", "75")

    assert config.get("RSS_MAX_ITEMS", 200) == 75
    assert config.is_from_env("RSS_MAX_ITEMS")


def test_env_coerced_to_default_type(settings_file, monkeypatch):
    monkeypatch.setenv("RSS_READ_ONLY", "no")
    monkeypatch.setenv("RSS_MAX_ITEMS", "not-a-number")

    assert config.get("RSS_READ_ONLY", True) is False
    assert config.get("RSS_MAX_ITEMS", 200) == "not-a-number"


def test_unparseable_env_number_reported_by_validation(settings_file, monkeypatch, tmp_path):
    monkeypatch.setenv("RSS_DIRECTORY", str(tmp_path))
    monkeypatch.setenv("RSS_MAX_ITEMS", "abc")

    settings = TorrentRSSSettings.from_config(config)

    assert [f.field for f in validate_settings(settings)] == ["RSS_MAX_ITEMS"]


def test_malformed_settings_file_ignored(settings_file):
    settings_file.write_text("{not json")
    config.refresh()
    assert config.get("RSS_MAX_ITEMS", 200) == 200


def test_attribute_access_falls_back_to_env_module(settings_file, monkeypatch):
    from torrentrss.config import env

    monkeypatch.delenv("FLASK_PORT", raising=False)
    assert config.FLASK_PORT == env.FLASK_PORT


def test_attribute_access_unknown_raises(settings_file):
    with pytest.raises(AttributeError):
        config.TORRENTRSS_DOES_NOT_EXIST
