"""
Pytest configuration and shared fixtures.
"""

import os
import sys
import tempfile

# Set environment variables BEFORE importing the application
# These override the defaults that try to use system paths like /var/log
_temp_base = tempfile.mkdtemp(prefix="torrentrss_test_")

os.environ["LOG_ROOT"] = _temp_base
os.environ["CONFIG_DIR"] = os.path.join(_temp_base, "config")
os.environ["ENABLE_LOGGING"] = "false"

os.makedirs(os.path.join(_temp_base, "config"), exist_ok=True)

# Add the project root to Python path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dataclasses import replace
from datetime import timedelta
from pathlib import Path

import pytest

from torrentrss.config.settings import TorrentRSSSettings
from torrentrss.core.models import ItemStatus
from torrentrss.download.watch_folder import WatchFolderItem

MAGNET_TEMPLATE = (
    "magnet:?xt=urn:btih:{0}&dn=Series.S05E10.PROPER.HDTV.x264-DEFiNE%5Brartv%5D"
    "&tr=http%3A%2F%2Ftracker.trackerfix.com%3A80%2Fannounce&tr=udp%3A%2F%2F9.rarbg.me%3A2710"
)


class FakeScanner:
    """Stand-in for the host's watch-folder scanner.

    Every item counts as freshly written, so a non-zero grace period reports
    it as still downloading.
    """

    def __init__(self, items=None):
        self.items = list(items or [])
        self.calls = []

    def scan(self, directory, grace_period):
        self.calls.append((Path(directory), grace_period))
        if grace_period > timedelta(0):
            return [replace(item, status=ItemStatus.DOWNLOADING) for item in self.items]
        return list(self.items)


@pytest.fixture
def scanner():
    return FakeScanner()


@pytest.fixture
def rss_dir(tmp_path):
    path = tmp_path / "rss"
    path.mkdir(exist_ok=True)
    return path


@pytest.fixture
def watch_dir(tmp_path):
    path = tmp_path / "rss" / "completed"
    path.mkdir(parents=True, exist_ok=True)
    return path


@pytest.fixture
def rss_settings(rss_dir):
    """Settings for degenerate mode (no watch folder)."""
    return TorrentRSSSettings(rss_directory=rss_dir, max_items=10)


@pytest.fixture
def watch_settings(rss_dir, watch_dir):
    return TorrentRSSSettings(rss_directory=rss_dir, watch_folder=watch_dir, max_items=10)


@pytest.fixture
def completed_item(watch_dir):
    """A finished download sitting in the watch folder."""
    title = "Droned.S01E01.Pilot.1080p.WEB-DL-DRONE"
    target = watch_dir / title
    target.mkdir()
    (target / "somefile.mkv").write_bytes(b"x" * 1024)
    return WatchFolderItem(
        download_id=f"{title}_0",
        title=title,
        total_size=1024,
        output_path=target,
        status=ItemStatus.COMPLETED,
    )


@pytest.fixture
def magnet_for():
    """Build a magnet link whose info hash is derived from a label."""
    import hashlib

    def build(label: str) -> str:
        return MAGNET_TEMPLATE.format(hashlib.sha1(label.encode()).hexdigest())

    return build


@pytest.fixture
def mock_config(monkeypatch):
    """Fixture to mock config values."""
    config_values = {}

    def mock_get(key, default=""):
        return config_values.get(key, default)

    def set_config(key, value):
        config_values[key] = value

    class MockConfig:
        get = staticmethod(mock_get)
        set = staticmethod(set_config)
        _values = config_values

    return MockConfig
