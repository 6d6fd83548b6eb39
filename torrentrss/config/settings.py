"""Feed client settings and their validation."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Optional

from torrentrss.core.models import ValidationFailure

FEED_FILENAME = "torrentrss.rss"
DEFAULT_MAX_ITEMS = 200
DEFAULT_READ_ONLY = True
DEFAULT_FETCH_TIMEOUT = 30


def _to_bool(value: Any, default: bool) -> bool:
    if value is None or value == "":
        return default
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("true", "yes", "1", "y", "on")


def _to_int(value: Any, default: int) -> Optional[int]:
    """Parse a whole number. Unparseable input gives None for validation to report."""
    if value is None or value == "":
        return default
    if isinstance(value, bool):
        return None
    try:
        return int(str(value).strip())
    except ValueError:
        return None


@dataclass(frozen=True)
class TorrentRSSSettings:
    """Immutable settings for one feed client."""

    rss_directory: Path
    watch_folder: Optional[Path] = None
    max_items: Optional[int] = DEFAULT_MAX_ITEMS
    read_only: bool = DEFAULT_READ_ONLY
    fetch_timeout: Optional[int] = DEFAULT_FETCH_TIMEOUT

    @property
    def rss_file_path(self) -> Path:
        return self.rss_directory / FEED_FILENAME

    @property
    def output_root(self) -> Path:
        """Where finished downloads end up, as far as the orchestrator knows."""
        return self.watch_folder or self.rss_directory

    @classmethod
    def from_config(cls, config) -> "TorrentRSSSettings":
        """Build settings from the config singleton (or anything with .get)."""
        watch_folder = str(config.get("RSS_WATCH_FOLDER", "") or "").strip()
        return cls(
            rss_directory=Path(str(config.get("RSS_DIRECTORY", "") or "").strip()),
            watch_folder=Path(watch_folder) if watch_folder else None,
            max_items=_to_int(config.get("RSS_MAX_ITEMS", DEFAULT_MAX_ITEMS), DEFAULT_MAX_ITEMS),
            read_only=_to_bool(config.get("RSS_READ_ONLY", DEFAULT_READ_ONLY), DEFAULT_READ_ONLY),
            fetch_timeout=_to_int(
                config.get("TORRENT_FETCH_TIMEOUT", DEFAULT_FETCH_TIMEOUT), DEFAULT_FETCH_TIMEOUT
            ),
        )


def _is_valid_path(path: Optional[Path]) -> bool:
    if path is None:
        return False
    text = str(path)
    if not text or text == "." or "\x00" in text:
        return False
    return os.path.isabs(text)


def validate_settings(settings: TorrentRSSSettings) -> List[ValidationFailure]:
    """Check settings without touching the feed file.

    Returns:
        One ValidationFailure per problem; empty when the settings are usable.
    """
    failures: List[ValidationFailure] = []

    if not _is_valid_path(settings.rss_directory):
        failures.append(
            ValidationFailure(
                field="RSS_DIRECTORY",
                message="RSS feed output directory must be an absolute path",
                detail=f"Got '{settings.rss_directory}'",
            )
        )

    if settings.max_items is None:
        failures.append(
            ValidationFailure(
                field="RSS_MAX_ITEMS",
                message="Maximum number of RSS entries must be a whole number",
            )
        )
    elif settings.max_items <= 0:
        failures.append(
            ValidationFailure(
                field="RSS_MAX_ITEMS",
                message="Maximum number of RSS entries must be greater than 0",
                detail=f"Got {settings.max_items}",
            )
        )

    if settings.watch_folder is not None:
        if not _is_valid_path(settings.watch_folder):
            failures.append(
                ValidationFailure(
                    field="RSS_WATCH_FOLDER",
                    message="Watch folder must be an absolute path",
                    detail=f"Got '{settings.watch_folder}'",
                )
            )
        elif not settings.watch_folder.is_dir():
            failures.append(
                ValidationFailure(
                    field="RSS_WATCH_FOLDER",
                    message="Watch folder does not exist",
                    detail=f"Create '{settings.watch_folder}' or clear the setting.",
                )
            )

    if settings.fetch_timeout is None:
        failures.append(
            ValidationFailure(
                field="TORRENT_FETCH_TIMEOUT",
                message="Torrent fetch timeout must be a whole number of seconds",
            )
        )
    elif settings.fetch_timeout <= 0:
        failures.append(
            ValidationFailure(
                field="TORRENT_FETCH_TIMEOUT",
                message="Torrent fetch timeout must be greater than 0",
                detail=f"Got {settings.fetch_timeout}",
            )
        )

    return failures
