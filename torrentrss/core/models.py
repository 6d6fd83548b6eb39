"""Data models shared between the orchestrator-facing client and its item sources."""

from dataclasses import dataclass, field
from datetime import timedelta
from enum import Enum
from pathlib import Path
from typing import List, Optional


@dataclass
class Release:
    """A release being announced for download.

    At least one of ``magnet_url``, ``torrent_data`` or ``download_url`` must be
    set. ``info_hash`` is used when the indexer already knows the hash.
    """

    title: str
    magnet_url: Optional[str] = None
    download_url: Optional[str] = None
    description: Optional[str] = None
    torrent_data: Optional[bytes] = None
    info_hash: Optional[str] = None

    @property
    def is_magnet(self) -> bool:
        return bool(self.magnet_url) and self.magnet_url.startswith("magnet:")


class ItemStatus(Enum):
    """Lifecycle state of an item reported by a client."""

    QUEUED = "queued"
    DOWNLOADING = "downloading"
    COMPLETED = "completed"
    WARNING = "warning"
    PAUSED = "paused"


@dataclass
class DownloadClientItem:
    """One item as seen by the orchestrator."""

    download_id: str
    title: str
    status: ItemStatus = ItemStatus.QUEUED
    total_size: int = 0
    remaining_size: int = 0
    remaining_time: Optional[timedelta] = None
    output_path: Optional[Path] = None
    message: Optional[str] = None
    can_move_files: bool = False
    can_be_removed: bool = False


@dataclass(frozen=True)
class DownloadClientInfo:
    """Client-level status."""

    is_localhost: bool
    output_root_folders: List[Path] = field(default_factory=list)


@dataclass(frozen=True)
class ValidationFailure:
    """A configuration problem with a human-readable remediation hint."""

    field: str
    message: str
    detail: Optional[str] = None
