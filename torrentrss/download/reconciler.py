"""Item sources behind the download client's get_items().

``WatchFolderItemSource`` reports completion from the external watch-folder
scan and never reads the feed. ``FeedItemSource`` is used when no watch folder
is configured: it lists feed records as queued items with no completion
detection.
"""

from datetime import timedelta
from pathlib import Path
from typing import List, Protocol

from torrentrss.core.logger import setup_logger
from torrentrss.core.models import DownloadClientItem, ItemStatus
from torrentrss.download.watch_folder import (
    DEFAULT_SCAN_GRACE_PERIOD,
    WatchFolderItem,
    WatchFolderScanner,
)
from torrentrss.feed.errors import CorruptFeedError
from torrentrss.feed.store import FeedStore

logger = setup_logger(__name__)


class ItemSource(Protocol):
    def list_items(self) -> List[DownloadClientItem]:
        ...


class WatchFolderItemSource:
    """Lists items found by scanning the watch folder."""

    def __init__(
        self,
        scanner: WatchFolderScanner,
        watch_folder: Path,
        client_name: str,
        read_only: bool,
        scan_grace_period: timedelta = DEFAULT_SCAN_GRACE_PERIOD,
    ):
        self.scanner = scanner
        self.watch_folder = Path(watch_folder)
        self.client_name = client_name
        self.read_only = read_only
        self.scan_grace_period = scan_grace_period

    def _to_item(self, entry: WatchFolderItem) -> DownloadClientItem:
        return DownloadClientItem(
            download_id=f"{self.client_name}_{entry.download_id}",
            title=entry.title,
            status=entry.status,
            total_size=entry.total_size,
            remaining_size=0 if entry.status is ItemStatus.COMPLETED else entry.total_size,
            remaining_time=entry.remaining_time,
            output_path=entry.output_path,
            can_move_files=not self.read_only,
            can_be_removed=not self.read_only,
        )

    def list_items(self) -> List[DownloadClientItem]:
        entries = self.scanner.scan(self.watch_folder, self.scan_grace_period)
        return [self._to_item(entry) for entry in entries]


class FeedItemSource:
    """Lists announced releases straight from the feed file."""

    def __init__(self, store: FeedStore, client_name: str):
        self.store = store
        self.client_name = client_name

    def list_items(self) -> List[DownloadClientItem]:
        try:
            feed = self.store.read_snapshot()
        except CorruptFeedError as e:
            logger.error(f"RSS file {self.store.path} is corrupt or malformed: {e}")
            return []

        return [
            DownloadClientItem(
                download_id=f"{self.client_name}_{record.title}",
                title=record.title,
                status=ItemStatus.QUEUED,
            )
            for record in feed.records
        ]
