"""
RSS feed pseudo download client.

Instead of talking to a torrent daemon, releases are appended to an RSS feed
file that a real torrent client subscribes to. The feed is capped at
``RSS_MAX_ITEMS`` entries and never holds the same info hash twice.

Completion is not visible through the feed. When ``RSS_WATCH_FOLDER`` is set,
items come from the host's watch-folder scanner; otherwise the feed itself is
listed back with no completion detection.
"""

import getpass
from datetime import timedelta
from typing import List, Optional, Tuple

from torrentrss.clients import (
    DownloadClient,
    UnsupportedOperationError,
    register_client,
)
from torrentrss.clients.torrent_utils import (
    build_magnet_uri,
    extract_hash_from_magnet,
    extract_info_hash_from_torrent,
    fetch_torrent,
)
from torrentrss.config.settings import (
    DEFAULT_FETCH_TIMEOUT,
    TorrentRSSSettings,
    validate_settings,
)
from torrentrss.core.config import config
from torrentrss.core.logger import setup_logger
from torrentrss.core.models import (
    DownloadClientInfo,
    DownloadClientItem,
    Release,
    ValidationFailure,
)
from torrentrss.download.fs import DiskProvider
from torrentrss.download.reconciler import FeedItemSource, ItemSource, WatchFolderItemSource
from torrentrss.download.watch_folder import (
    DEFAULT_SCAN_GRACE_PERIOD,
    WatchFolderScanner,
    get_scanner,
)
from torrentrss.feed.errors import PersistenceError
from torrentrss.feed.queue import ReleaseQueue, SubmissionOutcome
from torrentrss.feed.store import FeedStore

logger = setup_logger(__name__)


def _current_user() -> str:
    try:
        return getpass.getuser()
    except (KeyError, OSError):
        return "unknown"


@register_client("torrent")
class TorrentRSSClient(DownloadClient):
    """Announces releases through an RSS feed file."""

    protocol = "torrent"
    name = "torrentrss"

    def __init__(
        self,
        settings: Optional[TorrentRSSSettings] = None,
        scanner: Optional[WatchFolderScanner] = None,
        disk: Optional[DiskProvider] = None,
        name: Optional[str] = None,
        scan_grace_period: timedelta = DEFAULT_SCAN_GRACE_PERIOD,
    ):
        self.settings = settings or TorrentRSSSettings.from_config(config)
        if name:
            self.name = name

        self._disk = disk or DiskProvider()
        self._store = FeedStore(self.settings.rss_file_path, disk=self._disk)
        self._queue: Optional[ReleaseQueue] = None

        if self.settings.watch_folder is not None:
            scanner = scanner or get_scanner()
            if scanner is None:
                raise ValueError("A watch-folder scanner is required when RSS_WATCH_FOLDER is set")
            self._items: ItemSource = WatchFolderItemSource(
                scanner,
                self.settings.watch_folder,
                client_name=self.name,
                read_only=self.settings.read_only,
                scan_grace_period=scan_grace_period,
            )
        else:
            self._items = FeedItemSource(self._store, client_name=self.name)

    @staticmethod
    def is_configured() -> bool:
        """Check if an RSS output directory is configured."""
        return bool(str(config.get("RSS_DIRECTORY", "") or "").strip())

    @property
    def store(self) -> FeedStore:
        return self._store

    @property
    def queue(self) -> ReleaseQueue:
        # Built on first use so a bad RSS_MAX_ITEMS is reported by test()
        # instead of failing construction.
        if self._queue is None:
            self._queue = ReleaseQueue(self._store, self.settings.max_items)
        return self._queue

    def _resolve_payload(self, release: Release) -> Tuple[Optional[str], Optional[str]]:
        """Return (info_hash, payload_uri) for a release."""
        if release.is_magnet:
            info_hash = extract_hash_from_magnet(release.magnet_url) or release.info_hash
            return info_hash, release.magnet_url

        torrent_data = release.torrent_data
        if torrent_data is None and release.download_url:
            timeout = self.settings.fetch_timeout or DEFAULT_FETCH_TIMEOUT
            torrent_info = fetch_torrent(release.download_url, timeout=timeout)
            if torrent_info.is_magnet:
                return torrent_info.info_hash or release.info_hash, torrent_info.magnet_url
            torrent_data = torrent_info.torrent_data

        info_hash = None
        if torrent_data:
            info_hash = extract_info_hash_from_torrent(torrent_data)
        info_hash = info_hash or release.info_hash
        if not info_hash:
            return None, None
        return info_hash, build_magnet_uri(info_hash)

    def add_download(self, release: Release) -> Optional[str]:
        """
        Append a release to the feed.

        Args:
            release: Release with a magnet link, torrent bytes, or download URL

        Returns:
            Always None; the feed gives us no handle to track the download.

        Raises:
            ValueError: No info hash could be derived from the release.
            PersistenceError: The feed file could not be written.
        """
        info_hash, payload_uri = self._resolve_payload(release)
        if not info_hash or not payload_uri:
            raise ValueError(f"Could not determine info hash for release: {release.title}")

        outcome = self.queue.submit(
            title=release.title,
            content_hash=info_hash,
            payload_uri=payload_uri,
            description=release.description,
        )
        if outcome is SubmissionOutcome.FAILED:
            logger.warning(f"Release was not added to the RSS feed: {release.title}")
        return None

    def get_items(self) -> List[DownloadClientItem]:
        return self._items.list_items()

    def remove_item(self, item: DownloadClientItem, delete_data: bool) -> None:
        """
        Delete an item's output data.

        Raises:
            UnsupportedOperationError: delete_data is False. An announced
                release cannot be withdrawn without deleting its data.
        """
        if not delete_data:
            raise UnsupportedOperationError(
                "RSS cannot remove a download item without deleting the data as well"
            )

        output_path = item.output_path
        if output_path is None:
            logger.debug(f"Nothing to remove for {item.download_id}: no output path")
            return

        if self._disk.file_exists(output_path):
            self._disk.delete_file(output_path)
            logger.info(f"Removed download file: {output_path}")
        elif self._disk.folder_exists(output_path):
            self._disk.delete_folder(output_path, recursive=True)
            logger.info(f"Removed download folder: {output_path}")
        else:
            logger.debug(f"Output for {item.download_id} already absent: {output_path}")

    def get_status(self) -> DownloadClientInfo:
        return DownloadClientInfo(
            is_localhost=True,
            output_root_folders=[self.settings.output_root],
        )

    def test(self) -> List[ValidationFailure]:
        """Validate settings and check the feed file can be written.

        The feed file is reset to an empty feed as part of the check.
        """
        failures = validate_settings(self.settings)
        if any(f.field == "RSS_DIRECTORY" for f in failures):
            return failures

        try:
            self._store.reset()
        except PersistenceError as e:
            logger.warning(f"RSS feed self-test failed: {e}")
            failures.append(
                ValidationFailure(
                    field="RSS_DIRECTORY",
                    message="Cannot write to RSS file",
                    detail=(
                        "The folder you specified does not exist or is inaccessible. "
                        "Please verify the folder permissions for the user account "
                        f"'{_current_user()}', which is used to run torrentrss."
                    ),
                )
            )
        return failures
