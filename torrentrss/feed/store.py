"""Locked read-modify-write access to the feed file.

All mutation goes through ``FeedStore.with_lock``: the load, the caller's
update and the write all happen while holding one lock per feed path, so no
other writer in this process can observe or clobber an intermediate state.
"""

import os
from pathlib import Path
from threading import Lock
from typing import Callable, Dict, Optional, Tuple, TypeVar

from torrentrss.core.logger import setup_logger
from torrentrss.download.fs import DiskProvider
from torrentrss.feed import codec
from torrentrss.feed.codec import Feed
from torrentrss.feed.errors import PersistenceError

logger = setup_logger(__name__)

T = TypeVar("T")

# Feed path -> lock. Entries live for the lifetime of the process.
_feed_locks: Dict[str, Lock] = {}
_feed_locks_guard = Lock()


def get_feed_lock(path: Path) -> Lock:
    """Return the lock shared by every store writing to this feed path."""
    key = os.path.normcase(os.path.abspath(str(path)))
    with _feed_locks_guard:
        lock = _feed_locks.get(key)
        if lock is None:
            lock = Lock()
            _feed_locks[key] = lock
        return lock


class FeedStore:
    """Owns one feed file on disk."""

    def __init__(self, path: Path, disk: Optional[DiskProvider] = None):
        self.path = Path(path)
        self._disk = disk or DiskProvider()
        self._lock = get_feed_lock(self.path)

    def _load(self) -> Feed:
        if not self._disk.file_exists(self.path):
            return Feed.empty()
        return codec.decode(self._disk.read_all_bytes(self.path))

    def _persist(self, feed: Feed) -> None:
        data = codec.encode(feed)
        try:
            self._disk.write_all_bytes(self.path, data)
        except OSError as e:
            raise PersistenceError(f"Cannot write feed file {self.path}: {e}") from e
        logger.debug(f"Wrote {len(feed)} items to {self.path}")

    def with_lock(self, fn: Callable[[Feed], Tuple[Optional[Feed], T]]) -> T:
        """Run a read-modify-write transaction on the feed.

        Args:
            fn: Receives the current feed and returns ``(next_feed, result)``.
                A ``None`` next feed means nothing changed and nothing is written.

        Returns:
            The result returned by fn.

        Raises:
            CorruptFeedError: The file on disk cannot be parsed.
            PersistenceError: The new feed could not be written; the old file
                is untouched.
        """
        with self._lock:
            current = self._load()
            next_feed, result = fn(current)
            if next_feed is not None:
                self._persist(next_feed)
            return result

    def read_snapshot(self) -> Feed:
        """Read the feed, serialized against writers."""
        with self._lock:
            return self._load()

    def reset(self) -> None:
        """Replace the feed file with an empty feed."""
        with self._lock:
            self._persist(Feed.empty())
