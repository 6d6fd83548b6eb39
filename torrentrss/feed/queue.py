"""Capacity-bounded, deduplicating release queue on top of the feed store."""

from datetime import datetime
from enum import Enum
from typing import List, Optional, Tuple

from torrentrss.core.logger import setup_logger
from torrentrss.feed.codec import Feed, ReleaseRecord, strip_illegal_xml_chars
from torrentrss.feed.errors import CorruptFeedError
from torrentrss.feed.store import FeedStore

logger = setup_logger(__name__)


class SubmissionOutcome(Enum):
    ACCEPTED = "accepted"
    DUPLICATE = "duplicate"
    FAILED = "failed"


class ReleaseQueue:
    """Appends releases to the feed, oldest first, evicting past capacity."""

    def __init__(self, store: FeedStore, capacity: int):
        if not isinstance(capacity, int) or capacity <= 0:
            raise ValueError(f"Feed capacity must be positive, got {capacity}")
        self.store = store
        self.capacity = capacity

    def submit(
        self,
        title: str,
        content_hash: str,
        payload_uri: str,
        description: Optional[str] = None,
    ) -> SubmissionOutcome:
        """Announce a release.

        Resubmitting a hash already in the feed is a no-op. When the feed is
        full, the oldest records are dropped before the new one is appended.
        Characters XML cannot carry are removed from the text fields first.

        Returns:
            ACCEPTED when written, DUPLICATE when already present, FAILED when
            the feed file is corrupt.

        Raises:
            PersistenceError: The feed could not be written.
        """
        title = strip_illegal_xml_chars(title)
        content_hash = strip_illegal_xml_chars(content_hash)
        payload_uri = strip_illegal_xml_chars(payload_uri)
        description = strip_illegal_xml_chars(description)

        def transaction(feed: Feed) -> Tuple[Optional[Feed], SubmissionOutcome]:
            if feed.contains_hash(content_hash):
                return None, SubmissionOutcome.DUPLICATE

            records = list(feed.records)
            while len(records) >= self.capacity:
                evicted = records.pop(0)
                logger.debug(f"Evicting oldest feed item: {evicted.title}")

            records.append(
                ReleaseRecord(
                    title=title,
                    content_hash=content_hash,
                    magnet_uri=payload_uri,
                    published_at=datetime.now().astimezone().replace(microsecond=0),
                    description=description,
                )
            )
            next_feed = Feed(
                records=records,
                title=feed.title,
                link=feed.link,
                description=feed.description,
            )
            return next_feed, SubmissionOutcome.ACCEPTED

        try:
            outcome = self.store.with_lock(transaction)
        except CorruptFeedError as e:
            logger.error(f"RSS file {self.store.path} is corrupt or malformed: {e}")
            return SubmissionOutcome.FAILED

        if outcome is SubmissionOutcome.DUPLICATE:
            logger.debug(f"Release already in feed, skipping: {title} ({content_hash})")
        else:
            logger.info(f"Added release to RSS feed {self.store.path}: {title}")
        return outcome

    def records(self) -> List[ReleaseRecord]:
        """Current feed records, oldest first."""
        return list(self.store.read_snapshot().records)
