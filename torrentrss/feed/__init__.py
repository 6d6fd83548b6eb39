"""
Release feed: codec, durable store and queue policy.

- codec: RSS document <-> Feed
- store: locked read-modify-write and atomic persistence
- queue: deduplication and capacity eviction
"""

from torrentrss.feed.codec import Feed, ReleaseRecord
from torrentrss.feed.errors import CorruptFeedError, FeedError, PersistenceError
from torrentrss.feed.queue import ReleaseQueue, SubmissionOutcome
from torrentrss.feed.store import FeedStore

__all__ = [
    "Feed",
    "ReleaseRecord",
    "FeedError",
    "CorruptFeedError",
    "PersistenceError",
    "FeedStore",
    "ReleaseQueue",
    "SubmissionOutcome",
]
