"""Exceptions raised by the feed codec and store."""


class FeedError(Exception):
    """Base exception for feed operations."""
    pass


class CorruptFeedError(FeedError):
    """The persisted feed document could not be parsed."""
    pass


class PersistenceError(FeedError):
    """Writing the feed document to disk failed."""
    pass
