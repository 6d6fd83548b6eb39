"""
Tests for release queue policy: ordering, deduplication, capacity eviction.
"""

import hashlib
from unittest.mock import patch

import pytest

from torrentrss.feed.errors import PersistenceError
from torrentrss.feed.queue import ReleaseQueue, SubmissionOutcome
from torrentrss.feed.store import FeedStore


def _hash(label: str) -> str:
    return hashlib.sha1(label.encode()).hexdigest()


def _submit(queue: ReleaseQueue, label: str) -> SubmissionOutcome:
    content_hash = _hash(label)
    return queue.submit(label, content_hash, f"magnet:?xt=urn:btih:{content_hash}")


@pytest.fixture
def store(tmp_path):
    return FeedStore(tmp_path / "feed.rss")


class TestConstruction:
    @pytest.mark.parametrize("capacity", [0, -1, None])
    def test_non_positive_capacity_rejected(self, store, capacity):
        with pytest.raises(ValueError):
            ReleaseQueue(store, capacity)


class TestOrdering:
    def test_items_in_submission_order(self, store):
        queue = ReleaseQueue(store, 10)
        for i in range(5):
            assert _submit(queue, str(i)) is SubmissionOutcome.ACCEPTED

        assert [r.title for r in queue.records()] == ["0", "1", "2", "3", "4"]

    def test_newest_item_is_last(self, store):
        queue = ReleaseQueue(store, 3)
        for i in range(7):
            _submit(queue, str(i))
            assert queue.records()[-1].title == str(i)

    def test_record_fields(self, store):
        queue = ReleaseQueue(store, 10)
        queue.submit("Title", "ABCDEF", "magnet:?xt=urn:btih:ABCDEF", description="desc")

        record = queue.records()[0]
        assert record.title == "Title"
        assert record.content_hash == "ABCDEF"
        assert record.magnet_uri == "magnet:?xt=urn:btih:ABCDEF"
        assert record.description == "desc"
        assert record.published_at.tzinfo is not None
        assert record.published_at.microsecond == 0


class TestCapacity:
    def test_oldest_item_removed_when_over_limit(self, store):
        queue = ReleaseQueue(store, 5)
        for i in range(6):
            _submit(queue, str(i))

        titles = [r.title for r in queue.records()]
        assert titles == ["1", "2", "3", "4", "5"]
        assert "0" not in titles

    def test_never_exceeds_capacity(self, store):
        queue = ReleaseQueue(store, 5)
        for i in range(10):
            _submit(queue, str(i))
            assert len(queue.records()) <= 5

        assert len(queue.records()) == 5

    def test_evicts_exactly_one_per_overflow(self, store):
        queue = ReleaseQueue(store, 3)
        for i in range(3):
            _submit(queue, str(i))

        before = [r.title for r in queue.records()]
        _submit(queue, "3")
        after = [r.title for r in queue.records()]

        assert after == before[1:] + ["3"]

    def test_capacity_one_keeps_latest(self, store):
        queue = ReleaseQueue(store, 1)
        _submit(queue, "a")
        _submit(queue, "b")
        assert [r.title for r in queue.records()] == ["b"]

    def test_shrunk_capacity_trims_to_fit(self, store):
        big = ReleaseQueue(store, 10)
        for i in range(6):
            _submit(big, str(i))

        small = ReleaseQueue(store, 3)
        _submit(small, "new")

        assert [r.title for r in small.records()] == ["4", "5", "new"]


class TestDeduplication:
    def test_duplicate_reported(self, store):
        queue = ReleaseQueue(store, 10)
        assert _submit(queue, "same") is SubmissionOutcome.ACCEPTED
        assert _submit(queue, "same") is SubmissionOutcome.DUPLICATE
        assert len(queue.records()) == 1

    def test_duplicate_is_case_insensitive(self, store):
        queue = ReleaseQueue(store, 10)
        content_hash = _hash("x")
        queue.submit("lower", content_hash.lower(), "magnet:a")
        outcome = queue.submit("upper", content_hash.upper(), "magnet:b")

        assert outcome is SubmissionOutcome.DUPLICATE
        assert [r.title for r in queue.records()] == ["lower"]

    def test_duplicate_performs_no_write(self, store):
        queue = ReleaseQueue(store, 10)
        with patch.object(store, "_persist", wraps=store._persist) as persist:
            _submit(queue, "same")
            _submit(queue, "same")
        assert persist.call_count == 1

    def test_duplicate_does_not_evict(self, store):
        queue = ReleaseQueue(store, 2)
        _submit(queue, "a")
        _submit(queue, "b")
        _submit(queue, "a")
        assert [r.title for r in queue.records()] == ["a", "b"]


class TestFailures:
    def test_corrupt_feed_returns_failed(self, tmp_path):
        path = tmp_path / "feed.rss"
        path.write_bytes(b"this is not xml <")
        queue = ReleaseQueue(FeedStore(path), 10)

        assert _submit(queue, "a") is SubmissionOutcome.FAILED
        assert path.read_bytes() == b"this is not xml <"

    def test_persistence_error_propagates(self, tmp_path):
        queue = ReleaseQueue(FeedStore(tmp_path / "missing" / "feed.rss"), 10)
        with pytest.raises(PersistenceError):
            _submit(queue, "a")


class TestTextCleanup:
    def test_control_characters_do_not_break_later_submissions(self, store):
        queue = ReleaseQueue(store, 10)
        first, second = _hash("first"), _hash("second")

        assert queue.submit("Show\x1bS01E01", first, f"magnet:?xt=urn:btih:{first}") is SubmissionOutcome.ACCEPTED
        assert queue.submit("Other", second, f"magnet:?xt=urn:btih:{second}") is SubmissionOutcome.ACCEPTED
        assert [r.title for r in queue.records()] == ["ShowS01E01", "Other"]

    def test_stored_record_matches_what_is_read_back(self, store):
        queue = ReleaseQueue(store, 10)
        content_hash = _hash("a")
        queue.submit("a\x0bb", content_hash, f"magnet:?xt=urn:btih:{content_hash}", description="x\x01y\r\nz")

        record = queue.records()[0]
        assert record.title == "ab"
        assert record.description == "xy\r\nz"
