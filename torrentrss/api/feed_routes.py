"""HTTP routes publishing the feed to torrent clients."""

from __future__ import annotations

from typing import Callable

from flask import Flask, Response, jsonify

from torrentrss.core.logger import setup_logger
from torrentrss.feed import codec
from torrentrss.feed.errors import CorruptFeedError
from torrentrss.feed.store import FeedStore

logger = setup_logger(__name__)

RSS_MIMETYPE = "application/rss+xml"


def register_feed_routes(app: Flask, get_store: Callable[[], FeedStore]) -> None:
    @app.route("/feed.rss", methods=["GET"])
    def feed_document():
        store = get_store()
        try:
            feed = store.read_snapshot()
        except CorruptFeedError as e:
            logger.error(f"Cannot serve corrupt RSS file {store.path}: {e}")
            return jsonify({"error": "Feed is corrupt", "code": "feed_corrupt"}), 503

        return Response(codec.encode(feed), mimetype=RSS_MIMETYPE)

    @app.route("/api/health", methods=["GET"])
    def health():
        return jsonify({"status": "ok"})
