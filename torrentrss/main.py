"""Flask application factory."""

from typing import Optional

from flask import Flask

from torrentrss.api.feed_routes import register_feed_routes
from torrentrss.config.settings import TorrentRSSSettings
from torrentrss.core.config import config
from torrentrss.core.logger import setup_logger
from torrentrss.feed.store import FeedStore

logger = setup_logger(__name__)


def create_app(settings: Optional[TorrentRSSSettings] = None) -> Flask:
    """Build the app serving the feed.

    Without explicit settings, the feed path is re-read from config on every
    request so settings changes apply without a restart.
    """
    app = Flask(__name__)

    def get_store() -> FeedStore:
        current = settings or TorrentRSSSettings.from_config(config)
        return FeedStore(current.rss_file_path)

    register_feed_routes(app, get_store)
    logger.info("torrentrss feed server initialized")
    return app
