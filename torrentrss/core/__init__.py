"""Core module - shared models, config and logging."""

from torrentrss.core.models import Release
from torrentrss.core.logger import setup_logger
