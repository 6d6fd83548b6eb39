"""Process environment values read once at import time.

These are deployment-level knobs (paths, logging, HTTP binding). Feed settings
live in the config singleton so they can also come from the settings file.
"""

import os
from pathlib import Path


def string_to_bool(value: str) -> bool:
    return value.strip().lower() in ("true", "yes", "1", "y", "on")


CONFIG_DIR = Path(os.getenv("CONFIG_DIR", "/config"))
SETTINGS_FILE = CONFIG_DIR / "settings.json"

LOG_ROOT = Path(os.getenv("LOG_ROOT", "/var/log/"))
LOG_DIR = LOG_ROOT / "torrentrss"
LOG_FILE = LOG_DIR / "torrentrss.log"
ENABLE_LOGGING = string_to_bool(os.getenv("ENABLE_LOGGING", "true"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

FLASK_HOST = os.getenv("FLASK_HOST", "0.0.0.0")
FLASK_PORT = int(os.getenv("FLASK_PORT", "8085"))
DEBUG = string_to_bool(os.getenv("DEBUG", "false"))
