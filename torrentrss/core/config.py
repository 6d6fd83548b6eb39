"""Configuration singleton with ENV > settings file > default resolution."""

import json
import os
from pathlib import Path
from threading import Lock
from typing import Any, Dict, Optional

_env_module = None


def _get_env():
    """Lazy import of env module so tests can set CONFIG_DIR first."""
    global _env_module
    if _env_module is None:
        from torrentrss.config import env
        _env_module = env
    return _env_module


def _get_logger():
    from torrentrss.core.logger import setup_logger
    return setup_logger(__name__)


def _coerce(raw: str, default: Any) -> Any:
    """Convert an ENV string to the type of the default value."""
    if isinstance(default, bool):
        return raw.strip().lower() in ("true", "yes", "1", "y", "on")
    if isinstance(default, int):
        try:
            return int(raw)
        except ValueError:
            # Left as text so settings validation can report it.
            return raw
    return raw


class Config:
    """
    Dynamic configuration singleton that provides live settings access.

    Settings are resolved with priority: ENV var > settings file > default.
    File values are cached and can be refreshed when the file changes.
    """

    _instance: Optional['Config'] = None
    _lock = Lock()

    def __new__(cls) -> 'Config':
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super().__new__(cls)
                    cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        if self._initialized:
            return
        self._cache: Dict[str, Any] = {}
        self._cache_lock = Lock()
        self._settings_file: Optional[Path] = None
        self._initialized = True
        self._loaded = False

    def _ensure_loaded(self) -> None:
        if self._loaded:
            return
        with self._cache_lock:
            if self._loaded:
                return
            self._load_settings()

    def _load_settings(self) -> None:
        """Load settings from the JSON settings file, if there is one."""
        settings_file = self._settings_file or _get_env().SETTINGS_FILE
        self._cache.clear()
        try:
            if settings_file.exists():
                data = json.loads(settings_file.read_text())
                if isinstance(data, dict):
                    self._cache.update(data)
        except (json.JSONDecodeError, OSError) as e:
            # Unreadable file: ENV and defaults still apply.
            _get_logger().warning(f"Ignoring settings file {settings_file}: {e}")
        self._loaded = True

    def use_settings_file(self, path: Optional[Path]) -> None:
        """Point the singleton at a different settings file and reload it."""
        with self._cache_lock:
            self._settings_file = Path(path) if path is not None else None
            self._loaded = False

    def refresh(self) -> None:
        """Re-read the settings file."""
        with self._cache_lock:
            self._loaded = False
            self._load_settings()

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a setting value by key.

        Args:
            key: The setting key (e.g., 'RSS_MAX_ITEMS')
            default: Default value if setting not found; also decides how an
                ENV string is coerced

        Returns:
            The setting value, or default if not found
        """
        raw = os.environ.get(key)
        if raw is not None:
            return _coerce(raw, default)

        self._ensure_loaded()
        return self._cache.get(key, default)

    def __getattr__(self, name: str) -> Any:
        """
        Allow attribute-style access to settings.

        Example: config.RSS_DIRECTORY instead of config.get('RSS_DIRECTORY')
        """
        if name.startswith('_'):
            raise AttributeError(f"'{type(self).__name__}' object has no attribute '{name}'")

        value = self.get(name)
        if value is not None:
            return value

        env = _get_env()
        if hasattr(env, name):
            return getattr(env, name)

        raise AttributeError(f"Setting '{name}' not found in config or env")

    def is_from_env(self, key: str) -> bool:
        """True if the setting's value comes from an environment variable."""
        return key in os.environ

    def get_all(self) -> Dict[str, Any]:
        """Get all settings loaded from the settings file."""
        self._ensure_loaded()
        return dict(self._cache)


# Global singleton instance
config = Config()
