"""
Download client contract and registry.

The orchestrator talks to every client through ``DownloadClient``. Clients
register themselves per protocol with ``@register_client``; ``get_client``
returns the first one that reports itself configured.
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Tuple, Type

from torrentrss.core.logger import setup_logger
from torrentrss.core.models import (
    DownloadClientInfo,
    DownloadClientItem,
    ItemStatus,
    Release,
    ValidationFailure,
)

logger = setup_logger(__name__)


class UnsupportedOperationError(NotImplementedError):
    """The client type cannot perform this operation."""
    pass


class DownloadClient(ABC):
    """Abstract base for download clients."""

    protocol: str = ""
    name: str = ""

    @staticmethod
    @abstractmethod
    def is_configured() -> bool:
        """True if enough settings exist to construct this client."""

    @abstractmethod
    def add_download(self, release: Release) -> Optional[str]:
        """Hand a release to the client.

        Returns:
            A download id the client can be polled with, or None when the
            client cannot track the download.
        """

    @abstractmethod
    def get_items(self) -> List[DownloadClientItem]:
        """List items known to the client."""

    @abstractmethod
    def remove_item(self, item: DownloadClientItem, delete_data: bool) -> None:
        """Remove an item, optionally with its data."""

    @abstractmethod
    def get_status(self) -> DownloadClientInfo:
        """Report client-level status."""

    @abstractmethod
    def test(self) -> List[ValidationFailure]:
        """Check the configuration. An empty list means it is usable."""

    def test_connection(self) -> Tuple[bool, str]:
        """Summarize test() as (ok, message)."""
        failures = self.test()
        if failures:
            return False, failures[0].message
        return True, f"{self.name} is configured correctly"


# Protocol -> registered client classes, in registration order.
_CLIENTS: Dict[str, List[Type[DownloadClient]]] = {}


def register_client(protocol: str):
    """Class decorator registering a download client for a protocol."""

    def decorator(cls: Type[DownloadClient]) -> Type[DownloadClient]:
        _CLIENTS.setdefault(protocol, []).append(cls)
        logger.debug(f"Registered {protocol} download client: {cls.name or cls.__name__}")
        return cls

    return decorator


def get_all_clients() -> Dict[str, List[Type[DownloadClient]]]:
    return _CLIENTS


def list_configured_clients() -> List[str]:
    """Names of registered clients whose settings are present."""
    return [
        cls.name
        for classes in _CLIENTS.values()
        for cls in classes
        if cls.is_configured()
    ]


def get_client(protocol: str) -> Optional[DownloadClient]:
    """Instantiate the first configured client for a protocol."""
    for cls in _CLIENTS.get(protocol, []):
        if not cls.is_configured():
            continue
        try:
            return cls()
        except Exception as e:
            logger.error_trace(f"Failed to create {cls.name} client: {e}")
    return None


# Import clients to trigger registration
from torrentrss.clients import torrent_rss  # noqa: E402,F401
