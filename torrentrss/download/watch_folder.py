"""Contract for the external watch-folder scanner.

The scanner itself lives in the host application; this module only describes
what it returns so the reconciler can consume it.
"""

from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path
from typing import Optional, Protocol, Sequence

from torrentrss.core.models import ItemStatus

DEFAULT_SCAN_GRACE_PERIOD = timedelta(seconds=30)


@dataclass(frozen=True)
class WatchFolderItem:
    """One entry found in the watch folder."""

    download_id: str
    title: str
    total_size: int
    output_path: Path
    status: ItemStatus
    remaining_time: Optional[timedelta] = None


class WatchFolderScanner(Protocol):
    def scan(self, directory: Path, grace_period: timedelta) -> Sequence[WatchFolderItem]:
        """Scan a directory, skipping entries modified within grace_period."""
        ...


# Scanner provided by the host application at startup.
_scanner: Optional[WatchFolderScanner] = None


def set_scanner(scanner: Optional[WatchFolderScanner]) -> None:
    global _scanner
    _scanner = scanner


def get_scanner() -> Optional[WatchFolderScanner]:
    return _scanner
