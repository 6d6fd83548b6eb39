"""Filesystem access used by the feed store and the download client.

``atomic_replace`` is the only way the feed file is written: data goes to a
temp file in the same directory and is then renamed over the target, so
readers see either the old document or the new one, never a partial write.
"""

import os
import shutil
from pathlib import Path
from typing import List, Optional, Tuple

from torrentrss.core.logger import setup_logger

logger = setup_logger(__name__)


def _create_temp_file(dest_path: Path, max_attempts: int) -> Tuple[int, Path]:
    """Create an empty sibling temp file of dest_path, honouring the umask."""
    for attempt in range(max_attempts):
        temp_path = dest_path.parent / f".{dest_path.name}.{os.getpid()}.{attempt}.tmp"
        try:
            # O_CREAT | O_EXCL fails atomically if a stale temp file is in the way
            fd = os.open(str(temp_path), os.O_CREAT | os.O_EXCL | os.O_WRONLY, 0o666)
        except FileExistsError:
            continue
        return fd, temp_path

    raise FileExistsError(f"Could not create a temp file for {dest_path} after {max_attempts} attempts")


def atomic_replace(dest_path: Path, data: bytes, max_attempts: int = 100) -> None:
    """Atomically replace dest_path with data.

    The new file gets the usual permissions for a freshly created file
    (0666 minus the umask), so other local users can read the feed.

    Raises:
        OSError: The temp file could not be written or renamed. dest_path is
            left as it was.
    """
    dest_path = Path(dest_path)
    fd, temp_path = _create_temp_file(dest_path, max_attempts)
    try:
        with os.fdopen(fd, "wb") as handle:
            handle.write(data)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(str(temp_path), str(dest_path))
    except BaseException:
        temp_path.unlink(missing_ok=True)
        raise


class DiskProvider:
    """Thin wrapper over the filesystem so callers can be tested with mocks."""

    def file_exists(self, path: Path) -> bool:
        return Path(path).is_file()

    def folder_exists(self, path: Path) -> bool:
        return Path(path).is_dir()

    def read_all_bytes(self, path: Path) -> Optional[bytes]:
        """Return file contents, or None if the file does not exist."""
        try:
            return Path(path).read_bytes()
        except FileNotFoundError:
            return None

    def write_all_bytes(self, path: Path, data: bytes) -> None:
        atomic_replace(Path(path), data)

    def delete_file(self, path: Path) -> None:
        Path(path).unlink(missing_ok=True)
        logger.debug(f"Deleted file: {path}")

    def delete_folder(self, path: Path, recursive: bool = True) -> None:
        if recursive:
            shutil.rmtree(str(path))
        else:
            Path(path).rmdir()
        logger.debug(f"Deleted folder: {path}")

    def get_directories(self, path: Path) -> List[Path]:
        return sorted(p for p in Path(path).iterdir() if p.is_dir())

    def get_files(self, path: Path, recursive: bool = False) -> List[Path]:
        root = Path(path)
        candidates = root.rglob("*") if recursive else root.iterdir()
        return sorted(p for p in candidates if p.is_file())

    def get_file_size(self, path: Path) -> int:
        return Path(path).stat().st_size
