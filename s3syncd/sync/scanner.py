"""Directory scanning for sync passes."""

import logging
import posixpath
import stat
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from ..exceptions import ScanError
from ..utils import ROOT_DIR

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LocalFile:
    """Represents a local file found by a scan."""

    path: Path
    """Absolute path to the file"""

    relative_path: str
    """Relative path (using forward slashes for cross-platform compatibility)"""

    parent: str
    """Immediate parent subdirectory relative to the root ("." for the root)"""

    size: int = 0
    """File size in bytes"""

    @classmethod
    def from_path(cls, file_path: Path, base_path: Path) -> "LocalFile":
        """Create LocalFile from a path.

        Args:
            file_path: Absolute path to the file
            base_path: Base path for calculating relative paths

        Returns:
            LocalFile instance
        """
        file_stat = file_path.stat()
        # Use as_posix() to ensure forward slashes on all platforms
        relative_path = file_path.relative_to(base_path).as_posix()
        parent = posixpath.dirname(relative_path) or ROOT_DIR
        return cls(
            path=file_path,
            relative_path=relative_path,
            parent=parent,
            size=file_stat.st_size,
        )


class DirectoryScanner:
    """Walks a local tree and yields every regular file beneath it.

    Scanning is lazy; a failure anywhere in the traversal raises
    :class:`ScanError` and no partial result should be used.

    Examples:
        >>> scanner = DirectoryScanner(exclude_names=["syncd.txt"])
        >>> for f in scanner.scan(Path("/sync/folder")):
        ...     print(f.relative_path, f.parent)
    """

    def __init__(self, exclude_names: Optional[list[str]] = None):
        """Initialize directory scanner.

        Args:
            exclude_names: File names that are never yielded (e.g. the marker
                file name, which would collide with marker keys)
        """
        self.exclude_names = frozenset(exclude_names or [])

    def scan(self, root: Path) -> Iterator[LocalFile]:
        """Recursively scan a local directory.

        Args:
            root: Directory to scan

        Yields:
            LocalFile for every regular file, in sorted path order

        Raises:
            ScanError: If the root is missing or unreadable, or any
                directory or file in the tree cannot be read
        """
        try:
            root_stat = root.stat()
        except FileNotFoundError as e:
            raise ScanError(
                f"Local directory does not exist: {root}", str(root)
            ) from e
        except OSError as e:
            raise ScanError(f"Cannot read {root}: {e}", str(root)) from e
        if not stat.S_ISDIR(root_stat.st_mode):
            raise ScanError(f"Local path is not a directory: {root}", str(root))

        yield from self._scan_dir(root, root)

    def _scan_dir(self, directory: Path, base_path: Path) -> Iterator[LocalFile]:
        try:
            entries = sorted(directory.iterdir(), key=lambda p: p.name)
        except OSError as e:
            raise ScanError(f"Cannot read directory {directory}: {e}", str(directory)) from e

        for item in entries:
            try:
                if item.is_dir():
                    if item.is_symlink():
                        logger.debug(f"Not following directory symlink: {item}")
                        continue
                    yield from self._scan_dir(item, base_path)
                elif item.is_file():
                    if item.name in self.exclude_names:
                        logger.debug(f"Skipping reserved file name: {item}")
                        continue
                    yield LocalFile.from_path(item, base_path)
                else:
                    logger.debug(f"Skipping non-regular file: {item}")
            except OSError as e:
                raise ScanError(f"Cannot read {item}: {e}", str(item)) from e
