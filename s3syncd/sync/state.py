"""Per-pass snapshot of the local tree.

Nothing here is persisted. A :class:`LocalTree` is built fresh at the start
of every pass and discarded when the pass ends; the only durable record of
a sync is the marker objects in the store.
"""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from ..utils import ROOT_DIR, remote_key
from .scanner import LocalFile

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SubdirectoryRecord:
    """Files directly contained in one subdirectory of the local tree."""

    path: str
    """Subdirectory relative to the local root ("." for the root)"""

    files: frozenset[str] = field(default_factory=frozenset)
    """Relative paths of the files it directly contains"""

    @property
    def is_root(self) -> bool:
        """The root directory never receives a marker."""
        return self.path == ROOT_DIR

    def sorted_files(self) -> list[str]:
        return sorted(self.files)


@dataclass(frozen=True)
class LocalTree:
    """Immutable snapshot of a local scan."""

    files: tuple[LocalFile, ...]
    """Scanned files in scan order"""

    subdirs: Mapping[str, SubdirectoryRecord]
    """Subdirectory path -> record, for every directory that holds a file"""

    def __len__(self) -> int:
        return len(self.files)

    @property
    def markable_subdirs(self) -> list[SubdirectoryRecord]:
        """Records eligible for verification and markers (root excluded)."""
        return [
            record
            for path, record in sorted(self.subdirs.items())
            if not record.is_root
        ]

    def remote_keys(self, prefix: str) -> frozenset[str]:
        """RemoteKeys implied by this snapshot."""
        return frozenset(remote_key(prefix, f.relative_path) for f in self.files)


def build_local_tree(files: Iterable[LocalFile]) -> LocalTree:
    """Consume a scan into a LocalTree snapshot.

    Args:
        files: LocalFile objects, typically from ``DirectoryScanner.scan``

    Returns:
        LocalTree with files grouped by immediate parent subdirectory
    """
    collected: list[LocalFile] = []
    grouped: dict[str, set[str]] = {}

    for local_file in files:
        collected.append(local_file)
        grouped.setdefault(local_file.parent, set()).add(local_file.relative_path)

    subdirs = {
        path: SubdirectoryRecord(path=path, files=frozenset(paths))
        for path, paths in grouped.items()
    }
    logger.debug(
        f"Built local tree with {len(collected)} file(s) "
        f"in {len(subdirs)} director(y/ies)"
    )
    return LocalTree(files=tuple(collected), subdirs=MappingProxyType(subdirs))
