"""Upload decisions based on remote presence."""

import logging
from dataclasses import dataclass
from enum import Enum

from ..utils import remote_key
from .operations import SyncOperations
from .scanner import LocalFile
from .target import SyncTarget

logger = logging.getLogger(__name__)


class SyncAction(str, Enum):
    """Actions that can be taken for a local file."""

    UPLOAD = "upload"
    """Upload local file to remote"""

    SKIP = "skip"
    """Skip file (already present remotely)"""


@dataclass
class SyncDecision:
    """Represents a decision about how to sync a file."""

    action: SyncAction
    """Action to take"""

    reason: str
    """Human-readable reason for this decision"""

    local_file: LocalFile
    """Local file the decision is about"""

    remote_key: str
    """Key the file maps to in the store"""

    @property
    def relative_path(self) -> str:
        return self.local_file.relative_path


class FileComparator:
    """Decides upload vs skip for local files.

    Existence of the remote key is authoritative: content, size and
    modification time are never compared, so a truncated or stale remote
    object at an existing key is left alone.
    """

    def __init__(self, operations: SyncOperations, target: SyncTarget):
        """Initialize file comparator.

        Args:
            operations: Store operations for the target bucket
            target: Sync target (for the key prefix)
        """
        self.operations = operations
        self.target = target

    def decide(self, local_file: LocalFile) -> SyncDecision:
        """Determine the action for a single local file.

        Args:
            local_file: Scanned local file

        Returns:
            SyncDecision for this file

        Raises:
            TransportError: If the existence check fails
        """
        key = remote_key(self.target.prefix, local_file.relative_path)
        if self.operations.exists(key):
            return SyncDecision(
                action=SyncAction.SKIP,
                reason="Already exists remotely",
                local_file=local_file,
                remote_key=key,
            )
        return SyncDecision(
            action=SyncAction.UPLOAD,
            reason="Missing remotely",
            local_file=local_file,
            remote_key=key,
        )
