"""Post-upload verification of subdirectory completeness."""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field

from ..exceptions import VerificationGap
from ..utils import remote_key
from .modes import MarkerPolicy
from .operations import SyncOperations
from .state import LocalTree
from .target import SyncTarget

logger = logging.getLogger(__name__)


@dataclass
class VerificationReport:
    """Outcome of the verification phase of one pass."""

    status: Mapping[str, bool] = field(default_factory=dict)
    """Subdirectory -> True if every file it owns exists remotely"""

    gaps: list[VerificationGap] = field(default_factory=list)
    """First missing file of each incomplete subdirectory"""

    @property
    def all_complete(self) -> bool:
        return all(self.status.values())

    @property
    def incomplete(self) -> list[str]:
        return sorted(subdir for subdir, ok in self.status.items() if not ok)

    def eligible_subdirs(self, policy: MarkerPolicy) -> list[str]:
        """Subdirectories that may receive a marker under a policy.

        Args:
            policy: Marker gating policy

        Returns:
            Sorted subdirectory paths
        """
        if policy == MarkerPolicy.STRICT:
            if not self.all_complete:
                return []
            return sorted(self.status)
        return sorted(subdir for subdir, ok in self.status.items() if ok)


class SubtreeVerifier:
    """Re-checks every scanned file against the store after uploads.

    Verification does not trust the upload phase's own results; it queries
    the store again so that eventual consistency or concurrent external
    changes between upload and marker emission are caught.
    """

    def __init__(self, operations: SyncOperations, target: SyncTarget):
        self.operations = operations
        self.target = target

    def verify(self, tree: LocalTree) -> VerificationReport:
        """Verify every non-root subdirectory of a tree.

        Each subdirectory's check stops at its first missing file. A lookup
        failure (as opposed to confirmed absence) is not a gap; it raises.

        Args:
            tree: Snapshot produced by the scan of this pass

        Returns:
            VerificationReport

        Raises:
            TransportError: If an existence check fails
        """
        status: dict[str, bool] = {}
        gaps: list[VerificationGap] = []

        for record in tree.markable_subdirs:
            complete = True
            for relative_path in record.sorted_files():
                key = remote_key(self.target.prefix, relative_path)
                if not self.operations.exists(key):
                    gap = VerificationGap(record.path, relative_path, key)
                    gaps.append(gap)
                    logger.warning(str(gap))
                    complete = False
                    break

            status[record.path] = complete
            if complete:
                logger.debug(f"Subdirectory {record.path} fully verified")
            else:
                logger.warning(f"Subdirectory {record.path} is not fully synced")

        return VerificationReport(status=status, gaps=gaps)
