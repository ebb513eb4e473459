"""Reconciliation: delete remote objects that no longer exist locally.

This is destructive and disabled by default. Enabling it changes the
safety contract of the sync: a file deleted locally is deleted remotely on
the next pass. Marker objects are never considered for deletion.
"""

import logging

from ..utils import is_marker_key, listing_prefix
from .operations import SyncOperations
from .state import LocalTree
from .target import SyncTarget

logger = logging.getLogger(__name__)


class Reconciler:
    """Removes remote objects under the prefix with no local counterpart."""

    def __init__(self, operations: SyncOperations, target: SyncTarget):
        self.operations = operations
        self.target = target

    def find_orphans(self, tree: LocalTree) -> list[str]:
        """List remote keys under the prefix that the snapshot does not imply.

        Raises:
            TransportError: If listing fails
        """
        expected = tree.remote_keys(self.target.prefix)
        prefix = listing_prefix(self.target.prefix)

        orphans: list[str] = []
        for key, _metadata in self.operations.store.list(self.target.bucket, prefix):
            if is_marker_key(key, self.target.marker_file):
                continue
            if key not in expected:
                orphans.append(key)
        return sorted(orphans)

    def reconcile(self, tree: LocalTree) -> list[str]:
        """Delete orphaned remote objects.

        Args:
            tree: Snapshot produced by the scan of this pass

        Returns:
            Keys that were deleted

        Raises:
            TransportError: If listing or deletion fails
        """
        orphans = self.find_orphans(tree)
        if not orphans:
            logger.debug("No remote objects to reconcile")
            return []

        for key in orphans:
            logger.info(f"Deleting remote object without local file: {key}")
        self.operations.delete_remote(orphans)
        logger.info(f"Deleted {len(orphans)} object(s) from {self.target.location}")
        return orphans
