"""Marker publishing for verified subdirectories.

A marker is written after verification, not atomically with it. If the
store changes in between, a marker can be misleading until the next pass
re-verifies and either rewrites it or withholds it.
"""

import logging
from datetime import datetime
from typing import Callable, Optional

from ..exceptions import TransportError
from ..utils import marker_key
from .modes import MarkerPolicy
from .operations import SyncOperations
from .target import SyncTarget
from .verifier import VerificationReport

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now().astimezone()


def render_marker(timestamp: datetime, policy: MarkerPolicy) -> str:
    """Render the body of a marker object.

    The body is informational only; it is never read back.
    """
    return (
        f"Synced at: {timestamp.isoformat(timespec='seconds')}\n"
        f"Policy: {policy.value}. {policy.note}\n"
    )


class MarkerPublisher:
    """Writes markers for subdirectories that passed verification."""

    def __init__(
        self,
        operations: SyncOperations,
        target: SyncTarget,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """Initialize marker publisher.

        Args:
            operations: Store operations for the target bucket
            target: Sync target (prefix, marker file name, policy)
            clock: Returns the timestamp recorded in markers
        """
        self.operations = operations
        self.target = target
        self.clock = clock or _now

    def publish(self, report: VerificationReport) -> list[str]:
        """Write markers allowed by the target's policy.

        Args:
            report: Verification report of the current pass

        Returns:
            Keys of the markers written, in order

        Raises:
            TransportError: If a marker write fails; remaining markers for
                this pass are not attempted
        """
        policy = self.target.marker_policy
        eligible = report.eligible_subdirs(policy)

        if policy == MarkerPolicy.STRICT and not report.all_complete:
            logger.warning(
                "Some subdirectories are not fully synced, skipping all marker files"
            )
            for subdir in report.incomplete:
                logger.warning(f"Incomplete sync: {subdir}")
            return []

        if not eligible:
            return []

        body = render_marker(self.clock(), policy)
        written: list[str] = []
        for subdir in eligible:
            key = marker_key(self.target.prefix, subdir, self.target.marker_file)
            try:
                self.operations.write_marker(key, body)
            except TransportError:
                logger.error(
                    f"Error creating {self.target.marker_file} for {subdir}"
                )
                raise
            written.append(key)
            logger.info(f"Created {self.target.marker_file} for subdirectory: {subdir}")

        for subdir in report.incomplete:
            logger.info(f"Withholding {self.target.marker_file} for: {subdir}")

        return written
