"""Core sync engine: one full pass of scan, upload, verify, mark."""

import logging
import time
from datetime import datetime
from typing import Callable, Optional

from ..api import ObjectStore
from ..exceptions import TransportError
from ..output import OutputFormatter
from .comparator import FileComparator, SyncAction
from .markers import MarkerPublisher
from .operations import SyncOperations
from .progress import SyncProgressTracker
from .reconcile import Reconciler
from .scanner import DirectoryScanner
from .state import LocalTree, build_local_tree
from .target import SyncTarget
from .verifier import SubtreeVerifier, VerificationReport

logger = logging.getLogger(__name__)


class SyncEngine:
    """Executes sync passes against an object store.

    A pass runs sequentially: every existence check, upload, marker write and
    deletion is a blocking call issued one after another. Passes keep no
    state between runs; everything is rebuilt from a fresh scan.
    """

    def __init__(
        self,
        store: ObjectStore,
        output: Optional[OutputFormatter] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """Initialize sync engine.

        Args:
            store: Object store client
            output: Output formatter for displaying status
            clock: Timestamp source for marker bodies
        """
        self.store = store
        self.output = output or OutputFormatter()
        self.clock = clock

    def run_pass(
        self,
        target: SyncTarget,
        progress_tracker: Optional[SyncProgressTracker] = None,
    ) -> dict:
        """Run one full pass for a target.

        Scan -> upload -> verify -> markers, followed by reconciliation when
        the target enables it.

        Args:
            target: What to sync
            progress_tracker: Optional tracker receiving progress events

        Returns:
            Dictionary with pass statistics

        Raises:
            ScanError: If the local tree cannot be read (nothing is uploaded)
            TransportError: If an upload, verification lookup, marker write or
                deletion fails; the rest of the pass is not attempted

        Examples:
            >>> engine = SyncEngine(S3Client())
            >>> stats = engine.run_pass(SyncTarget(Path("/data"), "backups"))
            >>> print(f"Uploaded {stats['uploads']} files")
        """
        tracker = progress_tracker or SyncProgressTracker()
        start_time = time.time()
        logger.info(f"Starting full directory sync: {target}")

        operations = SyncOperations(self.store, target.bucket)
        stats = self._create_empty_stats()

        # Step 1: Scan local files (aborts the pass on any traversal error)
        tree = self._scan_local(target)
        stats["files"] = len(tree)
        tracker.on_scan_complete(len(tree), sum(f.size for f in tree.files))

        # Step 2: Upload files missing remotely (fail-fast)
        self._upload_missing(tree, target, operations, stats, tracker)

        # Step 3: Re-verify every subdirectory against the store
        report = SubtreeVerifier(operations, target).verify(tree)
        stats["gaps"] = len(report.gaps)
        stats["incomplete_subdirs"] = report.incomplete
        stats["complete"] = report.all_complete
        tracker.on_verify_complete()

        # Step 4: Markers for subdirectories allowed by the policy
        publisher = MarkerPublisher(operations, target, clock=self.clock)
        written = publisher.publish(report)
        stats["markers"] = len(written)
        for key in written:
            tracker.on_marker_written(key)

        # Step 5: Optional destructive reconciliation
        if target.reconcile:
            deleted = Reconciler(operations, target).reconcile(tree)
            stats["deletes_remote"] = len(deleted)

        elapsed = time.time() - start_time
        stats["elapsed"] = elapsed
        tracker.on_pass_complete()
        logger.info(f"Full sync completed in {elapsed:.2f}s")
        logger.debug(f"Pass statistics: {stats}")

        if not self.output.quiet:
            self._display_summary(stats, report, target)

        return stats

    def _create_empty_stats(self) -> dict:
        return {
            "files": 0,
            "uploads": 0,
            "skips": 0,
            "gaps": 0,
            "incomplete_subdirs": [],
            "markers": 0,
            "deletes_remote": 0,
            "complete": False,
            "elapsed": 0.0,
        }

    def _scan_local(self, target: SyncTarget) -> LocalTree:
        scan_start = time.time()
        scanner = DirectoryScanner(exclude_names=[target.marker_file])
        tree = build_local_tree(scanner.scan(target.local))
        logger.debug(
            f"Local scan took {time.time() - scan_start:.2f}s, "
            f"found {len(tree)} file(s)"
        )
        return tree

    def _upload_missing(
        self,
        tree: LocalTree,
        target: SyncTarget,
        operations: SyncOperations,
        stats: dict,
        tracker: SyncProgressTracker,
    ) -> None:
        """Upload every scanned file that does not exist remotely.

        Raises:
            TransportError: On the first failed lookup or upload
        """
        comparator = FileComparator(operations, target)

        for local_file in tree.files:
            decision = comparator.decide(local_file)

            if decision.action == SyncAction.SKIP:
                stats["skips"] += 1
                logger.info(f"Skipping existing file: {decision.relative_path}")
                tracker.on_file_done(decision.relative_path, local_file.size, False)
                continue

            action_start = time.time()
            try:
                operations.upload_file(local_file, decision.remote_key)
            except TransportError as e:
                logger.error(f"Error uploading {local_file.path}: {e}")
                raise

            stats["uploads"] += 1
            logger.info(
                f"Uploaded new file: {local_file.path} -> "
                f"s3://{target.bucket}/{decision.remote_key}"
            )
            logger.debug(
                f"Upload of {decision.relative_path} took "
                f"{time.time() - action_start:.2f}s"
            )
            tracker.on_file_done(decision.relative_path, local_file.size, True)

    def _display_summary(
        self, stats: dict, report: VerificationReport, target: SyncTarget
    ) -> None:
        """Display pass summary.

        Args:
            stats: Statistics dictionary
            report: Verification report of the pass
            target: Sync target
        """
        if report.all_complete:
            self.output.success("Sync complete!")
        else:
            self.output.warning("Sync finished with incomplete subdirectories")

        items = [
            ("Files scanned", str(stats["files"])),
            ("Uploaded", str(stats["uploads"])),
            ("Skipped (already present)", str(stats["skips"])),
            ("Markers written", str(stats["markers"])),
        ]
        if target.reconcile:
            items.append(("Deleted remotely", str(stats["deletes_remote"])))
        if stats["incomplete_subdirs"]:
            items.append(
                ("Incomplete subdirectories", ", ".join(stats["incomplete_subdirs"]))
            )
        self.output.print_summary(f"Sync {target}", items)
