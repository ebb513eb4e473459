"""Periodic scheduling of sync passes with single-flight execution."""

import logging
import threading
from enum import Enum
from typing import Optional

from ..exceptions import ScanError, SyncError
from ..utils import format_duration
from .engine import SyncEngine
from .progress import SyncProgressTracker
from .target import SyncTarget

logger = logging.getLogger(__name__)


class SchedulerState(str, Enum):
    """Lifecycle states of a SyncScheduler."""

    IDLE = "idle"
    RUNNING = "running"
    STOPPED = "stopped"


class SyncScheduler:
    """Runs an initial pass, then optionally one pass per interval.

    At most one pass executes at any time. The permit is a single-slot
    lock acquired without blocking on every tick; if a previous pass still
    holds it the tick is dropped and logged. Missed ticks are never queued
    or caught up.

    Stopping is cooperative: ``stop()`` prevents new passes from starting
    and ``run()`` then waits for an in-flight pass to finish. A running pass
    is never interrupted.

    Examples:
        >>> scheduler = SyncScheduler(engine, target, interval=300)
        >>> signal.signal(signal.SIGTERM, lambda *_: scheduler.stop())
        >>> scheduler.run()
    """

    def __init__(
        self,
        engine: SyncEngine,
        target: SyncTarget,
        interval: float = 0.0,
        progress_tracker: Optional[SyncProgressTracker] = None,
    ):
        """Initialize the scheduler.

        Args:
            engine: Engine executing passes
            target: Target synced by every pass
            interval: Seconds between ticks; 0 runs a single pass
            progress_tracker: Tracker passed to the initial pass
        """
        self.engine = engine
        self.target = target
        self.interval = interval
        self.progress_tracker = progress_tracker

        self._permit = threading.Lock()
        self._state_lock = threading.Lock()
        self._stop_event = threading.Event()
        self._state = SchedulerState.IDLE
        self._worker: Optional[threading.Thread] = None

        self.passes_started = 0
        self.passes_failed = 0
        self.skipped_ticks = 0
        self.max_concurrent = 0
        self._active = 0
        self.last_stats: Optional[dict] = None
        self.last_error: Optional[Exception] = None

    @property
    def state(self) -> SchedulerState:
        with self._state_lock:
            return self._state

    def _set_state(self, state: SchedulerState) -> None:
        with self._state_lock:
            if self._state != state:
                logger.debug(f"Scheduler {self._state.value} -> {state.value}")
            self._state = state

    def stop(self) -> None:
        """Request the scheduler to stop. Safe to call from signal handlers."""
        if not self._stop_event.is_set():
            logger.info("Stop requested, no new sync passes will start")
        self._stop_event.set()

    @property
    def stop_requested(self) -> bool:
        return self._stop_event.is_set()

    def run(self) -> Optional[dict]:
        """Run the initial pass and, with an interval, the periodic loop.

        Returns:
            Statistics of the initial pass, or None if it failed

        Raises:
            ScanError: If the initial pass cannot read the local tree
        """
        if self.state == SchedulerState.STOPPED:
            raise RuntimeError("Scheduler has already been stopped")

        self._permit.acquire()
        try:
            initial = self._execute_pass(
                "Initial", self.progress_tracker, raise_scan_errors=True
            )
        except ScanError:
            self._set_state(SchedulerState.STOPPED)
            raise
        finally:
            self._permit.release()

        if self.interval <= 0:
            self._set_state(SchedulerState.STOPPED)
            return initial

        logger.info(f"Starting periodic sync every {format_duration(self.interval)}")
        while not self._stop_event.wait(self.interval):
            self._tick()

        self._wait_for_worker()
        self._set_state(SchedulerState.STOPPED)
        logger.info("Scheduler stopped")
        return initial

    def _tick(self) -> None:
        if self._stop_event.is_set():
            return

        if not self._permit.acquire(blocking=False):
            self.skipped_ticks += 1
            logger.info("Previous sync still in progress, skipping this interval")
            return

        worker = threading.Thread(
            target=self._run_scheduled,
            name=f"sync-pass-{self.passes_started + 1}",
        )
        self._worker = worker
        try:
            worker.start()
        except RuntimeError:
            self._permit.release()
            raise

    def _run_scheduled(self) -> None:
        try:
            self._execute_pass("Scheduled")
        finally:
            self._permit.release()

    def _execute_pass(
        self,
        label: str,
        tracker: Optional[SyncProgressTracker] = None,
        raise_scan_errors: bool = False,
    ) -> Optional[dict]:
        """Run one pass. The caller must hold the permit.

        Failures are logged and recorded. A ScanError is re-raised when
        ``raise_scan_errors`` is set (it is fatal for the initial pass); any
        other exception, local I/O included, only fails this pass.
        """
        with self._state_lock:
            self._active += 1
            self.max_concurrent = max(self.max_concurrent, self._active)
            self.passes_started += 1
            self._state = SchedulerState.RUNNING

        logger.info(f"Starting {label.lower()} sync")
        try:
            stats = self.engine.run_pass(self.target, progress_tracker=tracker)
        except SyncError as e:
            self.passes_failed += 1
            self.last_error = e
            logger.error(f"{label} sync failed: {e}")
            if raise_scan_errors and isinstance(e, ScanError):
                raise
            return None
        except Exception as e:
            self.passes_failed += 1
            self.last_error = e
            logger.exception(f"{label} sync failed unexpectedly: {e}")
            return None
        finally:
            with self._state_lock:
                self._active -= 1
                if self._active == 0 and self._state == SchedulerState.RUNNING:
                    self._state = SchedulerState.IDLE

        self.last_stats = stats
        self.last_error = None
        if stats["complete"]:
            logger.info(f"{label} sync completed successfully")
        else:
            logger.warning(
                f"{label} sync completed with incomplete subdirectories: "
                f"{', '.join(stats['incomplete_subdirs'])}"
            )
        return stats

    def _wait_for_worker(self) -> None:
        worker = self._worker
        if worker is not None and worker.is_alive():
            logger.info("Waiting for running sync to complete")
            worker.join()
