"""CLI progress display for sync passes.

This module provides a Rich-based progress display that works with
the SyncProgressTracker from the sync engine.
"""

from typing import Optional

from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TaskProgressColumn,
    TextColumn,
    TimeElapsedColumn,
)

from .sync.progress import SyncProgressEvent, SyncProgressInfo, SyncProgressTracker
from .utils import format_size


class SyncProgressDisplay:
    """Rich-based progress display for a sync pass.

    Shows checked files out of scanned files plus the byte volume covered,
    and switches the description as the pass moves through verification
    and marker emission.
    """

    def __init__(self) -> None:
        """Initialize the progress display."""
        self._progress: Optional[Progress] = None
        self._task: Optional[TaskID] = None

    def create_tracker(self) -> SyncProgressTracker:
        """Create a SyncProgressTracker that updates this display."""
        return SyncProgressTracker(callback=self._handle_event)

    def _format_pass_progress(self, info: SyncProgressInfo) -> str:
        """Format pass progress, e.g. "2/5 files, 1.5 KB/10.0 MB"."""
        files_str = f"{info.files_done}/{info.files_total} files"
        return f"{files_str}, {format_size(info.bytes_done)}/{format_size(info.bytes_total)}"

    def _handle_event(self, info: SyncProgressInfo) -> None:
        """Handle a progress event from the tracker."""
        if self._progress is None or self._task is None:
            return

        if info.event == SyncProgressEvent.SCAN_COMPLETE:
            self._progress.update(
                self._task,
                description="Uploading missing files",
                total=info.files_total,
                completed=0,
                pass_info=self._format_pass_progress(info),
            )

        elif info.event in (
            SyncProgressEvent.FILE_UPLOADED,
            SyncProgressEvent.FILE_SKIPPED,
        ):
            self._progress.update(
                self._task,
                completed=info.files_done,
                pass_info=self._format_pass_progress(info),
            )

        elif info.event == SyncProgressEvent.VERIFY_COMPLETE:
            self._progress.update(self._task, description="Writing markers")

        elif info.event == SyncProgressEvent.PASS_COMPLETE:
            self._progress.update(self._task, description="Sync pass complete")

    def __enter__(self) -> "SyncProgressDisplay":
        """Enter context manager - start progress display."""
        self._progress = Progress(
            SpinnerColumn(),
            TextColumn("[bold blue]{task.description}"),
            BarColumn(),
            TaskProgressColumn(),
            TextColumn("[cyan]{task.fields[pass_info]}"),
            TimeElapsedColumn(),
            refresh_per_second=4,
            transient=True,
        )
        self._progress.__enter__()
        self._task = self._progress.add_task(
            "Scanning local directory...",
            total=None,
            pass_info="0/0 files",
        )
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit context manager - stop progress display."""
        if self._progress is not None:
            self._progress.__exit__(exc_type, exc_val, exc_tb)
            self._progress = None
            self._task = None
