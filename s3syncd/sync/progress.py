"""Progress events emitted by the sync engine during a pass."""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class SyncProgressEvent(str, Enum):
    """Milestones of a pass."""

    SCAN_COMPLETE = "scan_complete"
    FILE_UPLOADED = "file_uploaded"
    FILE_SKIPPED = "file_skipped"
    VERIFY_COMPLETE = "verify_complete"
    MARKER_WRITTEN = "marker_written"
    PASS_COMPLETE = "pass_complete"


@dataclass
class SyncProgressInfo:
    """Snapshot of pass progress delivered with each event."""

    event: SyncProgressEvent
    files_total: int = 0
    files_done: int = 0
    bytes_total: int = 0
    bytes_done: int = 0
    relative_path: str = ""
    """File the event is about, or the key of a written marker"""


class SyncProgressTracker:
    """Accumulates counters for a pass and forwards events to a callback."""

    def __init__(self, callback: Optional[Callable[[SyncProgressInfo], None]] = None):
        self.callback = callback
        self.files_total = 0
        self.files_done = 0
        self.bytes_total = 0
        self.bytes_done = 0

    def _emit(self, event: SyncProgressEvent, relative_path: str = "") -> None:
        if self.callback is None:
            return
        self.callback(
            SyncProgressInfo(
                event=event,
                files_total=self.files_total,
                files_done=self.files_done,
                bytes_total=self.bytes_total,
                bytes_done=self.bytes_done,
                relative_path=relative_path,
            )
        )

    def on_scan_complete(self, files_total: int, bytes_total: int) -> None:
        self.files_total = files_total
        self.bytes_total = bytes_total
        self._emit(SyncProgressEvent.SCAN_COMPLETE)

    def on_file_done(self, relative_path: str, size: int, uploaded: bool) -> None:
        self.files_done += 1
        self.bytes_done += size
        event = (
            SyncProgressEvent.FILE_UPLOADED
            if uploaded
            else SyncProgressEvent.FILE_SKIPPED
        )
        self._emit(event, relative_path)

    def on_verify_complete(self) -> None:
        self._emit(SyncProgressEvent.VERIFY_COMPLETE)

    def on_marker_written(self, key: str) -> None:
        self._emit(SyncProgressEvent.MARKER_WRITTEN, key)

    def on_pass_complete(self) -> None:
        self._emit(SyncProgressEvent.PASS_COMPLETE)
