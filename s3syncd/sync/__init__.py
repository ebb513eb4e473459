"""Sync engine for s3syncd - scan, upload, verify, mark, reconcile."""

from .comparator import FileComparator, SyncAction, SyncDecision
from .engine import SyncEngine
from .markers import MarkerPublisher, render_marker
from .modes import MarkerPolicy
from .operations import SyncOperations
from .progress import SyncProgressEvent, SyncProgressInfo, SyncProgressTracker
from .reconcile import Reconciler
from .scanner import DirectoryScanner, LocalFile
from .scheduler import SchedulerState, SyncScheduler
from .state import LocalTree, SubdirectoryRecord, build_local_tree
from .target import SyncTarget
from .verifier import SubtreeVerifier, VerificationReport

__all__ = [
    "SyncEngine",
    "SyncScheduler",
    "SchedulerState",
    "SyncTarget",
    "MarkerPolicy",
    "SyncOperations",
    "DirectoryScanner",
    "LocalFile",
    "LocalTree",
    "SubdirectoryRecord",
    "build_local_tree",
    "FileComparator",
    "SyncAction",
    "SyncDecision",
    "SubtreeVerifier",
    "VerificationReport",
    "MarkerPublisher",
    "render_marker",
    "Reconciler",
    "SyncProgressEvent",
    "SyncProgressInfo",
    "SyncProgressTracker",
]
