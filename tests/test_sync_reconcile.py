"""Unit tests for remote reconciliation."""

from pathlib import Path

import pytest

from s3syncd.exceptions import TransportError
from s3syncd.sync.operations import SyncOperations
from s3syncd.sync.reconcile import Reconciler
from s3syncd.sync.scanner import LocalFile
from s3syncd.sync.state import build_local_tree
from s3syncd.sync.target import SyncTarget


def make_tree(*relative_paths: str):
    return build_local_tree(
        LocalFile(Path("/data") / rel, rel, rel.rpartition("/")[0] or ".", 1)
        for rel in relative_paths
    )


def make_reconciler(store, prefix=""):
    target = SyncTarget(Path("/data"), "bucket", prefix=prefix, reconcile=True)
    return Reconciler(SyncOperations(store, "bucket"), target)


class TestReconciler:
    """Tests for Reconciler."""

    def test_finds_orphans(self, store):
        store.objects["bucket"] = {
            "a.txt": b"",
            "sub/b.txt": b"",
            "old/obsolete.txt": b"",
        }

        orphans = make_reconciler(store).find_orphans(make_tree("a.txt", "sub/b.txt"))

        assert orphans == ["old/obsolete.txt"]

    def test_markers_never_deleted(self, store):
        store.objects["bucket"] = {
            "sub/b.txt": b"",
            "sub/syncd.txt": b"",
            "gone/syncd.txt": b"",
        }

        deleted = make_reconciler(store).reconcile(make_tree("sub/b.txt"))

        assert deleted == []
        assert "delete_batch" not in store.call_names()

    def test_sibling_prefix_untouched(self, store):
        """Objects under "data2/" are not part of prefix "data"."""
        store.objects["bucket"] = {
            "data/a.txt": b"",
            "data/stale.txt": b"",
            "data2/other.txt": b"",
        }

        deleted = make_reconciler(store, prefix="data").reconcile(make_tree("a.txt"))

        assert deleted == ["data/stale.txt"]
        assert store.keys() == {"data/a.txt", "data2/other.txt"}
        assert ("list", "data/") in store.calls

    def test_delete_failure_propagates(self, store):
        store.objects["bucket"] = {"stale.txt": b""}
        reconciler = make_reconciler(store)

        def fail(bucket, keys):
            raise TransportError("DeleteObjects failed")

        store.delete_batch = fail
        with pytest.raises(TransportError):
            reconciler.reconcile(make_tree())
