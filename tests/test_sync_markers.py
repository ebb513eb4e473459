"""Unit tests for marker publishing."""

from datetime import datetime, timezone
from pathlib import Path

import pytest

from s3syncd.exceptions import TransportError
from s3syncd.sync.markers import MarkerPublisher, render_marker
from s3syncd.sync.modes import MarkerPolicy
from s3syncd.sync.operations import SyncOperations
from s3syncd.sync.target import SyncTarget
from s3syncd.sync.verifier import VerificationReport

FIXED = datetime(2024, 5, 1, 12, 30, 0, tzinfo=timezone.utc)


def make_publisher(store, **target_kwargs):
    target = SyncTarget(Path("/data"), "bucket", **target_kwargs)
    return MarkerPublisher(SyncOperations(store, "bucket"), target, clock=lambda: FIXED)


class TestRenderMarker:
    """Tests for marker bodies."""

    def test_strict_body(self):
        body = render_marker(FIXED, MarkerPolicy.STRICT)
        assert body == (
            "Synced at: 2024-05-01T12:30:00+00:00\n"
            "Policy: strict. All subdirectories verified complete.\n"
        )

    def test_per_subdirectory_body(self):
        body = render_marker(FIXED, MarkerPolicy.PER_SUBDIRECTORY)
        assert "Policy: per_subdirectory. Subdirectory verified complete." in body


class TestMarkerPublisher:
    """Tests for MarkerPublisher."""

    def test_strict_complete_writes_all(self, store):
        publisher = make_publisher(store)

        written = publisher.publish(VerificationReport(status={"b": True, "a": True}))

        assert written == ["a/syncd.txt", "b/syncd.txt"]
        assert store.objects["bucket"]["a/syncd.txt"].startswith(b"Synced at: 2024")

    def test_strict_incomplete_writes_nothing(self, store, caplog):
        publisher = make_publisher(store)

        written = publisher.publish(VerificationReport(status={"a": True, "b": False}))

        assert written == []
        assert store.puts() == []
        assert "skipping all marker files" in caplog.text
        assert "Incomplete sync: b" in caplog.text

    def test_per_subdirectory_partial(self, store):
        publisher = make_publisher(store, marker_policy=MarkerPolicy.PER_SUBDIRECTORY)

        written = publisher.publish(VerificationReport(status={"a": True, "b": False}))

        assert written == ["a/syncd.txt"]
        assert store.keys() == {"a/syncd.txt"}

    def test_prefix_and_custom_marker_name(self, store):
        publisher = make_publisher(store, prefix="backup", marker_file="DONE")

        written = publisher.publish(VerificationReport(status={"x/y": True}))

        assert written == ["backup/x/y/DONE"]

    def test_no_subdirectories(self, store):
        assert make_publisher(store).publish(VerificationReport()) == []
        assert store.calls == []

    def test_write_failure_aborts(self, store):
        """Remaining markers are not attempted after a failed write."""
        store.fail_put["a/syncd.txt"] = TransportError("PutObject failed")
        publisher = make_publisher(store)

        with pytest.raises(TransportError):
            publisher.publish(VerificationReport(status={"a": True, "b": True}))
        assert store.puts() == ["a/syncd.txt"]

    def test_markers_are_overwritten(self, store):
        """A rerun rewrites existing markers with a fresh timestamp."""
        store.objects["bucket"] = {"a/syncd.txt": b"old"}
        make_publisher(store).publish(VerificationReport(status={"a": True}))
        assert store.objects["bucket"]["a/syncd.txt"] != b"old"
