"""Shared fixtures for s3syncd tests."""

from __future__ import annotations

import tempfile
import threading
from pathlib import Path
from typing import Any, Optional

import pytest


class FakeObjectStore:
    """In-memory ObjectStore recording every call.

    ``fail_put`` / ``fail_exists`` map keys to exceptions raised for them.
    ``drop_after_put`` holds keys that are accepted by ``put`` but never
    become visible, simulating an eventually consistent or mutated store.
    """

    def __init__(self, objects: Optional[dict[str, bytes]] = None):
        self.objects: dict[str, dict[str, bytes]] = {}
        for key, body in (objects or {}).items():
            self.objects.setdefault("bucket", {})[key] = body
        self.fail_put: dict[str, Exception] = {}
        self.fail_exists: dict[str, Exception] = {}
        self.drop_after_put: set[str] = set()
        self.calls: list[tuple[str, Any]] = []
        self._lock = threading.Lock()

    def _bucket(self, bucket: str) -> dict[str, bytes]:
        return self.objects.setdefault(bucket, {})

    def exists(self, bucket: str, key: str) -> bool:
        with self._lock:
            self.calls.append(("exists", key))
        if key in self.fail_exists:
            raise self.fail_exists[key]
        return key in self._bucket(bucket)

    def put(self, bucket: str, key: str, body: Any) -> None:
        with self._lock:
            self.calls.append(("put", key))
        if key in self.fail_put:
            raise self.fail_put[key]
        data = body if isinstance(body, bytes) else body.read()
        if key in self.drop_after_put:
            return
        self._bucket(bucket)[key] = data

    def list(self, bucket: str, prefix: str):
        with self._lock:
            self.calls.append(("list", prefix))
        for key in sorted(self._bucket(bucket)):
            if key.startswith(prefix):
                yield key, {"Size": len(self._bucket(bucket)[key])}

    def delete_batch(self, bucket: str, keys: list[str]) -> None:
        with self._lock:
            self.calls.append(("delete_batch", list(keys)))
        for key in keys:
            self._bucket(bucket).pop(key, None)

    def keys(self, bucket: str = "bucket") -> set[str]:
        return set(self._bucket(bucket))

    def call_names(self) -> list[str]:
        return [name for name, _ in self.calls]

    def puts(self) -> list[str]:
        return [arg for name, arg in self.calls if name == "put"]


@pytest.fixture
def store():
    """Create an empty in-memory object store."""
    return FakeObjectStore()


@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def sample_tree(temp_dir):
    """Local tree {a.txt, sub/b.txt}."""
    (temp_dir / "a.txt").write_text("a")
    (temp_dir / "sub").mkdir()
    (temp_dir / "sub" / "b.txt").write_text("b")
    return temp_dir
