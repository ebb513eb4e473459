"""Store operations used by a sync pass."""

import logging

from ..api import ObjectStore
from ..exceptions import UploadError
from .scanner import LocalFile

logger = logging.getLogger(__name__)


class SyncOperations:
    """Upload, marker and delete operations against one bucket."""

    def __init__(self, store: ObjectStore, bucket: str):
        """Initialize sync operations.

        Args:
            store: Object store client
            bucket: Bucket every operation targets
        """
        self.store = store
        self.bucket = bucket

    def exists(self, key: str) -> bool:
        """Check remote existence of a key."""
        return self.store.exists(self.bucket, key)

    def upload_file(self, local_file: LocalFile, key: str) -> None:
        """Stream a local file to the store.

        Args:
            local_file: Local file to upload
            key: Destination key

        Raises:
            UploadError: If the local file cannot be opened
            TransportError: If the store rejects the upload
        """
        try:
            f = open(local_file.path, "rb")
        except OSError as e:
            raise UploadError(
                f"Cannot open {local_file.path} for upload: {e}", key=key
            ) from e
        with f:
            self.store.put(self.bucket, key, f)

    def write_marker(self, key: str, body: str) -> None:
        """Write (or overwrite) a marker object."""
        self.store.put(self.bucket, key, body.encode("utf-8"))

    def delete_remote(self, keys: list[str]) -> None:
        """Delete remote objects in batches."""
        if not keys:
            return
        self.store.delete_batch(self.bucket, keys)
