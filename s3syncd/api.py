"""Object store client for s3syncd."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from typing import IO, Any, Protocol, Union

import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import (
    BotoCoreError,
    ClientError,
    NoCredentialsError,
    PartialCredentialsError,
)

from .exceptions import (
    DeleteError,
    StoreAuthenticationError,
    StoreNetworkError,
    StorePermissionError,
    StoreRateLimitError,
    TransportError,
)
from .utils import (
    DEFAULT_CONNECT_TIMEOUT,
    DEFAULT_DELETE_BATCH_SIZE,
    DEFAULT_MAX_RETRIES,
    DEFAULT_OPERATION_TIMEOUT,
)

logger = logging.getLogger(__name__)

Body = Union[bytes, IO[bytes]]

NOT_FOUND_CODES = frozenset({"404", "NoSuchKey", "NotFound"})
AUTH_CODES = frozenset(
    {
        "401",
        "InvalidAccessKeyId",
        "SignatureDoesNotMatch",
        "ExpiredToken",
        "InvalidToken",
        "TokenRefreshRequired",
    }
)
PERMISSION_CODES = frozenset({"403", "AccessDenied", "AllAccessDisabled"})
THROTTLE_CODES = frozenset(
    {
        "429",
        "503",
        "SlowDown",
        "Throttling",
        "ThrottlingException",
        "RequestLimitExceeded",
        "TooManyRequestsException",
    }
)


class ObjectStore(Protocol):
    """Capabilities a sync pass needs from a remote blob store."""

    def exists(self, bucket: str, key: str) -> bool:
        """True iff an object is addressable at key.

        Must return False for "not found" and raise TransportError for any
        other failure.
        """
        ...

    def put(self, bucket: str, key: str, body: Body) -> None:
        """Store body under key, overwriting any existing object."""
        ...

    def list(self, bucket: str, prefix: str) -> Iterator[tuple[str, dict[str, Any]]]:
        """Yield (key, metadata) for every object under prefix."""
        ...

    def delete_batch(self, bucket: str, keys: list[str]) -> None:
        """Delete the given keys."""
        ...


def classify_client_error(
    e: ClientError, operation: str, key: str = ""
) -> TransportError:
    """Map a botocore ClientError to a TransportError subclass.

    Args:
        e: The error raised by botocore
        operation: Name of the store operation (for the message)
        key: Object key involved, if any

    Returns:
        TransportError subclass instance (not raised)
    """
    error = e.response.get("Error", {})
    code = str(error.get("Code", "Unknown"))
    status = e.response.get("ResponseMetadata", {}).get("HTTPStatusCode")
    message = error.get("Message") or str(e)
    target = f" {key}" if key else ""
    text = f"{operation}{target} failed ({code}): {message}"

    if code in AUTH_CODES or status == 401:
        return StoreAuthenticationError(text, key=key, code=code)
    if code in PERMISSION_CODES or status == 403:
        return StorePermissionError(text, key=key, code=code)
    if code in THROTTLE_CODES or status in (429, 503):
        return StoreRateLimitError(text, key=key, code=code)
    return TransportError(text, key=key, code=code)


def _is_not_found(e: ClientError) -> bool:
    code = str(e.response.get("Error", {}).get("Code", ""))
    status = e.response.get("ResponseMetadata", {}).get("HTTPStatusCode")
    return code in NOT_FOUND_CODES or status == 404


class S3Client:
    """ObjectStore implementation backed by boto3.

    All calls are blocking. Connect and read timeouts plus a bounded retry
    policy are applied through botocore so a hung call cannot stall a pass
    indefinitely.

    Examples:
        >>> client = S3Client(region="eu-central-1")
        >>> client.exists("my-bucket", "reports/2024.csv")
        False
    """

    def __init__(
        self,
        access_key: str | None = None,
        secret_key: str | None = None,
        region: str | None = None,
        endpoint_url: str | None = None,
        operation_timeout: float = DEFAULT_OPERATION_TIMEOUT,
        connect_timeout: float = DEFAULT_CONNECT_TIMEOUT,
        max_retries: int = DEFAULT_MAX_RETRIES,
        delete_batch_size: int = DEFAULT_DELETE_BATCH_SIZE,
        client: Any = None,
    ):
        """Initialize the S3 client.

        Args:
            access_key: Static access key (uses boto3 credential chain if None)
            secret_key: Static secret key
            region: AWS region name
            endpoint_url: Endpoint for S3-compatible stores
            operation_timeout: Read timeout per call in seconds
            connect_timeout: Connect timeout per call in seconds
            max_retries: Maximum retry attempts handled by botocore
            delete_batch_size: Keys per DeleteObjects request (max 1000)
            client: Pre-built boto3 S3 client (mainly for tests)
        """
        self.region = region
        self.endpoint_url = endpoint_url
        self.operation_timeout = operation_timeout
        self.connect_timeout = connect_timeout
        self.max_retries = max_retries
        self.delete_batch_size = min(delete_batch_size, DEFAULT_DELETE_BATCH_SIZE)

        if client is None:
            client = self._create_client(access_key, secret_key)
        self._client = client

    def _create_client(self, access_key: str | None, secret_key: str | None) -> Any:
        config = BotoConfig(
            connect_timeout=self.connect_timeout,
            read_timeout=self.operation_timeout,
            retries={"max_attempts": self.max_retries, "mode": "standard"},
        )
        kwargs: dict[str, Any] = {"config": config}
        if self.region:
            kwargs["region_name"] = self.region
        if self.endpoint_url:
            kwargs["endpoint_url"] = self.endpoint_url
        if access_key and secret_key:
            kwargs["aws_access_key_id"] = access_key
            kwargs["aws_secret_access_key"] = secret_key
        else:
            logger.debug("No static credentials; relying on boto3 credential chain")
        return boto3.client("s3", **kwargs)

    @property
    def client(self) -> Any:
        """The underlying boto3 client."""
        return self._client

    def _translate(self, e: Exception, operation: str, key: str = "") -> TransportError:
        if isinstance(e, ClientError):
            return classify_client_error(e, operation, key)
        if isinstance(e, (NoCredentialsError, PartialCredentialsError)):
            return StoreAuthenticationError(
                f"{operation} failed: no usable credentials ({e})", key=key
            )
        return StoreNetworkError(f"{operation} failed: {e}", key=key)

    # =========================
    # Object Operations
    # =========================

    def exists(self, bucket: str, key: str) -> bool:
        """Check whether an object exists using a metadata-only HEAD request.

        Args:
            bucket: Bucket name
            key: Object key

        Returns:
            True if the object exists, False if the store reports it absent

        Raises:
            TransportError: For any failure other than "not found"
        """
        try:
            self._client.head_object(Bucket=bucket, Key=key)
        except ClientError as e:
            if _is_not_found(e):
                return False
            raise self._translate(e, "HeadObject", key) from e
        except BotoCoreError as e:
            raise self._translate(e, "HeadObject", key) from e
        return True

    def put(self, bucket: str, key: str, body: Body) -> None:
        """Upload an object.

        Args:
            bucket: Bucket name
            key: Object key
            body: Bytes or a binary file object (streamed)

        Raises:
            TransportError: If the upload fails
        """
        try:
            self._client.put_object(Bucket=bucket, Key=key, Body=body)
        except (ClientError, BotoCoreError) as e:
            raise self._translate(e, "PutObject", key) from e

    def list(self, bucket: str, prefix: str) -> Iterator[tuple[str, dict[str, Any]]]:
        """List objects under a prefix, following pagination.

        Args:
            bucket: Bucket name
            prefix: Key prefix ("" lists the whole bucket)

        Yields:
            (key, metadata) tuples where metadata carries Size, ETag and
            LastModified as returned by S3

        Raises:
            TransportError: If a page cannot be fetched
        """
        paginator = self._client.get_paginator("list_objects_v2")
        kwargs: dict[str, Any] = {"Bucket": bucket}
        if prefix:
            kwargs["Prefix"] = prefix

        try:
            for page in paginator.paginate(**kwargs):
                for obj in page.get("Contents", []) or []:
                    metadata = {k: v for k, v in obj.items() if k != "Key"}
                    yield obj["Key"], metadata
        except (ClientError, BotoCoreError) as e:
            raise self._translate(e, "ListObjectsV2", prefix) from e

    def delete_batch(self, bucket: str, keys: list[str]) -> None:
        """Delete objects in batches of at most ``delete_batch_size`` keys.

        Args:
            bucket: Bucket name
            keys: Keys to delete

        Raises:
            DeleteError: If the store reports per-key failures
            TransportError: If a request fails
        """
        for start in range(0, len(keys), self.delete_batch_size):
            batch = keys[start : start + self.delete_batch_size]
            try:
                response = self._client.delete_objects(
                    Bucket=bucket,
                    Delete={
                        "Objects": [{"Key": key} for key in batch],
                        "Quiet": True,
                    },
                )
            except (ClientError, BotoCoreError) as e:
                raise self._translate(e, "DeleteObjects") from e

            errors = response.get("Errors") or []
            if errors:
                first = errors[0]
                raise DeleteError(
                    f"DeleteObjects failed for {len(errors)} key(s), "
                    f"first: {first.get('Key')} ({first.get('Code')}: "
                    f"{first.get('Message')})",
                    key=first.get("Key", ""),
                    code=first.get("Code", ""),
                )
            logger.debug(f"Deleted batch of {len(batch)} object(s) from {bucket}")
