"""s3syncd - mirror a local directory tree into S3 with verified sync markers."""

__version__ = "0.1.0"

from .api import ObjectStore, S3Client
from .config import SyncConfig, load_config
from .exceptions import (
    ConfigError,
    DeleteError,
    ScanError,
    StoreAuthenticationError,
    StoreNetworkError,
    StorePermissionError,
    StoreRateLimitError,
    SyncError,
    TransportError,
    UploadError,
    VerificationGap,
)

__all__ = [
    "ObjectStore",
    "S3Client",
    "SyncConfig",
    "load_config",
    "SyncError",
    "ConfigError",
    "ScanError",
    "TransportError",
    "StoreAuthenticationError",
    "StorePermissionError",
    "StoreRateLimitError",
    "StoreNetworkError",
    "UploadError",
    "DeleteError",
    "VerificationGap",
]
