"""Exceptions raised by s3syncd."""


class SyncError(Exception):
    """Base exception for all s3syncd errors."""


class ConfigError(SyncError):
    """Configuration is missing, malformed, or incomplete."""


class ScanError(SyncError):
    """The local tree could not be read."""

    def __init__(self, message: str, path: str = ""):
        self.path = path
        super().__init__(message)


class TransportError(SyncError):
    """A call to the object store failed (network, auth, throttling)."""

    def __init__(self, message: str, key: str = "", code: str = ""):
        self.key = key
        self.code = code
        super().__init__(message)


class StoreAuthenticationError(TransportError):
    """Credentials are missing or were rejected by the store."""


class StorePermissionError(TransportError):
    """The credentials are valid but lack permission for the operation."""


class StoreRateLimitError(TransportError):
    """The store is throttling requests."""


class StoreNetworkError(TransportError):
    """Connection, DNS or timeout failure talking to the store."""


class UploadError(TransportError):
    """A file could not be uploaded."""


class DeleteError(TransportError):
    """One or more objects could not be deleted."""


class VerificationGap(SyncError):
    """A file expected remotely is missing after the upload phase.

    Gaps are collected into a verification report and logged; they withhold
    markers but never abort a pass.
    """

    def __init__(self, subdir: str, relative_path: str, remote_key: str):
        self.subdir = subdir
        self.relative_path = relative_path
        self.remote_key = remote_key
        super().__init__(f"File missing in subdirectory {subdir}: {relative_path}")
