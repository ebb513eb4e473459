"""Utility functions for s3syncd."""

import re
from typing import Optional

# =============================================================================
# Constants
# =============================================================================

# Name of the marker object written into each fully synced subdirectory
DEFAULT_MARKER_FILE: str = "syncd.txt"

# S3 DeleteObjects accepts at most 1000 keys per request
DEFAULT_DELETE_BATCH_SIZE: int = 1000

# Per-call read timeout for store operations (seconds)
DEFAULT_OPERATION_TIMEOUT: float = 60.0

# Connect timeout for store operations (seconds)
DEFAULT_CONNECT_TIMEOUT: float = 10.0

# Retry attempts delegated to botocore
DEFAULT_MAX_RETRIES: int = 3

# Directory considered the local root in subdirectory records
ROOT_DIR: str = "."


# =============================================================================
# Remote key utilities
# =============================================================================


def normalize_prefix(prefix: Optional[str]) -> str:
    """Normalize a key prefix.

    Args:
        prefix: Raw prefix from configuration (may be None or have slashes)

    Returns:
        Prefix with backslashes converted and no leading/trailing slashes
    """
    if not prefix:
        return ""
    return prefix.replace("\\", "/").strip("/")


def remote_key(prefix: str, relative_path: str) -> str:
    """Build the remote key for a relative path.

    Args:
        prefix: Normalized key prefix (may be empty)
        relative_path: Forward-slash path relative to the local root

    Returns:
        ``prefix/relative_path``, or just ``relative_path`` without a prefix

    Examples:
        >>> remote_key("", "sub/b.txt")
        'sub/b.txt'
        >>> remote_key("backup", "a.txt")
        'backup/a.txt'
    """
    relative_path = relative_path.replace("\\", "/").lstrip("/")
    if prefix:
        return f"{prefix}/{relative_path}"
    return relative_path


def marker_key(prefix: str, subdir: str, marker_file: str) -> str:
    """Build the remote key of the marker object for a subdirectory."""
    return remote_key(prefix, f"{subdir}/{marker_file}")


def is_marker_key(key: str, marker_file: str) -> bool:
    """Check whether a remote key addresses a marker object."""
    return key == marker_file or key.endswith(f"/{marker_file}")


def listing_prefix(prefix: str) -> str:
    """Prefix used for listing objects that belong to a sync target.

    A trailing slash keeps sibling prefixes (``data2/`` next to ``data``)
    out of the listing.
    """
    return f"{prefix}/" if prefix else ""


# =============================================================================
# Duration utilities
# =============================================================================

_DURATION_UNITS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}

_DURATION_PART = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|ms|s|m|h)")


def parse_duration(value: str) -> float:
    """Parse a duration string such as ``90s``, ``5m`` or ``1h30m``.

    A bare ``0`` is accepted. Plain numbers without a unit are rejected.

    Args:
        value: Duration string

    Returns:
        Duration in seconds

    Raises:
        ValueError: If the string is not a valid duration
    """
    text = value.strip()
    if not text:
        raise ValueError("empty duration")

    sign = 1.0
    if text[0] in "+-":
        sign = -1.0 if text[0] == "-" else 1.0
        text = text[1:]

    if text == "0":
        return 0.0

    total = 0.0
    pos = 0
    while pos < len(text):
        match = _DURATION_PART.match(text, pos)
        if match is None:
            raise ValueError(f"invalid duration: {value!r}")
        total += float(match.group(1)) * _DURATION_UNITS[match.group(2)]
        pos = match.end()

    return sign * total


def format_duration(seconds: float) -> str:
    """Format seconds as a compact duration (e.g. ``1h30m0s``, ``45s``)."""
    if seconds < 60:
        return f"{seconds:g}s"
    whole = int(seconds)
    hours, rest = divmod(whole, 3600)
    minutes, secs = divmod(rest, 60)
    if hours:
        return f"{hours}h{minutes}m{secs}s"
    return f"{minutes}m{secs}s"


# =============================================================================
# Size formatting utilities
# =============================================================================


def format_size(size_bytes: int) -> str:
    """Format file size in human-readable format.

    Args:
        size_bytes: Size in bytes

    Returns:
        Formatted size string (e.g., "1.5 MB")
    """
    if size_bytes < 1024:
        return f"{size_bytes} B"
    elif size_bytes < 1024 * 1024:
        return f"{size_bytes / 1024:.1f} KB"
    elif size_bytes < 1024 * 1024 * 1024:
        return f"{size_bytes / 1024 / 1024:.1f} MB"
    else:
        return f"{size_bytes / 1024 / 1024 / 1024:.1f} GB"


def parse_bool(value: str) -> bool:
    """Parse a boolean configuration value.

    Raises:
        ValueError: If the value is not a recognized boolean
    """
    lowered = value.strip().lower()
    if lowered in ("1", "true", "yes", "on"):
        return True
    if lowered in ("0", "false", "no", "off", ""):
        return False
    raise ValueError(f"invalid boolean: {value!r}")
