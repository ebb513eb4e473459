"""Configuration loading for s3syncd.

The configuration file is a flat ``key = value`` list. Blank lines and lines
starting with ``#`` are ignored. Example::

    aws_access_key = AKIA...
    aws_secret_key = ...
    local_dir = /srv/exports
    bucket_name = my-bucket
    prefix = exports
    sync_interval = 15m
    marker_policy = per_subdirectory
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from .exceptions import ConfigError
from .sync.modes import MarkerPolicy
from .sync.target import SyncTarget
from .utils import (
    DEFAULT_MARKER_FILE,
    DEFAULT_MAX_RETRIES,
    DEFAULT_OPERATION_TIMEOUT,
    parse_bool,
    parse_duration,
)

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("local_dir", "bucket_name")

KNOWN_FIELDS = frozenset(
    {
        "aws_access_key",
        "aws_secret_key",
        "aws_region",
        "endpoint_url",
        "local_dir",
        "bucket_name",
        "prefix",
        "sync_marker_file",
        "sync_interval",
        "marker_policy",
        "reconcile",
        "operation_timeout",
        "max_retries",
    }
)


@dataclass(frozen=True)
class SyncConfig:
    """Settings loaded from a configuration file."""

    target: SyncTarget
    """What to sync and how markers are gated"""

    interval: float = 0.0
    """Seconds between scheduled passes (0 means one-shot)"""

    access_key: Optional[str] = None
    secret_key: Optional[str] = None
    region: Optional[str] = None
    endpoint_url: Optional[str] = None

    operation_timeout: float = DEFAULT_OPERATION_TIMEOUT
    """Read timeout for a single store call, in seconds"""

    max_retries: int = DEFAULT_MAX_RETRIES

    @property
    def periodic(self) -> bool:
        """Whether passes repeat on an interval."""
        return self.interval > 0


def parse_config_lines(lines: list[str]) -> dict[str, str]:
    """Parse ``key = value`` lines into a dictionary.

    Args:
        lines: Raw lines of a configuration file

    Returns:
        Mapping of keys to stripped values (later keys win)

    Raises:
        ConfigError: If a non-comment line has no ``=``
    """
    values: dict[str, str] = {}
    for lineno, raw in enumerate(lines, start=1):
        line = raw.strip()
        if not line or line.startswith("#"):
            continue

        key, sep, value = line.partition("=")
        if not sep:
            raise ConfigError(f"Invalid config line {lineno}: {line}")

        key = key.strip()
        if not key:
            raise ConfigError(f"Invalid config line {lineno}: {line}")
        values[key] = value.strip()

    return values


def config_from_dict(values: dict[str, str]) -> SyncConfig:
    """Build a SyncConfig from parsed key/value pairs.

    Raises:
        ConfigError: If required fields are absent or a value is malformed
    """
    missing = [f for f in REQUIRED_FIELDS if not values.get(f)]
    if missing:
        raise ConfigError(f"Missing required config field(s): {', '.join(missing)}")

    for key in sorted(set(values) - KNOWN_FIELDS):
        logger.warning(f"Ignoring unknown config field: {key}")

    access_key = values.get("aws_access_key") or None
    secret_key = values.get("aws_secret_key") or None
    if bool(access_key) != bool(secret_key):
        raise ConfigError(
            "aws_access_key and aws_secret_key must be given together"
        )

    try:
        interval = parse_duration(values.get("sync_interval", "0"))
    except ValueError as e:
        raise ConfigError(f"Invalid sync interval: {e}") from e
    if interval < 0:
        raise ConfigError("Invalid sync interval: must not be negative")

    try:
        policy = MarkerPolicy.from_string(values.get("marker_policy", "strict"))
    except ValueError as e:
        raise ConfigError(f"Invalid marker policy: {e}") from e

    try:
        reconcile = parse_bool(values.get("reconcile", "false"))
    except ValueError as e:
        raise ConfigError(f"Invalid reconcile flag: {e}") from e

    try:
        operation_timeout = float(
            values.get("operation_timeout", DEFAULT_OPERATION_TIMEOUT)
        )
        max_retries = int(values.get("max_retries", DEFAULT_MAX_RETRIES))
    except ValueError as e:
        raise ConfigError(f"Invalid numeric setting: {e}") from e
    if operation_timeout <= 0:
        raise ConfigError("operation_timeout must be positive")
    if max_retries < 0:
        raise ConfigError("max_retries must not be negative")

    try:
        target = SyncTarget(
            local=Path(values["local_dir"]).expanduser(),
            bucket=values["bucket_name"],
            prefix=values.get("prefix", ""),
            marker_file=values.get("sync_marker_file") or DEFAULT_MARKER_FILE,
            marker_policy=policy,
            reconcile=reconcile,
        )
    except ValueError as e:
        raise ConfigError(str(e)) from e

    return SyncConfig(
        target=target,
        interval=interval,
        access_key=access_key,
        secret_key=secret_key,
        region=values.get("aws_region") or None,
        endpoint_url=values.get("endpoint_url") or None,
        operation_timeout=operation_timeout,
        max_retries=max_retries,
    )


def load_config(path: Union[str, Path]) -> SyncConfig:
    """Load configuration from a key=value file.

    Args:
        path: Path to the configuration file

    Returns:
        Parsed SyncConfig

    Raises:
        ConfigError: If the file cannot be read or is invalid
    """
    config_path = Path(path)
    try:
        with open(config_path, encoding="utf-8") as f:
            lines = f.readlines()
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigError(f"Error opening config file {config_path}: {e}") from e

    config = config_from_dict(parse_config_lines(lines))
    logger.debug(f"Loaded config from {config_path}")
    return config
