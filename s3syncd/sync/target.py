"""Sync target definition."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Union

from ..utils import DEFAULT_MARKER_FILE, normalize_prefix
from .modes import MarkerPolicy


@dataclass(frozen=True)
class SyncTarget:
    """What a pass mirrors and where.

    A target is immutable for the lifetime of a scheduler; every pass
    receives the same instance.

    Examples:
        >>> target = SyncTarget(local=Path("/data"), bucket="backups")
        >>> target.prefix
        ''
        >>> SyncTarget(Path("/data"), "backups", prefix="/nightly/").prefix
        'nightly'
    """

    local: Path
    """Local root directory"""

    bucket: str
    """Remote bucket name"""

    prefix: str = ""
    """Key prefix (normalized without leading/trailing slashes)"""

    marker_file: str = DEFAULT_MARKER_FILE
    """File name of the marker object written into synced subdirectories"""

    marker_policy: MarkerPolicy = field(default=MarkerPolicy.STRICT)
    """How verification results gate marker emission"""

    reconcile: bool = False
    """Delete remote objects that have no local counterpart (destructive)"""

    def __post_init__(self) -> None:
        # frozen dataclass: normalize through object.__setattr__
        local: Union[str, Path] = self.local
        if isinstance(local, str):
            object.__setattr__(self, "local", Path(local))

        object.__setattr__(self, "prefix", normalize_prefix(self.prefix))

        if isinstance(self.marker_policy, str) and not isinstance(
            self.marker_policy, MarkerPolicy
        ):
            object.__setattr__(
                self, "marker_policy", MarkerPolicy.from_string(self.marker_policy)
            )

        if not self.bucket or not self.bucket.strip():
            raise ValueError("Bucket name cannot be empty")
        if not self.marker_file or "/" in self.marker_file or "\\" in self.marker_file:
            raise ValueError(f"Invalid marker file name: {self.marker_file!r}")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SyncTarget":
        """Create a SyncTarget from a dictionary.

        Args:
            data: Dictionary with ``local`` and ``bucket`` and optional
                ``prefix``, ``markerFile``, ``markerPolicy``, ``reconcile``

        Raises:
            ValueError: If required fields are missing
        """
        missing = [key for key in ("local", "bucket") if key not in data]
        if missing:
            raise ValueError(f"Missing required fields: {', '.join(missing)}")

        return cls(
            local=Path(data["local"]),
            bucket=data["bucket"],
            prefix=data.get("prefix", ""),
            marker_file=data.get("markerFile", DEFAULT_MARKER_FILE),
            marker_policy=MarkerPolicy.from_string(
                data.get("markerPolicy", MarkerPolicy.STRICT.value)
            ),
            reconcile=bool(data.get("reconcile", False)),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert the target to a dictionary."""
        return {
            "local": str(self.local),
            "bucket": self.bucket,
            "prefix": self.prefix,
            "markerFile": self.marker_file,
            "markerPolicy": self.marker_policy.value,
            "reconcile": self.reconcile,
        }

    @property
    def location(self) -> str:
        """Display form of the remote location (``s3://bucket/prefix``)."""
        if self.prefix:
            return f"s3://{self.bucket}/{self.prefix}"
        return f"s3://{self.bucket}"

    def __str__(self) -> str:
        return f"{self.local} -> {self.location}"
