"""Marker gating policies."""

from enum import Enum


class MarkerPolicy(str, Enum):
    """How verification results gate marker emission."""

    STRICT = "strict"
    """Write markers only if every subdirectory in the tree verified complete"""

    PER_SUBDIRECTORY = "per_subdirectory"
    """Write a marker for each subdirectory that verified complete on its own"""

    @classmethod
    def from_string(cls, value: str) -> "MarkerPolicy":
        """Parse a policy name.

        Accepts ``strict``, ``per_subdirectory``, ``per-subdirectory`` and
        ``perSubdirectory`` (case-insensitive).

        Raises:
            ValueError: If the name is not a known policy
        """
        normalized = value.strip().lower().replace("-", "_")
        aliases = {
            "strict": cls.STRICT,
            "all": cls.STRICT,
            "per_subdirectory": cls.PER_SUBDIRECTORY,
            "persubdirectory": cls.PER_SUBDIRECTORY,
            "subdirectory": cls.PER_SUBDIRECTORY,
        }
        if normalized not in aliases:
            valid = ", ".join(p.value for p in cls)
            raise ValueError(f"Unknown marker policy '{value}' (expected: {valid})")
        return aliases[normalized]

    @property
    def note(self) -> str:
        """Human-readable note recorded in marker bodies."""
        if self == MarkerPolicy.STRICT:
            return "All subdirectories verified complete."
        return "Subdirectory verified complete."
