"""
Enumerations for the graph layout domain.
"""

from enum import Enum


class DisplayMode(str, Enum):
    """How much render space the graph gets."""
    COMPACT = "compact"      # Inline preview card
    DETAILED = "detailed"    # Full-screen detail view

    @classmethod
    def from_string(cls, value: str) -> "DisplayMode":
        """Parse a mode name, accepting the 'mini'/'preview'/'full' aliases."""
        value = value.lower().strip()
        aliases = {
            "mini": cls.COMPACT,
            "preview": cls.COMPACT,
            "full": cls.DETAILED,
        }
        if value in aliases:
            return aliases[value]
        return cls(value)


class LayoutStatus(str, Enum):
    """Terminal state of a layout run."""
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class LayoutKind(str, Enum):
    """Which layout a run produces."""
    BASE = "base"
    FOCUS = "focus"
