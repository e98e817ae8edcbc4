"""
Media progress snapshot.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


def get_percentage(length: float, position: float) -> int:
    """
    Percentage of the media played so far.

    A zero length (no media duration reported) yields 0.
    """
    if length <= 0:
        return 0
    return round((position / length) * 100)


@dataclass(frozen=True, slots=True)
class Progress:
    """
    Media progress information.

    Length and position are in seconds, eg
        >>> Progress.from_times(length=90.3, position=40.1)
        Progress(length=90.3, position=40.1, percent=44)
    """

    length: float
    position: float
    percent: int

    @classmethod
    def from_times(cls, length: float, position: float) -> Progress:
        return cls(length=length, position=position, percent=get_percentage(length, position))

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary (for JSON output)."""
        return {
            "length": self.length,
            "position": self.position,
            "percent": self.percent,
        }
