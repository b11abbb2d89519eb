"""Region data model shared by the timeline and its producers.

Producers (manifest / segment parsers) build ``TimelineRegion`` instances and
hand them to a ``RegionTimeline``. The timeline never constructs or mutates a
region; it only compares the four identity fields used by ``is_similar``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

from ..utils.timefmt import format_range

T = TypeVar("T")

# Repeated manifest fetches report the same event with slightly jittered times.
SIMILARITY_TOLERANCE = 0.1  # seconds


@dataclass
class TimelineRegion(Generic[T]):
    schemeIdUri: str
    id: str
    startTime: float  # seconds
    endTime: float  # seconds
    payload: Optional[T] = None
    value: str = ""  # EventStream @value, informational only

    def describe(self) -> str:
        return f"{self.schemeIdUri}#{self.id} {format_range(self.startTime, self.endTime)}"

    # Log lines pass the region itself; formatting only happens when emitted.
    __str__ = describe


@dataclass(frozen=True)
class SeekRange:
    start: float  # seconds
    end: float  # seconds


def _is_diff_negligible(a: float, b: float, tolerance: float) -> bool:
    return abs(a - b) < tolerance


def is_similar(
    a: TimelineRegion, b: TimelineRegion, tolerance: float = SIMILARITY_TOLERANCE
) -> bool:
    """Return True when two regions describe the same logical event.

    Same scheme id and event id, and both start and end times within
    ``tolerance`` seconds of each other (strictly less than).
    """
    return (
        a.schemeIdUri == b.schemeIdUri
        and a.id == b.id
        and _is_diff_negligible(a.startTime, b.startTime, tolerance)
        and _is_diff_negligible(a.endTime, b.endTime, tolerance)
    )


__all__ = ["TimelineRegion", "SeekRange", "is_similar", "SIMILARITY_TOLERANCE"]
