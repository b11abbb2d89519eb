"""Top-level package exports.

Public API surface (keep minimal):
 - RegionTimeline (deduplicating, seek-range bounded region set)
 - TimelineRegion, SeekRange, is_similar (region model)
 - format_time (log / description formatting)
"""

from .core.region import SeekRange, TimelineRegion, is_similar  # noqa: F401
from .media.region_timeline import (  # noqa: F401
    REGION_ADD_EVENT,
    REGION_FILTER_INTERVAL,
    REGION_REMOVE_EVENT,
    RegionTimeline,
)
from .utils.timefmt import format_time  # noqa: F401

__all__ = [
    "RegionTimeline",
    "TimelineRegion",
    "SeekRange",
    "is_similar",
    "format_time",
    "REGION_ADD_EVENT",
    "REGION_REMOVE_EVENT",
    "REGION_FILTER_INTERVAL",
]
