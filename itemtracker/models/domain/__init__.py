"""Domain models - tag trees, timelines and save snapshots."""

from itemtracker.models.domain.tags import CompoundTag, ListTag, ScalarTag, Tag, tag_from_python
from itemtracker.models.domain.timeline import (
    ItemTimeline,
    CycleReport,
    TrackerStats,
    ItemRow,
    IgnoreToggleRequest,
    TrackingStartRequest,
)
from itemtracker.models.domain.save import SaveSnapshot, SaveCandidate

__all__ = [
    "CompoundTag", "ListTag", "ScalarTag", "Tag", "tag_from_python",
    "ItemTimeline", "CycleReport", "TrackerStats", "ItemRow",
    "IgnoreToggleRequest", "TrackingStartRequest",
    "SaveSnapshot", "SaveCandidate",
]
