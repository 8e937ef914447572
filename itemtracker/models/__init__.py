"""
Item Tracker models.

Usage:
    from itemtracker.models import ItemTimeline, TrackerStats, CycleReport
    from itemtracker.models import CompoundTag, ListTag, ScalarTag
    from itemtracker.models import TrackerEvent, ItemState, ItemStatus
"""

# --- Enums ---
from itemtracker.models.enums import TrackerEvent, ItemState, ItemStatus

# --- Domain models ---
from itemtracker.models.domain import (
    CompoundTag, ListTag, ScalarTag, Tag, tag_from_python,
    ItemTimeline, CycleReport, TrackerStats, ItemRow,
    IgnoreToggleRequest, TrackingStartRequest,
    SaveSnapshot, SaveCandidate,
)

__all__ = [
    # Enums
    "TrackerEvent", "ItemState", "ItemStatus",
    # Domain
    "CompoundTag", "ListTag", "ScalarTag", "Tag", "tag_from_python",
    "ItemTimeline", "CycleReport", "TrackerStats", "ItemRow",
    "IgnoreToggleRequest", "TrackingStartRequest",
    "SaveSnapshot", "SaveCandidate",
]
