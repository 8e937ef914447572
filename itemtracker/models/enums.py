"""
Enum definitions for the Item Tracker API.
"""
from enum import Enum


class TrackerEvent(str, Enum):
    """State transitions that force the history to be written to disk."""
    DISCOVERED = "discovered"
    REACQUIRED = "reacquired"
    VANISHED = "vanished"


class ItemState(str, Enum):
    """Per-item state derived each cycle from history and the current snapshot."""
    UNSEEN = "unseen"
    PRESENT = "present"
    HISTORICAL = "historical"


class ItemStatus(str, Enum):
    """Collection status of a catalog item, as listed to the user."""
    COLLECTED = "COLLECTED"
    IGNORED = "IGNORED"
    MISSING = "MISSING"
