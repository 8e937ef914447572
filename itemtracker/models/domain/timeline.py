"""Timeline domain models."""

from typing import Optional

from pydantic import BaseModel, Field

from itemtracker.models.enums import ItemState, ItemStatus


class ItemTimeline(BaseModel):
    """When an item was first and most recently observed, in epoch milliseconds."""

    first_seen: int
    last_seen: int


class CycleReport(BaseModel):
    """Outcome of one scan cycle: which transitions happened and whether history was flushed."""

    scanned_at: int
    snapshot_size: int = 0
    discovered: list[str] = Field(default_factory=list)
    reacquired: list[str] = Field(default_factory=list)
    vanished: list[str] = Field(default_factory=list)
    flushed: bool = False

    @property
    def should_flush(self) -> bool:
        return bool(self.discovered or self.reacquired or self.vanished)


class TrackerStats(BaseModel):
    """Broadcast payload describing collection progress for the tracked save."""

    save_path: str
    collected_count: int = 0
    total_count: int = 0
    missing_count: int = 0
    progress_percent: float = 0.0
    history: dict[str, ItemTimeline] = Field(default_factory=dict)
    catalog: list[str] = Field(default_factory=list)
    ignored: list[str] = Field(default_factory=list)
    last_scan_at: Optional[int] = None
    latest_save_modified_at: Optional[int] = None
    running: bool = False


class ItemRow(BaseModel):
    """One catalog item as listed to the user."""

    item_id: str
    status: ItemStatus
    state: ItemState
    first_seen: Optional[int] = None
    last_seen: Optional[int] = None


class IgnoreToggleRequest(BaseModel):
    """Payload for flipping an item's membership in the ignore set."""

    item_id: str = Field(min_length=1)


class TrackingStartRequest(BaseModel):
    """Payload for starting to track a save directory."""

    save_path: Optional[str] = Field(
        default=None,
        description="Save directory to track. Latest detected world when omitted.",
    )
