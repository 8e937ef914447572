"""
Timeline engine: turns successive inventory snapshots into first/last-seen history.

History is only worth writing when something changed state. Three transitions
count: an item seen for the first time (discovered), an item seen again after a
gap longer than the threshold (reacquired), and an item that was present on the
previous cycle but not this one (vanished). A plain ``last_seen`` bump on a
continuously held item stays in memory until one of those happens.
"""

from collections.abc import Iterable

from itemtracker.config import settings
from itemtracker.logging import get_logger
from itemtracker.models import CycleReport, ItemState, ItemTimeline, TrackerEvent

logger = get_logger('services.timeline')


class TimelineEngine:
    """In-memory owner of per-item timelines for one tracked save."""

    def __init__(
        self,
        catalog: Iterable[str],
        history: dict[str, ItemTimeline] | None = None,
        gap_threshold_ms: int | None = None,
    ):
        self.catalog = frozenset(catalog)
        self.history: dict[str, ItemTimeline] = dict(history or {})
        self.previous_snapshot: frozenset[str] = frozenset()
        self.gap_threshold_ms = settings.GAP_THRESHOLD_MS if gap_threshold_ms is None else gap_threshold_ms

    def advance(self, current_snapshot: Iterable[str], now: int) -> CycleReport:
        """
        Apply one scan cycle.

        :param current_snapshot: Identifiers present in the save right now
        :type current_snapshot: Iterable[str]
        :param now: Scan time in epoch milliseconds
        :type now: int
        :return: Events of this cycle; ``should_flush`` tells whether to persist
        :rtype: CycleReport
        """
        current = frozenset(current_snapshot)
        report = CycleReport(scanned_at=now, snapshot_size=len(current))

        for item_id in sorted(current & self.catalog):
            timeline = self.history.get(item_id)
            if timeline is None:
                self.history[item_id] = ItemTimeline(first_seen=now, last_seen=now)
                report.discovered.append(item_id)
                logger.info(f"{TrackerEvent.DISCOVERED.value} {item_id}")
                continue

            old_last_seen = timeline.last_seen
            timeline.last_seen = now
            if now - old_last_seen > self.gap_threshold_ms:
                timeline.first_seen = now
                report.reacquired.append(item_id)
                logger.info(f"{TrackerEvent.REACQUIRED.value} {item_id} after {now - old_last_seen} ms")

        # Vanishing only forces a flush; last_seen was already bumped on the
        # cycle the item was last present.
        for item_id in sorted(self.previous_snapshot - current):
            report.vanished.append(item_id)
            logger.info(f"{TrackerEvent.VANISHED.value} {item_id}")

        self.previous_snapshot = current
        return report

    def state_of(self, item_id: str) -> ItemState:
        if item_id in self.previous_snapshot:
            return ItemState.PRESENT
        if item_id in self.history:
            return ItemState.HISTORICAL
        return ItemState.UNSEEN

    def history_copy(self) -> dict[str, ItemTimeline]:
        return {item_id: timeline.model_copy() for item_id, timeline in self.history.items()}
