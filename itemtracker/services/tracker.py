"""
Tracker service: the single owner of one save's tracking session.

Scan cycles and ignore toggles are serialised by one lock, so the timeline map
and the ignore set are never mutated concurrently. Each cycle ends with a stats
broadcast to subscribers, whether or not the history was written.
"""

from __future__ import annotations

import asyncio
import contextlib
import re
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from pathlib import Path

from itemtracker.config import settings
from itemtracker.logging import get_logger
from itemtracker.models import CycleReport, ItemRow, ItemStatus, TrackerStats
from itemtracker.services.catalog import ItemCatalog
from itemtracker.services.collector import SnapshotCollector
from itemtracker.services.history import HistoryStore
from itemtracker.services.timeline import TimelineEngine

logger = get_logger('services.tracker')

StatsListener = Callable[[TrackerStats], Awaitable[None]]


def _now_ms() -> int:
    return int(time.time() * 1000)


@dataclass
class _TrackingSession:
    save_dir: Path
    store: HistoryStore
    engine: TimelineEngine
    ignored: set[str]
    last_scan_at: int | None = None
    latest_save_modified_at: int | None = None
    flush_pending: bool = False


class TrackerService:
    """Run scan cycles for one save and publish collection progress."""

    def __init__(
        self,
        catalog: ItemCatalog,
        collector: SnapshotCollector | None = None,
        clock: Callable[[], int] | None = None,
        scan_interval: float | None = None,
        gap_threshold_ms: int | None = None,
    ):
        self.catalog = catalog
        self.collector = collector or SnapshotCollector()
        self._clock = clock or _now_ms
        self.scan_interval = settings.SCAN_INTERVAL_SECONDS if scan_interval is None else scan_interval
        self.gap_threshold_ms = settings.GAP_THRESHOLD_MS if gap_threshold_ms is None else gap_threshold_ms

        self._lock = asyncio.Lock()
        self._listeners: list[StatsListener] = []
        self._session: _TrackingSession | None = None
        self._task: asyncio.Task | None = None
        self._stop_requested = False
        self._latest_stats: TrackerStats | None = None

    # ── Session state ──

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def save_dir(self) -> Path | None:
        return self._session.save_dir if self._session else None

    @property
    def latest_stats(self) -> TrackerStats | None:
        return self._latest_stats

    def _require_session(self, *, allow_stopped: bool = False) -> _TrackingSession:
        if self._session is None:
            raise ValueError("No save is being tracked")
        if self._stop_requested and not allow_stopped:
            raise ValueError("Tracking has been stopped")
        return self._session

    # ── Subscribers ──

    def subscribe(self, listener: StatsListener) -> Callable[[], None]:
        """
        Register a coroutine called with every stats broadcast.

        :return: Callable that removes the listener again
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def _broadcast(self, stats: TrackerStats) -> None:
        self._latest_stats = stats
        for listener in list(self._listeners):
            try:
                await listener(stats)
            except Exception:
                logger.exception("Stats listener failed")

    # ── Lifecycle ──

    async def start_tracking(self, save_dir: Path | str, *, schedule: bool = True) -> TrackerStats:
        """
        Begin tracking a save directory, replacing any previous session.

        :param save_dir: Save root directory
        :type save_dir: Path | str
        :param schedule: Start the periodic scan task (first cycle runs immediately)
        :type schedule: bool
        :return: Stats for the freshly loaded history, before any scan
        :rtype: TrackerStats
        :raises ValueError: If the directory does not exist
        """
        save_dir = Path(save_dir)
        if not save_dir.is_dir():
            raise ValueError(f"Save directory not found: {save_dir}")

        await self.stop_tracking()

        store = HistoryStore(save_dir)
        history = await asyncio.to_thread(store.load_history)
        ignored = await asyncio.to_thread(store.load_ignored)

        async with self._lock:
            self._session = _TrackingSession(
                save_dir=save_dir,
                store=store,
                engine=TimelineEngine(self.catalog.items, history, gap_threshold_ms=self.gap_threshold_ms),
                ignored=ignored,
            )
            self._stop_requested = False
            self._latest_stats = None

        logger.info(
            f"Tracking {save_dir.name} ({len(history)} known item(s), {len(ignored)} ignored)"
        )
        if self.catalog.is_empty:
            logger.warning("Item catalog is empty - nothing will be recorded")

        if schedule:
            self._task = asyncio.create_task(self._scan_loop(), name=f"tracker-scan:{save_dir.name}")
        return self.stats()

    async def stop_tracking(self) -> None:
        """Cancel future scan cycles and wait for the scan task to wind down."""
        self._stop_requested = True
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
        logger.info("Stopped tracking")

    async def _scan_loop(self) -> None:
        loop = asyncio.get_running_loop()
        while not self._stop_requested:
            started = loop.time()
            try:
                await self.run_cycle()
            except Exception:
                logger.exception("Scan cycle failed, retrying next interval")
            delay = max(self.scan_interval - (loop.time() - started), 0.0)
            await asyncio.sleep(delay)

    # ── Operations ──

    async def run_cycle(self) -> CycleReport:
        """
        Run one full scan cycle: collect, diff, flush if needed, broadcast.

        :return: What changed during the cycle and whether history was written
        :rtype: CycleReport
        :raises ValueError: If no save is being tracked
        """
        session = self._require_session()
        async with self._lock:
            snapshot = await self.collector.collect(session.save_dir)
            now = self._clock()
            report = session.engine.advance(snapshot.items, now)
            session.last_scan_at = now
            if snapshot.latest_modified_at is not None:
                session.latest_save_modified_at = snapshot.latest_modified_at

            if report.should_flush or session.flush_pending:
                if self._stop_requested:
                    session.flush_pending = True
                    logger.info("Stop requested, not starting a history flush")
                else:
                    report.flushed = await self._flush(session)

            stats = self._build_stats(session)

        await self._broadcast(stats)
        return report

    async def _flush(self, session: _TrackingSession) -> bool:
        try:
            await asyncio.to_thread(session.store.save_history, session.engine.history_copy())
        except OSError as e:
            session.flush_pending = True
            logger.error(f"Failed to write history to {session.store.history_path}: {e}")
            return False
        session.flush_pending = False
        return True

    async def toggle_ignore(self, item_id: str) -> TrackerStats:
        """
        Flip an item's membership in the ignore set and persist it immediately.

        :param item_id: Item identifier
        :type item_id: str
        :return: Stats after the toggle
        :rtype: TrackerStats
        :raises ValueError: If the id is blank, malformed or no save is being tracked
        """
        item_id = item_id.strip()
        if not item_id:
            raise ValueError("Item id must not be blank")
        if any(char in item_id for char in "\r\n|"):
            raise ValueError("Item id must not contain line breaks or '|'")
        session = self._require_session(allow_stopped=True)

        async with self._lock:
            ignoring = item_id not in session.ignored
            if ignoring:
                session.ignored.add(item_id)
            else:
                session.ignored.discard(item_id)
            try:
                await asyncio.to_thread(session.store.save_ignored, set(session.ignored))
            except OSError:
                if ignoring:
                    session.ignored.discard(item_id)
                else:
                    session.ignored.add(item_id)
                raise
            stats = self._build_stats(session)

        logger.info(f"{'Ignoring' if ignoring else 'No longer ignoring'} {item_id}")
        await self._broadcast(stats)
        return stats

    # ── Read-only views ──

    def _build_stats(self, session: _TrackingSession) -> TrackerStats:
        history = session.engine.history_copy()
        collected = sum(1 for item_id in history if item_id in self.catalog)
        ignored_missing = sum(
            1 for item_id in session.ignored
            if item_id in self.catalog and item_id not in history
        )
        total = len(self.catalog)
        return TrackerStats(
            save_path=str(session.save_dir),
            collected_count=collected,
            total_count=total,
            missing_count=total - collected - ignored_missing,
            progress_percent=round(collected / total * 100, 2) if total else 0.0,
            history=history,
            catalog=self.catalog.sorted_items(),
            ignored=sorted(session.ignored),
            last_scan_at=session.last_scan_at,
            latest_save_modified_at=session.latest_save_modified_at,
            running=self.running,
        )

    def stats(self) -> TrackerStats:
        """Current stats for the tracked save."""
        return self._build_stats(self._require_session(allow_stopped=True))

    def list_items(self, search: str | None = None, missing_only: bool = False) -> list[ItemRow]:
        """
        List catalog items with their collection status.

        :param search: Case-insensitive regular expression matched against the id
        :type search: str | None
        :param missing_only: Keep only items neither collected nor ignored
        :type missing_only: bool
        :return: Rows sorted by item id
        :rtype: list[ItemRow]
        :raises ValueError: If the search pattern is invalid or no save is tracked
        """
        session = self._require_session(allow_stopped=True)
        pattern = None
        if search and search.strip():
            try:
                pattern = re.compile(search.strip(), re.IGNORECASE)
            except re.error as e:
                raise ValueError(f"Invalid search pattern: {e}") from e

        rows: list[ItemRow] = []
        for item_id in self.catalog.sorted_items():
            if pattern and not pattern.search(item_id):
                continue
            timeline = session.engine.history.get(item_id)
            if timeline is not None:
                status = ItemStatus.COLLECTED
            elif item_id in session.ignored:
                status = ItemStatus.IGNORED
            else:
                status = ItemStatus.MISSING
            if missing_only and status != ItemStatus.MISSING:
                continue
            rows.append(
                ItemRow(
                    item_id=item_id,
                    status=status,
                    state=session.engine.state_of(item_id),
                    first_seen=timeline.first_seen if timeline else None,
                    last_seen=timeline.last_seen if timeline else None,
                )
            )
        return rows
