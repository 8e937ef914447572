"""
Line-oriented persistence for item history and the ignore list.

History lines are ``identifier|firstSeenEpochMillis|lastSeenEpochMillis``; the
ignore list is one identifier per line. Both files are rewritten wholesale
through a temporary file and an atomic rename.
"""

import os
import tempfile
from collections.abc import Iterable
from pathlib import Path

from itemtracker.config import settings
from itemtracker.logging import get_logger
from itemtracker.models import ItemTimeline

logger = get_logger('services.history')

FIELD_SEPARATOR = "|"


def _write_lines_atomic(path: Path, lines: Iterable[str]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as f:
            for line in lines:
                f.write(line)
                f.write("\n")
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        try:
            os.unlink(tmp_name)
        except OSError:
            pass
        raise


def _read_lines(path: Path) -> list[str]:
    if not path.exists():
        return []
    with open(path, "r", encoding="utf-8", errors="replace") as f:
        return f.read().splitlines()


def parse_history_line(line: str) -> tuple[str, ItemTimeline] | None:
    """
    Parse one persisted history record.

    :return: ``(identifier, timeline)`` or ``None`` when the line is malformed
    """
    parts = line.strip().split(FIELD_SEPARATOR)
    if len(parts) != 3 or not parts[0]:
        return None
    try:
        first_seen, last_seen = int(parts[1]), int(parts[2])
    except ValueError:
        return None
    return parts[0], ItemTimeline(first_seen=first_seen, last_seen=last_seen)


def format_history_line(item_id: str, timeline: ItemTimeline) -> str:
    return f"{item_id}{FIELD_SEPARATOR}{timeline.first_seen}{FIELD_SEPARATOR}{timeline.last_seen}"


def load_history(path: Path | str) -> dict[str, ItemTimeline]:
    """
    Load persisted history, skipping malformed lines.

    :param path: History file
    :type path: Path | str
    :return: Timelines keyed by item identifier; empty when the file is missing
    :rtype: dict[str, ItemTimeline]
    """
    path = Path(path)
    history: dict[str, ItemTimeline] = {}
    skipped = 0
    for line in _read_lines(path):
        if not line.strip():
            continue
        parsed = parse_history_line(line)
        if parsed is None:
            skipped += 1
            continue
        item_id, timeline = parsed
        history[item_id] = timeline

    if skipped:
        logger.warning(f"Skipped {skipped} malformed line(s) in {path}")
    logger.debug(f"Loaded {len(history)} timeline(s) from {path}")
    return history


def save_history(path: Path | str, history: dict[str, ItemTimeline]) -> None:
    """
    Rewrite the history file with the full map.

    :param path: History file
    :type path: Path | str
    :param history: Timelines keyed by item identifier
    :type history: dict[str, ItemTimeline]
    """
    path = Path(path)
    _write_lines_atomic(path, (format_history_line(k, history[k]) for k in sorted(history)))
    logger.info(f"Saved {len(history)} timeline(s) to {path}")


def load_ignored(path: Path | str) -> set[str]:
    """Load the ignore list; blank lines are skipped and a missing file yields an empty set."""
    return {line.strip() for line in _read_lines(Path(path)) if line.strip()}


def save_ignored(path: Path | str, ignored: Iterable[str]) -> None:
    path = Path(path)
    _write_lines_atomic(path, sorted(set(ignored)))
    logger.debug(f"Saved ignore list to {path}")


class HistoryStore:
    """History and ignore-list files belonging to one save directory."""

    def __init__(
        self,
        save_dir: Path | str,
        history_filename: str | None = None,
        ignore_filename: str | None = None,
    ):
        self.save_dir = Path(save_dir)
        self.history_path = self.save_dir / (history_filename or settings.HISTORY_FILENAME)
        self.ignore_path = self.save_dir / (ignore_filename or settings.IGNORE_FILENAME)

    def load_history(self) -> dict[str, ItemTimeline]:
        return load_history(self.history_path)

    def save_history(self, history: dict[str, ItemTimeline]) -> None:
        save_history(self.history_path, history)

    def load_ignored(self) -> set[str]:
        return load_ignored(self.ignore_path)

    def save_ignored(self, ignored: Iterable[str]) -> None:
        save_ignored(self.ignore_path, ignored)
