"""Save directory discovery."""

import re
from pathlib import Path

from itemtracker.config import settings
from itemtracker.logging import get_logger
from itemtracker.models import SaveCandidate

logger = get_logger('services.saves')


def _world_pattern(prefix: str) -> re.Pattern[str]:
    return re.compile(rf"^{re.escape(prefix)}(?: \((\d+)\))?$")


def list_worlds(root: Path | str) -> list[SaveCandidate]:
    """
    List every save directory under the saves root, newest first.

    :param root: The game's saves directory
    :type root: Path | str
    :return: Save candidates ordered by modification time, descending
    :rtype: list[SaveCandidate]
    """
    root = Path(root)
    if not root.is_dir():
        return []

    candidates: list[SaveCandidate] = []
    for entry in root.iterdir():
        if not entry.is_dir():
            continue
        try:
            modified_at = int(entry.stat().st_mtime * 1000)
        except OSError:
            continue
        candidates.append(SaveCandidate(name=entry.name, path=str(entry), modified_at=modified_at))

    candidates.sort(key=lambda c: (c.modified_at, c.name), reverse=True)
    return candidates


def find_latest_world(root: Path | str, prefix: str | None = None) -> Path | None:
    """
    Pick the most recently created default-named world.

    Worlds named ``New World``, ``New World (1)``, ``New World (2)``… are
    compared by their number; the plain name counts as 0.

    :param root: The game's saves directory
    :type root: Path | str
    :param prefix: Default world name
    :type prefix: str | None
    :return: Directory of the highest-numbered world, or ``None``
    :rtype: Path | None
    """
    root = Path(root)
    if not root.is_dir():
        logger.debug(f"Saves root {root} does not exist")
        return None

    pattern = _world_pattern(prefix or settings.SAVE_NAME_PREFIX)
    best: Path | None = None
    best_index = -1
    for entry in root.iterdir():
        if not entry.is_dir():
            continue
        match = pattern.match(entry.name)
        if not match:
            continue
        index = int(match.group(1)) if match.group(1) else 0
        if index > best_index:
            best_index = index
            best = entry
    return best
