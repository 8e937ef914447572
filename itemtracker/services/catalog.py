"""Catalog of every item identifier that can be collected."""

import re
from collections.abc import Iterable
from pathlib import Path

from itemtracker.logging import get_logger

logger = get_logger('services.catalog')

# A namespaced id used as a JSON object key: "minecraft:stone": {...}
_JSON_KEY_PATTERN = re.compile(r'"([a-z0-9_.-]+:[a-z0-9_./-]+)"\s*:')
_PLAIN_ID_PATTERN = re.compile(r'^[a-z0-9_.-]+:[a-z0-9_./-]+$')

# Air can never sit in an inventory; keeping it would cap progress below 100%.
EXCLUDED_ITEMS = frozenset({"minecraft:air", "minecraft:cave_air", "minecraft:void_air"})


def parse_catalog(text: str) -> set[str]:
    """
    Extract item identifiers from catalog text.

    Identifiers are taken from JSON object keys when present; otherwise each
    non-blank line that is not a ``#`` comment is one identifier.
    """
    items = set(_JSON_KEY_PATTERN.findall(text))
    if not items:
        for line in text.splitlines():
            line = line.strip()
            if line and not line.startswith("#") and _PLAIN_ID_PATTERN.match(line):
                items.add(line)
    return items - EXCLUDED_ITEMS


class ItemCatalog:
    """Immutable set of valid item identifiers for a tracking session."""

    def __init__(self, items: Iterable[str] = (), source: str | None = None):
        self._items = frozenset(items) - EXCLUDED_ITEMS
        self.source = source

    @classmethod
    def from_file(cls, path: Path | str) -> "ItemCatalog":
        """
        Load the catalog from disk.

        A missing or unreadable file yields an empty catalog; the caller is
        expected to warn the operator.
        """
        path = Path(path)
        if not path.is_file():
            logger.warning(f"Item catalog not found at {path.resolve()}")
            return cls(source=str(path))
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.error(f"Failed to read item catalog {path}: {e}")
            return cls(source=str(path))

        catalog = cls(parse_catalog(text), source=str(path))
        logger.info(f"Loaded {len(catalog)} item ids from {path.name}")
        return catalog

    @property
    def items(self) -> frozenset[str]:
        return self._items

    @property
    def is_empty(self) -> bool:
        return not self._items

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._items

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self):
        return iter(self._items)

    def sorted_items(self) -> list[str]:
        return sorted(self._items)
