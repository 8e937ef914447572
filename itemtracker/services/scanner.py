"""
Container-tree scanner.

Walks a parsed save-file tag tree and collects every item identifier it holds,
following the ways items nest inside other items: shulker boxes
(``tag.BlockEntityTag.Items``), legacy bundles (``tag.Items``) and 1.20.5+
data components (``components.*``).
"""

from itemtracker.config import settings
from itemtracker.logging import get_logger
from itemtracker.models import CompoundTag, ListTag

logger = get_logger('services.scanner')

ROOT_INVENTORY_PATHS: tuple[tuple[str, ...], ...] = (
    ("Inventory",),
    ("Data", "Player", "Inventory"),
)


class ContainerScanner:
    """Extract item identifiers from inventories, recursing into nested storage."""

    def __init__(self, max_depth: int | None = None):
        self.max_depth = settings.MAX_SCAN_DEPTH if max_depth is None else max_depth

    def extract_items(self, root: CompoundTag) -> set[str]:
        """
        Collect every item identifier reachable from the root inventories.

        :param root: Root compound of a player or level file
        :type root: CompoundTag
        :return: Identifiers found, nested containers included
        :rtype: set[str]
        """
        found: set[str] = set()
        if not isinstance(root, CompoundTag):
            return found

        for path in ROOT_INVENTORY_PATHS:
            inventory = root.get_path(*path)
            if isinstance(inventory, ListTag):
                self._scan_inventory(inventory, found, depth=0)
        return found

    def _scan_inventory(self, inventory: ListTag, found: set[str], depth: int) -> None:
        if depth > self.max_depth:
            logger.warning(f"Container nesting deeper than {self.max_depth} levels, not descending further")
            return
        for entry in inventory:
            if isinstance(entry, CompoundTag):
                self._scan_item(entry, found, depth)

    def _scan_item(self, item: CompoundTag, found: set[str], depth: int) -> None:
        item_id = item.get_string("id")
        if item_id:
            found.add(item_id)
        else:
            # Slot wrapper used by the container component: {slot, item: {...}}
            wrapped = item.get_compound("item")
            if wrapped is not None and depth < self.max_depth:
                self._scan_item(wrapped, found, depth + 1)

        # Pre-1.20.5 item NBT
        sub_tag = item.get_compound("tag")
        if sub_tag is not None:
            box_items = sub_tag.get_path("BlockEntityTag", "Items")
            if isinstance(box_items, ListTag):
                self._scan_inventory(box_items, found, depth + 1)

            bundle_items = sub_tag.get_list("Items")
            if bundle_items is not None:
                self._scan_inventory(bundle_items, found, depth + 1)

        # Any component holding a list or an Items list is treated as storage,
        # so mod-added containers are picked up without a key allowlist.
        components = item.get_compound("components")
        if components is not None:
            for value in components.values():
                if isinstance(value, ListTag):
                    self._scan_inventory(value, found, depth + 1)
                elif isinstance(value, CompoundTag):
                    inner_items = value.get_list("Items")
                    if inner_items is not None:
                        self._scan_inventory(inner_items, found, depth + 1)


def extract_items(root: CompoundTag, max_depth: int | None = None) -> set[str]:
    """Module-level shortcut for :meth:`ContainerScanner.extract_items`."""
    return ContainerScanner(max_depth=max_depth).extract_items(root)
