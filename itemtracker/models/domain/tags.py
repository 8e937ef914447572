"""Tag tree models - the format-agnostic shape of a parsed save file."""

from dataclasses import dataclass, field
from typing import Any, Iterator, Optional, Union


@dataclass(frozen=True)
class ScalarTag:
    """A leaf value: number, string, byte or integer array."""

    value: Any


@dataclass(frozen=True)
class ListTag:
    """An ordered sequence of sub-tags."""

    items: list["Tag"] = field(default_factory=list)

    def __iter__(self) -> Iterator["Tag"]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)


@dataclass(frozen=True)
class CompoundTag:
    """A named-key map of sub-tags."""

    entries: dict[str, "Tag"] = field(default_factory=dict)

    def __contains__(self, key: str) -> bool:
        return key in self.entries

    def keys(self):
        return self.entries.keys()

    def values(self):
        return self.entries.values()

    def get(self, key: str) -> Optional["Tag"]:
        return self.entries.get(key)

    def get_compound(self, key: str) -> Optional["CompoundTag"]:
        value = self.entries.get(key)
        return value if isinstance(value, CompoundTag) else None

    def get_list(self, key: str) -> Optional[ListTag]:
        value = self.entries.get(key)
        return value if isinstance(value, ListTag) else None

    def get_string(self, key: str) -> Optional[str]:
        value = self.entries.get(key)
        if isinstance(value, ScalarTag) and isinstance(value.value, str):
            return value.value
        return None

    def get_path(self, *keys: str) -> Optional["Tag"]:
        """Follow a chain of compound keys, returning ``None`` on the first miss."""
        node: Optional[Tag] = self
        for key in keys:
            if not isinstance(node, CompoundTag):
                return None
            node = node.entries.get(key)
        return node


Tag = Union[CompoundTag, ListTag, ScalarTag]


def tag_from_python(value: Any) -> Tag:
    """
    Build a tag tree from plain dicts, lists and scalars.

    Used by readers that already decode into Python containers and by tests.
    """
    if isinstance(value, (CompoundTag, ListTag, ScalarTag)):
        return value
    if isinstance(value, dict):
        return CompoundTag({str(k): tag_from_python(v) for k, v in value.items()})
    if isinstance(value, (list, tuple)):
        return ListTag([tag_from_python(v) for v in value])
    return ScalarTag(value)
