import gzip
import struct
from pathlib import Path

import pytest

from itemtracker.models import SaveSnapshot


def _encode_string(value: str) -> bytes:
    raw = value.encode("utf-8")
    return struct.pack(">H", len(raw)) + raw


def _tag_type(value) -> int:
    if isinstance(value, dict):
        return 10
    if isinstance(value, list):
        return 9
    if isinstance(value, str):
        return 8
    if isinstance(value, bytes):
        return 7
    if isinstance(value, float):
        return 6
    if isinstance(value, int):
        return 3
    raise TypeError(f"Cannot encode {type(value).__name__} as NBT")


def _encode_payload(value) -> bytes:
    if isinstance(value, dict):
        out = b""
        for key, child in value.items():
            out += struct.pack(">b", _tag_type(child)) + _encode_string(key) + _encode_payload(child)
        return out + b"\x00"
    if isinstance(value, list):
        item_type = _tag_type(value[0]) if value else 0
        return struct.pack(">bi", item_type, len(value)) + b"".join(_encode_payload(v) for v in value)
    if isinstance(value, str):
        return _encode_string(value)
    if isinstance(value, bytes):
        return struct.pack(">i", len(value)) + value
    if isinstance(value, float):
        return struct.pack(">d", value)
    return struct.pack(">i", value)


def nbt_bytes(root: dict, compressed: bool = True) -> bytes:
    """Encode a plain dict as an NBT file body."""
    data = b"\x0a" + _encode_string("") + _encode_payload(root)
    return gzip.compress(data) if compressed else data


def nested_compound_bytes(levels: int) -> bytes:
    """Raw NBT file whose root holds `levels` compounds nested one inside the next."""
    opening = (b"\x0a" + _encode_string("n")) * levels
    return b"\x0a" + _encode_string("") + opening + b"\x00" * (levels + 1)


def item(item_id: str, **extra) -> dict:
    entry = {"id": item_id, "count": 1}
    entry.update(extra)
    return entry


class FakeClock:
    def __init__(self, now: int = 0):
        self.now = now

    def __call__(self) -> int:
        return self.now


class FakeCollector:
    """Collector double whose snapshot is set directly by the test."""

    def __init__(self, items=()):
        self.items = set(items)
        self.calls = 0

    async def collect(self, save_dir) -> SaveSnapshot:
        self.calls += 1
        return SaveSnapshot(save_path=str(save_dir), items=set(self.items))


@pytest.fixture
def write_nbt():
    def _write(path: Path, root: dict, compressed: bool = True) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(nbt_bytes(root, compressed=compressed))
        return path

    return _write


@pytest.fixture
def save_dir(tmp_path) -> Path:
    directory = tmp_path / "saves" / "New World"
    (directory / "playerdata").mkdir(parents=True)
    return directory


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
