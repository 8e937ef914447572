"""
Binary NBT reader that produces the format-agnostic tag tree.

Supports gzip-compressed and raw big-endian files (level.dat, playerdata/*.dat).
"""

import gzip
import io
import struct
import zlib
from pathlib import Path
from typing import BinaryIO

from itemtracker.models import CompoundTag, ListTag, ScalarTag, Tag

GZIP_MAGIC = b"\x1f\x8b"
MAX_NESTING = 256

TAG_END = 0
TAG_BYTE = 1
TAG_SHORT = 2
TAG_INT = 3
TAG_LONG = 4
TAG_FLOAT = 5
TAG_DOUBLE = 6
TAG_BYTE_ARRAY = 7
TAG_STRING = 8
TAG_LIST = 9
TAG_COMPOUND = 10
TAG_INT_ARRAY = 11
TAG_LONG_ARRAY = 12

_NUMERIC_FORMATS = {
    TAG_BYTE: ">b",
    TAG_SHORT: ">h",
    TAG_INT: ">i",
    TAG_LONG: ">q",
    TAG_FLOAT: ">f",
    TAG_DOUBLE: ">d",
}


class TagFormatError(ValueError):
    """Raised when a file does not hold well-formed NBT data."""


def _read_exact(f: BinaryIO, size: int) -> bytes:
    data = f.read(size)
    if len(data) != size:
        raise TagFormatError(f"Unexpected end of data (wanted {size} bytes, got {len(data)})")
    return data


def _unpack(f: BinaryIO, fmt: str):
    return struct.unpack(fmt, _read_exact(f, struct.calcsize(fmt)))[0]


def _read_string(f: BinaryIO) -> str:
    length = _unpack(f, ">H")
    return _read_exact(f, length).decode("utf-8", errors="replace")


def _read_array(f: BinaryIO, fmt: str) -> list[int]:
    count = _unpack(f, ">i")
    if count < 0:
        raise TagFormatError(f"Negative array length {count}")
    size = struct.calcsize(fmt)
    raw = _read_exact(f, count * size)
    return list(struct.unpack(f">{count}{fmt}", raw))


def _read_compound(f: BinaryIO, depth: int) -> CompoundTag:
    entries: dict[str, Tag] = {}
    while True:
        child_type = _unpack(f, ">b")
        if child_type == TAG_END:
            return CompoundTag(entries)
        name = _read_string(f)
        entries[name] = _read_payload(f, child_type, depth + 1)


def _read_payload(f: BinaryIO, tag_type: int, depth: int) -> Tag:
    if depth > MAX_NESTING:
        raise TagFormatError(f"Tag nesting exceeds {MAX_NESTING} levels")

    if tag_type in _NUMERIC_FORMATS:
        return ScalarTag(_unpack(f, _NUMERIC_FORMATS[tag_type]))
    if tag_type == TAG_BYTE_ARRAY:
        count = _unpack(f, ">i")
        if count < 0:
            raise TagFormatError(f"Negative array length {count}")
        return ScalarTag(_read_exact(f, count))
    if tag_type == TAG_STRING:
        return ScalarTag(_read_string(f))
    if tag_type == TAG_LIST:
        item_type = _unpack(f, ">b")
        count = _unpack(f, ">i")
        if count <= 0:
            return ListTag([])
        return ListTag([_read_payload(f, item_type, depth + 1) for _ in range(count)])
    if tag_type == TAG_COMPOUND:
        return _read_compound(f, depth)
    if tag_type == TAG_INT_ARRAY:
        return ScalarTag(_read_array(f, "i"))
    if tag_type == TAG_LONG_ARRAY:
        return ScalarTag(_read_array(f, "q"))

    raise TagFormatError(f"Unknown tag type {tag_type}")


def parse_nbt(data: bytes) -> CompoundTag:
    """
    Parse NBT bytes into a tag tree.

    :param data: Raw or gzip-compressed NBT data
    :type data: bytes
    :return: The root compound (its name is discarded)
    :rtype: CompoundTag
    :raises TagFormatError: If the data is truncated or malformed
    """
    if data.startswith(GZIP_MAGIC):
        try:
            data = gzip.decompress(data)
        except (OSError, EOFError, zlib.error) as exc:
            raise TagFormatError(f"Corrupt gzip stream: {exc}") from exc

    f = io.BytesIO(data)
    root_type = _unpack(f, ">b")
    if root_type != TAG_COMPOUND:
        raise TagFormatError(f"Root tag must be a compound, got type {root_type}")
    _read_string(f)
    return _read_compound(f, 0)


def read_nbt_file(path: Path | str) -> CompoundTag:
    """
    Read and parse an NBT file.

    :param path: File to read
    :type path: Path | str
    :return: The root compound of the file
    :rtype: CompoundTag
    :raises OSError: If the file cannot be read
    :raises TagFormatError: If the content is not valid NBT
    """
    with open(path, "rb") as f:
        data = f.read()
    return parse_nbt(data)
