import gzip
import struct

import pytest

from itemtracker.models import CompoundTag, ListTag, ScalarTag
from itemtracker.services.nbt_reader import TagFormatError, parse_nbt, read_nbt_file

from conftest import item, nbt_bytes, nested_compound_bytes


def test_reads_gzip_compressed_file(tmp_path, write_nbt):
    path = write_nbt(tmp_path / "player.dat", {"Inventory": [item("minecraft:stone")], "Score": 7})
    root = read_nbt_file(path)

    assert isinstance(root, CompoundTag)
    inventory = root.get_list("Inventory")
    assert isinstance(inventory, ListTag)
    assert inventory.items[0].get_string("id") == "minecraft:stone"
    assert root.get("Score") == ScalarTag(7)


def test_reads_uncompressed_data():
    root = parse_nbt(nbt_bytes({"Name": "Steve"}, compressed=False))
    assert root.get_string("Name") == "Steve"


def test_arrays_and_floats_become_scalars():
    body = (
        b"\x0a\x00\x00"
        + b"\x0b" + struct.pack(">H", 4) + b"UUID" + struct.pack(">i", 2) + struct.pack(">ii", 1, -1)
        + b"\x0c" + struct.pack(">H", 4) + b"Seed" + struct.pack(">i", 1) + struct.pack(">q", 2**40)
        + b"\x05" + struct.pack(">H", 3) + b"Pos" + struct.pack(">f", 1.5)
        + b"\x00"
    )
    root = parse_nbt(body)

    assert root.get("UUID") == ScalarTag([1, -1])
    assert root.get("Seed") == ScalarTag([2**40])
    assert root.get("Pos") == ScalarTag(1.5)


def test_empty_list_is_read():
    root = parse_nbt(nbt_bytes({"Inventory": []}))
    assert root.get_list("Inventory") == ListTag([])


def test_truncated_data_raises():
    data = nbt_bytes({"Inventory": [item("minecraft:stone")]}, compressed=False)
    with pytest.raises(TagFormatError):
        parse_nbt(data[:-5])


def test_truncated_gzip_raises():
    data = nbt_bytes({"Inventory": [item("minecraft:stone")]})
    with pytest.raises(TagFormatError):
        parse_nbt(data[: len(data) // 2])


def test_non_compound_root_raises():
    with pytest.raises(TagFormatError):
        parse_nbt(b"\x08\x00\x00\x00\x02hi")


def test_unknown_tag_type_raises():
    with pytest.raises(TagFormatError):
        parse_nbt(gzip.compress(b"\x0a\x00\x00\x2a\x00\x01x\x00"))


def test_missing_file_raises_os_error(tmp_path):
    with pytest.raises(OSError):
        read_nbt_file(tmp_path / "nope.dat")


def test_excessive_nesting_is_a_format_error():
    with pytest.raises(TagFormatError):
        parse_nbt(nested_compound_bytes(600))


def test_nesting_within_limit_parses():
    root = parse_nbt(nested_compound_bytes(100))
    assert isinstance(root.get("n"), CompoundTag)
