from itemtracker.models import ItemTimeline
from itemtracker.services.history import (
    HistoryStore,
    load_history,
    load_ignored,
    parse_history_line,
    save_history,
    save_ignored,
)


def test_history_round_trip(tmp_path):
    path = tmp_path / "tracker_history_v2.txt"
    history = {
        "minecraft:stone": ItemTimeline(first_seen=1, last_seen=2),
        "minecraft:dirt": ItemTimeline(first_seen=1700000000000, last_seen=1700000005000),
    }
    save_history(path, history)

    assert load_history(path) == history


def test_history_file_format(tmp_path):
    path = tmp_path / "history.txt"
    save_history(path, {"minecraft:stone": ItemTimeline(first_seen=10, last_seen=20)})

    assert path.read_text(encoding="utf-8") == "minecraft:stone|10|20\n"


def test_malformed_lines_are_skipped(tmp_path):
    path = tmp_path / "history.txt"
    path.write_text(
        "minecraft:stone|10|20\n"
        "broken line\n"
        "minecraft:dirt|abc|20\n"
        "|1|2\n"
        "minecraft:sand|1|2|3\n"
        "\n"
        "minecraft:apple|5|6\n",
        encoding="utf-8",
    )

    assert load_history(path) == {
        "minecraft:stone": ItemTimeline(first_seen=10, last_seen=20),
        "minecraft:apple": ItemTimeline(first_seen=5, last_seen=6),
    }


def test_missing_history_file_loads_empty(tmp_path):
    assert load_history(tmp_path / "missing.txt") == {}


def test_save_overwrites_and_leaves_no_temp_files(tmp_path):
    path = tmp_path / "history.txt"
    save_history(path, {"a:x": ItemTimeline(first_seen=1, last_seen=1)})
    save_history(path, {"a:y": ItemTimeline(first_seen=2, last_seen=3)})

    assert load_history(path) == {"a:y": ItemTimeline(first_seen=2, last_seen=3)}
    assert [p.name for p in tmp_path.iterdir()] == ["history.txt"]


def test_parse_history_line_rejects_missing_fields():
    assert parse_history_line("minecraft:stone|10") is None
    assert parse_history_line("minecraft:stone|10|20") == (
        "minecraft:stone",
        ItemTimeline(first_seen=10, last_seen=20),
    )


def test_ignore_list_round_trip(tmp_path):
    path = tmp_path / "ignored.txt"
    save_ignored(path, {"minecraft:dragon_egg", "minecraft:bedrock"})

    assert load_ignored(path) == {"minecraft:dragon_egg", "minecraft:bedrock"}
    assert path.read_text(encoding="utf-8") == "minecraft:bedrock\nminecraft:dragon_egg\n"


def test_ignore_list_tolerates_blank_lines_and_missing_file(tmp_path):
    path = tmp_path / "ignored.txt"
    assert load_ignored(path) == set()

    path.write_text("\n  minecraft:bedrock  \n\n", encoding="utf-8")
    assert load_ignored(path) == {"minecraft:bedrock"}


def test_store_keeps_files_in_save_directory(tmp_path):
    store = HistoryStore(tmp_path)
    store.save_history({"a:x": ItemTimeline(first_seen=1, last_seen=2)})
    store.save_ignored({"a:y"})

    assert store.history_path == tmp_path / "tracker_history_v2.txt"
    assert store.ignore_path == tmp_path / "tracker_ignored.txt"
    assert store.load_history() == {"a:x": ItemTimeline(first_seen=1, last_seen=2)}
    assert store.load_ignored() == {"a:y"}
