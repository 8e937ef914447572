from itemtracker.services.saves import find_latest_world, list_worlds


def test_highest_numbered_world_wins(tmp_path):
    for name in ("New World", "New World (2)", "New World (10)", "New World (3)", "Creative"):
        (tmp_path / name).mkdir()

    assert find_latest_world(tmp_path, prefix="New World") == tmp_path / "New World (10)"


def test_plain_name_counts_as_zero(tmp_path):
    (tmp_path / "New World").mkdir()
    assert find_latest_world(tmp_path, prefix="New World") == tmp_path / "New World"


def test_non_matching_names_and_files_are_ignored(tmp_path):
    (tmp_path / "New World copy").mkdir()
    (tmp_path / "New World (4)").write_text("not a directory")

    assert find_latest_world(tmp_path, prefix="New World") is None


def test_missing_root(tmp_path):
    assert find_latest_world(tmp_path / "nope") is None
    assert list_worlds(tmp_path / "nope") == []


def test_list_worlds_returns_directories(tmp_path):
    (tmp_path / "Alpha").mkdir()
    (tmp_path / "Beta").mkdir()
    (tmp_path / "notes.txt").write_text("x")

    names = {candidate.name for candidate in list_worlds(tmp_path)}
    assert names == {"Alpha", "Beta"}
