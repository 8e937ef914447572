import pytest
from fastapi.testclient import TestClient

from itemtracker.app import create_app
from itemtracker.config import settings

from conftest import item


@pytest.fixture
def saves_root(tmp_path, write_nbt):
    root = tmp_path / "saves"
    world = root / "New World (2)"
    write_nbt(world / "level.dat", {"Data": {"Player": {"Inventory": [item("minecraft:stone")]}}})
    (root / "New World").mkdir()
    return root


@pytest.fixture
def client(tmp_path, saves_root, monkeypatch):
    catalog = tmp_path / "items.txt"
    catalog.write_text(
        '{"minecraft:stone": {}, "minecraft:dirt": {}, "minecraft:diamond": {}}',
        encoding="utf-8",
    )
    monkeypatch.setattr(settings, "AUTO_START", False)
    monkeypatch.setattr(settings, "CATALOG_PATH", str(catalog))
    monkeypatch.setattr(settings, "SAVES_ROOT_DIR", str(saves_root))
    monkeypatch.setattr(settings, "SCAN_INTERVAL_SECONDS", 3600.0)

    with TestClient(create_app()) as test_client:
        yield test_client


def test_health_and_root(client):
    health = client.get("/health").json()
    assert health["status"] == "healthy"
    assert health["tracking"] is None
    assert client.get("/").json()["name"] == "Item Tracker API"


def test_catalog_route(client):
    assert client.get("/api/tracker/catalog").json() == [
        "minecraft:diamond",
        "minecraft:dirt",
        "minecraft:stone",
    ]


def test_nothing_tracked_yet(client):
    assert client.get("/api/tracker/stats").status_code == 404
    assert client.get("/api/tracker/items").status_code == 404
    assert client.post("/api/tracker/scan").status_code == 409
    assert client.post("/api/tracker/ignore", json={"item_id": "minecraft:dirt"}).status_code == 404


def test_start_with_unknown_path(client, tmp_path):
    response = client.post("/api/tracker/start", json={"save_path": str(tmp_path / "nope")})
    assert response.status_code == 404


def test_tracking_flow(client, saves_root):
    started = client.post("/api/tracker/start", json={})
    assert started.status_code == 200
    assert started.json()["save_path"] == str(saves_root / "New World (2)")

    report = client.post("/api/tracker/scan").json()
    assert report["snapshot_size"] == 1

    stats = client.get("/api/tracker/stats").json()
    assert stats["collected_count"] == 1
    assert stats["total_count"] == 3
    assert set(stats["history"]) == {"minecraft:stone"}
    assert (saves_root / "New World (2)" / "tracker_history_v2.txt").is_file()

    ignored = client.post("/api/tracker/ignore", json={"item_id": "minecraft:dirt"}).json()
    assert ignored["ignored"] == ["minecraft:dirt"]
    assert ignored["missing_count"] == 1

    missing = client.get("/api/tracker/items", params={"missing_only": True}).json()
    assert [row["item_id"] for row in missing] == ["minecraft:diamond"]
    assert client.get("/api/tracker/items", params={"search": "["}).status_code == 400

    assert client.post("/api/tracker/stop").json() == {"status": "stopped"}
    assert client.post("/api/tracker/scan").status_code == 409
    assert client.get("/api/tracker/stats").status_code == 200


def test_ignore_rejects_empty_id(client):
    client.post("/api/tracker/start", json={})
    assert client.post("/api/tracker/ignore", json={"item_id": ""}).status_code == 422
    assert client.post("/api/tracker/ignore", json={"item_id": "   "}).status_code == 400
    assert client.post("/api/tracker/ignore", json={"item_id": "a\nb"}).status_code == 400


def test_saves_routes(client, saves_root):
    names = {save["name"] for save in client.get("/api/saves").json()}
    assert names == {"New World", "New World (2)"}

    latest = client.get("/api/saves/latest").json()
    assert latest["name"] == "New World (2)"


def test_latest_save_missing_root(client, tmp_path):
    response = client.get("/api/saves/latest", params={"root": str(tmp_path / "none")})
    assert response.status_code == 404
