import json
from pathlib import Path

import pytest

from app import app
from habitat_layout.state import HabitatState

BOUNDS = {"width": 800, "height": 600}


@pytest.fixture
def client(tmp_path: Path):
    app.config["HABITAT_STATE"] = HabitatState()
    app.config["HABITAT_SAVE_PATH"] = tmp_path / "design.json"
    app.config["TESTING"] = True
    with app.test_client() as client:
        yield client


def _place(client, type_id, x, y, bounds=BOUNDS):
    return client.post("/habitat/modules", json={"type": type_id, "x": x, "y": y, "bounds": bounds})


def test_catalog_lists_types(client):
    data = client.get("/catalog").get_json()
    assert "power" in data["types"]
    assert data["modules"]["power"]["power_generation"] == 50


def test_place_returns_change_and_resources(client):
    resp = _place(client, "power", 0, 0)
    assert resp.status_code == 201
    data = resp.get_json()
    assert data["module"] == {"id": 1, "type": "power", "x": 0.0, "y": 0.0}
    assert data["change"]["added"] == [1]
    assert data["resources"]["power_balance"] == 50


def test_rejected_placements(client):
    _place(client, "power", 0, 0)
    overlap = _place(client, "airlock", 50, 50)
    assert overlap.status_code == 409
    assert overlap.get_json()["reason"] == "overlap"
    outside = _place(client, "airlock", 780, 0)
    assert outside.get_json()["reason"] == "out-of-bounds"
    unknown = _place(client, "reactor", 300, 300)
    assert unknown.status_code == 400
    assert unknown.get_json()["reason"] == "unknown-module-type"
    assert len(client.get("/habitat").get_json()["modules"]) == 1


def test_bounds_are_required(client):
    resp = client.post("/habitat/modules", json={"type": "power", "x": 0, "y": 0})
    assert resp.status_code == 400


def test_remove_and_move(client):
    _place(client, "power", 0, 0)
    _place(client, "airlock", 300, 0)
    moved = client.patch("/habitat/modules/1", json={"x": 0, "y": 200, "bounds": BOUNDS})
    assert moved.status_code == 200
    assert moved.get_json()["module"]["y"] == 200
    blocked = client.patch("/habitat/modules/1", json={"x": 290, "y": 0, "bounds": BOUNDS})
    assert blocked.status_code == 409
    removed = client.delete("/habitat/modules/2").get_json()
    assert removed["change"]["removed"] == [2]
    assert client.delete("/habitat/modules/2").get_json()["change"]["removed"] == []
    assert client.patch("/habitat/modules/9", json={"x": 0, "y": 0, "bounds": BOUNDS}).status_code == 404


def test_drag_and_drop_rolls_back(client):
    _place(client, "power", 0, 0)
    _place(client, "airlock", 300, 0)
    client.post("/habitat/modules/1/drag", json={"x": 310, "y": 0})
    drop = client.post("/habitat/modules/1/drop", json={"bounds": BOUNDS})
    assert drop.status_code == 409
    assert drop.get_json()["module"] == {"id": 1, "type": "power", "x": 0.0, "y": 0.0}


def test_save_and_load_roundtrip(client):
    _place(client, "power", 0, 0)
    _place(client, "living-quarters", 100, 0)
    assert client.post("/habitat/save").status_code == 200
    client.post("/habitat/clear")
    assert client.get("/habitat").get_json()["modules"] == []
    loaded = client.post("/habitat/load")
    assert loaded.status_code == 200
    data = client.get("/habitat").get_json()
    assert [m["id"] for m in data["modules"]] == [1, 2]
    assert data["next_id"] == 3
    assert data["resources"]["power_balance"] == 35


def test_load_without_save_is_not_found(client):
    assert client.post("/habitat/load").status_code == 404


def test_malformed_document_keeps_state(client):
    _place(client, "power", 0, 0)
    resp = client.post(
        "/habitat/load",
        data=json.dumps({"modules": [{"id": "x"}], "timestamp": "2024-01-01T00:00:00Z", "version": "1.0"}),
        content_type="application/json",
    )
    assert resp.status_code == 400
    assert [m["id"] for m in client.get("/habitat").get_json()["modules"]] == [1]


def test_empty_document_is_rejected_not_read_from_disk(client):
    _place(client, "power", 0, 0)
    client.post("/habitat/save")
    _place(client, "airlock", 300, 0)
    for body in ({}, []):
        resp = client.post("/habitat/load", json=body)
        assert resp.status_code == 400
        assert [m["id"] for m in client.get("/habitat").get_json()["modules"]] == [1, 2]


def test_report_and_export(client):
    _place(client, "living-quarters", 0, 0)
    report = client.get("/habitat/report").get_json()
    assert report["recommendations"][0]["priority"] == 1
    exported = client.get("/habitat/export").get_json()
    assert exported["resources"]["power_balance"] == -15
    md = client.get("/habitat/export?format=md").get_json()["markdown"]
    assert "Living Quarters" in md
