from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from floorplan.config import EditorSettings
from floorplan.controller import LayoutController
from floorplan.server.app import create_app


@pytest.fixture
def client() -> TestClient:
    controller = LayoutController(settings=EditorSettings(seed_layout=False))
    return TestClient(create_app(controller))


def test_health(client: TestClient) -> None:
    assert client.get("/api/health").json() == {"status": "ok"}


def test_place_and_refuse_duplicate(client: TestClient) -> None:
    response = client.post("/api/layout/machines", json={"id": "RT-001", "name": "Retífica", "type": "Retífica Plana"})
    assert response.status_code == 200
    uid = response.json()["uid"]
    assert client.post("/api/layout/machines", json={"id": "RT-001"}).status_code == 409
    items = client.get("/api/layout").json()["items"]
    assert [item["uid"] for item in items] == [uid]
    assert items[0]["position"] == [425.0, 275.0]


def test_place_requires_id(client: TestClient) -> None:
    assert client.post("/api/layout/machines", json={"name": "x"}).status_code == 400


def test_labels(client: TestClient) -> None:
    assert client.post("/api/layout/labels", json={"text": "Aisle", "kind": "zone"}).status_code == 200
    assert client.post("/api/layout/labels", json={"text": "x", "kind": "robot"}).status_code == 400


def test_delete_is_idempotent(client: TestClient) -> None:
    uid = client.post("/api/layout/machines", json={"id": "ES-001"}).json()["uid"]
    assert client.delete(f"/api/layout/items/{uid}").json() == {"ok": True, "removed": True}
    assert client.delete(f"/api/layout/items/{uid}").json() == {"ok": True, "removed": False}


def test_put_layout(client: TestClient) -> None:
    payload = {
        "items": [{"uid": "fre-1", "kind": "machine", "reference_id": "1085926", "position": [384, 16]}],
        "viewport": {"pan": [10, 0], "scale": 1.2},
    }
    assert client.put("/api/layout", json=payload).json() == {"ok": True, "count": 1}
    layout = client.get("/api/layout").json()
    assert layout["viewport"] == {"pan": [10.0, 0.0], "scale": 1.2}
    bad = {"items": [{"kind": "robot", "position": [0, 0]}]}
    assert client.put("/api/layout", json=bad).status_code == 400


def test_viewport_endpoints(client: TestClient) -> None:
    assert client.post("/api/viewport/zoom-in").json() == {"scale": 1.1}
    assert client.post("/api/viewport/zoom-out").json() == {"scale": 1.0}
    assert client.post("/api/viewport/reset").json() == {"pan": [0.0, 0.0], "scale": 1.0}


def test_catalog_lists_placed_flag(client: TestClient) -> None:
    client.post("/api/layout/machines", json={"id": "RT-001"})
    machines = client.get("/api/catalog").json()["machines"]
    assert len(machines) == 19
    assert [m["id"] for m in machines if m["placed"]] == ["RT-001"]


@pytest.mark.parametrize(
    "payload",
    [
        {"items": None},
        {"items": [], "viewport": [1, 2]},
        {"items": [{"kind": "label", "position": [0, 0], "size_class": ["x"]}]},
        {"items": [{"kind": "machine", "position": [0, 0], "reference_id": ["a"]}]},
    ],
)
def test_put_layout_rejects_malformed_payloads(client: TestClient, payload) -> None:
    assert client.put("/api/layout", json=payload).status_code == 400
