"""
Endpoint tests for the solver and validation routers.
"""
import json

import pytest
from fastapi.testclient import TestClient

from backend.app.main import app
from backend.app.routers.solvers import get_oracle

STACKED_ZONES = [
    {"id": "A", "name": "Grocery", "category": "grocery", "x": 0, "y": 0, "width": 8, "height": 6},
    {"id": "B", "name": "Electronics", "category": "electronics", "x": 0, "y": 0, "width": 8, "height": 6},
    {"id": "C", "name": "Cash Counter", "category": "checkout", "x": 0, "y": 0, "width": 4, "height": 3},
]


@pytest.fixture
def client():
    app.dependency_overrides[get_oracle] = lambda: None
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"
    assert "/api/solvers/generate" in resp.json()["routes"]


def test_generate_without_oracle_returns_strategies(client):
    resp = client.post("/api/solvers/generate", json={
        "container": {"width": 30, "height": 20},
        "regions": STACKED_ZONES,
    })
    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["used_oracle"] is False
    assert [c["strategy"] for c in body["candidates"]] == ["flow", "priority", "grid"]
    for c in body["candidates"]:
        assert [r["id"] for r in c["rectangles"]] == ["A", "B", "C"]


def test_generate_uses_injected_oracle(client, scripted_oracle):
    reply = json.dumps({"suggestions": [{"name": "AI", "shelves": [
        {"x": 0, "y": 0, "width": 1.5, "height": 0.6},
        {"x": 4, "y": 0, "width": 1.5, "height": 0.6},
    ]}]})
    app.dependency_overrides[get_oracle] = lambda: scripted_oracle(reply=reply)

    resp = client.post("/api/solvers/generate", json={
        "container": {"width": 8, "height": 6},
        "granularity": "shelf",
        "regions": [
            {"id": "s1", "name": "Shelf 1", "x": 0, "y": 0, "w": 1.5, "h": 0.6},
            {"id": "s2", "name": "Shelf 2", "x": 0, "y": 0, "w": 1.5, "h": 0.6},
        ],
    })
    assert resp.status_code == 200
    body = resp.json()
    assert body["used_oracle"] is True
    assert body["candidates"][0]["name"] == "AI"
    assert [r["id"] for r in body["candidates"][0]["rectangles"]] == ["s1", "s2"]


def test_generate_rejects_bad_container(client):
    resp = client.post("/api/solvers/generate", json={"container": {"width": 0, "height": 20}})
    assert resp.status_code == 422


def test_resolve_endpoint(client):
    resp = client.post("/api/solvers/resolve", json={
        "container": {"width": 30, "height": 20},
        "regions": STACKED_ZONES,
        "target_utilization": 0.5,
    })
    assert resp.status_code == 200
    body = resp.json()
    assert len(body["regions"]) == 3
    assert 0 <= body["metrics"]["utilization"] <= 100


def test_validate_reports_overlaps_and_bounds(client):
    regions = STACKED_ZONES[:2] + [{"id": "D", "name": "Storage", "x": 28, "y": 0, "width": 5, "height": 5}]
    resp = client.post("/api/validation/validate", json={
        "container": {"width": 30, "height": 20},
        "regions": regions,
    })
    assert resp.status_code == 200
    body = resp.json()
    assert body["is_valid"] is False
    assert "'Grocery' overlaps with 'Electronics'" in body["issues"]
    assert body["report"]["overlapping_ids"] == ["A", "B"]
    assert body["report"]["out_of_bounds_ids"] == ["D"]
    assert body["report"]["overlap_area"] == pytest.approx(48.0)


def test_validate_uses_shelf_gap(client):
    resp = client.post("/api/validation/validate", json={
        "container": {"width": 8, "height": 6},
        "granularity": "shelf",
        "regions": [
            {"id": "s1", "name": "Shelf 1", "x": 0, "y": 0, "w": 1.5, "h": 0.6},
            {"id": "s2", "name": "Shelf 2", "x": 2.0, "y": 0, "w": 1.5, "h": 0.6},
        ],
    })
    body = resp.json()
    assert body["is_valid"] is False
    assert "closer than 0.8m" in body["issues"][0]


def test_drag_check(client):
    resp = client.post("/api/validation/drag-check", json={
        "dragged": {"id": "B", "x": 2, "y": 0, "w": 8, "h": 6},
        "others": STACKED_ZONES,
        "container": {"width": 30, "height": 20},
    })
    assert resp.status_code == 200
    body = resp.json()
    assert body["conflicts"] == ["A", "C"]
    assert body["valid"] is False
    assert body["in_bounds"] is True
