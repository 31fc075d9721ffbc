from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from api.main import app, get_store
from obra.data import TransportError
from obra.state import FALLBACK_MESSAGE, DashboardStore

URL = "https://example.test/sheet.csv"


@pytest.fixture()
def store(clock, sheet_rows) -> DashboardStore:
    return DashboardStore(URL, loader=lambda url: sheet_rows, clock=clock)


@pytest.fixture()
def client(store: DashboardStore):
    app.dependency_overrides[get_store] = lambda: store
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_health(client: TestClient) -> None:
    assert client.get("/health").json() == {"status": "ok"}


def test_dashboard_loads_on_first_request(client: TestClient, store: DashboardStore) -> None:
    assert store.state.phase == "idle"
    resp = client.get("/dashboard")
    assert resp.status_code == 200
    body = resp.json()
    assert body["phase"] == "ready"
    assert body["loading"] is False
    assert body["using_fallback"] is False
    assert body["metrics"]["total_count"] == 2
    assert body["metrics"]["completed_count"] == 1
    assert [r["id"] for r in body["records"]] == [1, 2]
    assert body["last_update_label"] == "10/03/2026 14:30:00"


def test_state_and_metrics(client: TestClient) -> None:
    state = client.get("/state").json()
    assert state["records"][0]["etapa"] == "Muro divisa"
    metrics = client.get("/metrics").json()
    assert metrics == {
        "average_progress": 85.1,
        "high_risk_count": 1,
        "completed_count": 1,
        "total_count": 2,
    }


def test_refresh_falls_back_on_failure(clock) -> None:
    def loader(url: str):
        raise TransportError("down")

    failing = DashboardStore(URL, loader=loader, clock=clock)
    app.dependency_overrides[get_store] = lambda: failing
    try:
        resp = TestClient(app).post("/refresh")
    finally:
        app.dependency_overrides.clear()
    assert resp.status_code == 200
    body = resp.json()
    assert body["refreshed"] is True
    assert body["state"]["using_fallback"] is True
    assert body["state"]["error"] == FALLBACK_MESSAGE
    assert body["metrics"]["average_progress"] == 26.5


def test_refresh_while_loading_is_rejected(client: TestClient, store: DashboardStore) -> None:
    store._lock.acquire()
    try:
        resp = client.post("/refresh")
    finally:
        store._lock.release()
    assert resp.status_code == 409
    assert resp.json()["refreshed"] is False


def test_export_csv(client: TestClient) -> None:
    resp = client.get("/export.csv")
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/csv")
    lines = resp.text.strip().splitlines()
    assert lines[0] == "id,etapa,servico,progresso,inicio,termino,fornecedor,status"
    assert len(lines) == 3


class _BrokenStore(DashboardStore):
    @property
    def state(self):
        raise RuntimeError("state unavailable")

    @property
    def metrics(self):
        raise RuntimeError("metrics unavailable")


@pytest.mark.parametrize("path", ["/state", "/metrics", "/export.csv", "/dashboard"])
def test_read_endpoints_report_errors_as_json(path: str) -> None:
    broken = _BrokenStore(URL, loader=lambda url: [])
    app.dependency_overrides[get_store] = lambda: broken
    try:
        resp = TestClient(app).get(path)
    finally:
        app.dependency_overrides.clear()
    assert resp.status_code == 500
    body = resp.json()
    assert body["type"] == "RuntimeError"
    assert "unavailable" in body["error"]
