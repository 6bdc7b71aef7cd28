"""
Tests for the /api/v1/models router.
"""

import pytest
from fastapi.testclient import TestClient

from dcf_engine.main import app


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


def test_root(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_defaults(client):
    data = client.get("/api/v1/models/defaults").json()

    assert data["baseRevenue"] == 1_000_000_000.0
    assert data["projectionYears"] == 5
    assert data["terminalGrowthRate"] == 2.5


def test_run_with_defaults(client):
    response = client.post("/api/v1/models/run", json={})

    assert response.status_code == 200
    data = response.json()
    assert data["revenues"][0] == 1_080_000_000.0
    assert len(data["balance_sheet"]) == 5
    assert data["valuation"]["implied_share_price"] > 0
    assert data["summary"]["wacc"] == "10.0%"
    assert data["summary"]["enterprise_value"].startswith("$")


def test_run_accepts_camel_and_snake_case(client):
    camel = client.post("/api/v1/models/run", json={"revenueGrowthRate": 10}).json()
    snake = client.post("/api/v1/models/run", json={"revenue_growth_rate": 10}).json()

    assert camel["revenues"][0] == pytest.approx(1_100_000_000.0)
    assert camel["valuation"] == snake["valuation"]


def test_run_rejects_malformed_body(client):
    response = client.post("/api/v1/models/run", json={"wacc": "high"})
    assert response.status_code == 422


def test_validate_reports_adjustments(client):
    data = client.post("/api/v1/models/validate", json={"wacc": 50, "terminalGrowthRate": 6}).json()

    assert data["assumptions"]["wacc"] == 20.0
    assert data["assumptions"]["terminalGrowthRate"] == 5.0
    assert {adj["field"] for adj in data["adjustments"]} == {"wacc", "terminal_growth_rate"}
    assert any(w["field"] == "wacc" for w in data["warnings"])


def test_scenarios_default_set(client):
    data = client.post("/api/v1/models/scenarios", json={}).json()

    names = [row["name"] for row in data["comparison"]]
    assert names == ["base", "bull", "bear"]
    assert set(data["scenarios"]) == {"base", "bull", "bear"}


def test_scenarios_duplicate_names(client):
    response = client.post("/api/v1/models/scenarios", json={
        "scenarios": [
            {"name": "x", "assumptions": {}},
            {"name": "x", "assumptions": {"wacc": 12}},
        ],
    })
    assert response.status_code == 400


def test_sensitivity(client):
    data = client.post("/api/v1/models/sensitivity", json={}).json()

    assert len(data["wacc_values"]) == 9
    assert len(data["matrix"]) == 9


def test_sensitivity_unknown_metric(client):
    response = client.post("/api/v1/models/sensitivity", json={"metric": "irr"})
    assert response.status_code == 400


def test_heatmap(client):
    response = client.post("/api/v1/models/heatmap", json={
        "xAxis": "cogs_percent",
        "yAxis": "wacc",
        "maxSteps": 3,
    })

    assert response.status_code == 200
    data = response.json()
    assert data["x_axis"]["key"] == "cogs_percent"
    assert len(data["x_values"]) <= 3


def test_heatmap_same_axes(client):
    response = client.post("/api/v1/models/heatmap", json={"xAxis": "wacc", "yAxis": "wacc"})
    assert response.status_code == 400


def test_tornado(client):
    data = client.post("/api/v1/models/tornado", json={}).json()

    ranges = [d["impact_range"] for d in data["drivers"]]
    assert ranges == sorted(ranges, reverse=True)
    assert data["metric"] == "share_price"
