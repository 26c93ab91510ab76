import pytest
from fastapi.testclient import TestClient

from main import app, get_cors_origins


client = TestClient(app)

SCENARIO_PRECINCTS = [
    {"id": "P1", "population": 100, "dem": 60, "rep": 40, "county": "X", "x": 0.0, "y": 0.0},
    {"id": "P2", "population": 100, "dem": 55, "rep": 45, "county": "X", "x": 1.0, "y": 0.0},
    {"id": "P3", "population": 100, "dem": 30, "rep": 70, "county": "Y", "x": 5.0, "y": 5.0},
    {"id": "P4", "population": 100, "dem": 20, "rep": 80, "county": "Y", "x": 6.0, "y": 5.0},
]


def test_health():
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_presets():
    body = client.get("/presets").json()
    assert body["default_preset"] == "fair"
    assert set(body["presets"]) == {"very_r", "lean_r", "fair", "lean_d", "very_d"}
    assert body["presets"]["lean_d"]["target_dem_share"] == 0.54


def test_cors_origins_from_env(monkeypatch):
    monkeypatch.setenv("REDISTRICTING_CORS_ORIGINS", "https://maps.example.org, ,http://a.test")
    assert get_cors_origins() == ["https://maps.example.org", "http://a.test"]
    monkeypatch.delenv("REDISTRICTING_CORS_ORIGINS")
    assert "http://localhost:5173" in get_cors_origins()


def test_generate_plan_for_scenario():
    response = client.post("/generate-plan", json={
        "precincts": SCENARIO_PRECINCTS,
        "num_districts": 2,
        "preset": "fair",
        "state": "WI",
        "plan_id": "wi-test",
    })
    assert response.status_code == 200
    body = response.json()

    plan = body["plan"]
    assert plan["planId"] == "wi-test"
    assert plan["numDistricts"] == 2
    assert plan["state"] == "WI"
    assert plan["lastUpdated"]
    assert plan["assignments"] == {"P1": 1, "P2": 1, "P3": 2, "P4": 2}

    summary = body["summary"]
    assert summary["efficiency_gap"] == pytest.approx(-17.5)
    assert (summary["dem_seats"], summary["rep_seats"]) == (1, 1)
    assert body["phases"]["phase1_assigned"] == 4


@pytest.mark.parametrize("overrides", [
    {"preset": "landslide"},
    {"num_districts": 0},
    {"target_dem_share": 1.2},
    {"precincts": []},
])
def test_generate_plan_rejects_invalid_requests(overrides):
    payload = {"precincts": SCENARIO_PRECINCTS, "num_districts": 2, **overrides}
    response = client.post("/generate-plan", json=payload)
    assert response.status_code == 422


def test_generate_plan_zero_population_fails():
    precincts = [{"id": f"z{i}", "county": "X", "x": float(i)} for i in range(3)]
    response = client.post("/generate-plan", json={"precincts": precincts, "num_districts": 2})
    assert response.status_code == 422
    assert response.json()["detail"].startswith("Automap failed")


def test_generate_plan_duplicate_ids():
    precincts = [SCENARIO_PRECINCTS[0], SCENARIO_PRECINCTS[0]]
    response = client.post("/generate-plan", json={"precincts": precincts, "num_districts": 1})
    assert response.status_code == 400


def test_evaluate_manual_assignment():
    response = client.post("/evaluate", json={
        "precincts": SCENARIO_PRECINCTS,
        "num_districts": 2,
        "assignments": {"P1": 1, "P2": 1, "P3": 2, "P4": 2},
    })
    assert response.status_code == 200
    summary = response.json()["summary"]
    assert summary["assigned_precincts"] == 4
    assert summary["efficiency_gap"] == pytest.approx(-17.5)
    assert [d["population"] for d in summary["districts"]] == [200, 200]


def test_evaluate_partial_assignment_reports_unknown_ids():
    response = client.post("/evaluate", json={
        "precincts": SCENARIO_PRECINCTS,
        "num_districts": 2,
        "assignments": {"P1": 1, "ghost": 2},
    })
    assert response.status_code == 200
    body = response.json()
    assert body["summary"]["assigned_precincts"] == 1
    assert len(body["warnings"]) == 1


def test_evaluate_rejects_out_of_range_district():
    response = client.post("/evaluate", json={
        "precincts": SCENARIO_PRECINCTS,
        "num_districts": 2,
        "assignments": {"P1": 3},
    })
    assert response.status_code == 400


def test_evaluate_rejects_duplicate_ids():
    response = client.post("/evaluate", json={
        "precincts": [SCENARIO_PRECINCTS[0], SCENARIO_PRECINCTS[0]],
        "num_districts": 2,
    })
    assert response.status_code == 400


def test_generate_plan_with_infinite_coordinate():
    precincts = [dict(p) for p in SCENARIO_PRECINCTS]
    precincts[0]["x"] = "inf"
    response = client.post("/generate-plan", json={"precincts": precincts, "num_districts": 2})
    assert response.status_code == 200
    assert len(response.json()["plan"]["assignments"]) == 4
