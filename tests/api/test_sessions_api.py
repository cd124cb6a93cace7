"""
Tests for the HTTP API.

The global registry and elevation client are swapped for test instances
through FastAPI dependency overrides.
"""

import json

import httpx
import pytest
from fastapi.testclient import TestClient

from runtrack.main import app
from runtrack.features.elevation import ElevationClient, get_elevation_client
from runtrack.features.session import SessionRegistry, get_session_registry


M_PER_DEG = 111194.92664455873


def fix_json(east_m, t_s, t0_ms, accuracy_m=5.0):
    return {
        "lat": 0.0,
        "lon": east_m / M_PER_DEG,
        "timestamp_ms": t0_ms + int(t_s * 1000),
        "accuracy_m": accuracy_m,
    }


def elevation_handler(request: httpx.Request) -> httpx.Response:
    locations = json.loads(request.content)["locations"]
    return httpx.Response(200, json={
        "results": [{"elevation": loc["latitude"] * 100} for loc in locations]
    })


@pytest.fixture
def registry(clock):
    return SessionRegistry(clock=clock)


@pytest.fixture
def api(registry):
    elevation_client = ElevationClient(
        api_url="https://elevation.test/api/v1/lookup",
        retry_delay_seconds=0,
        max_retries=1,
        transport=httpx.MockTransport(elevation_handler),
    )
    app.dependency_overrides[get_session_registry] = lambda: registry
    app.dependency_overrides[get_elevation_client] = lambda: elevation_client
    yield TestClient(app)
    app.dependency_overrides.clear()


def create(api, **body):
    response = api.post("/api/v1/sessions", json=body)
    assert response.status_code == 201
    return response.json()


# =============================================================================
# Test Health
# =============================================================================

class TestHealth:

    def test_health(self, api):
        response = api.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


# =============================================================================
# Test Session Lifecycle
# =============================================================================

class TestSessionLifecycle:
    """Create, drive and finish a session over HTTP."""

    def test_create(self, api, registry):
        body = create(api, unit="mi", profile={"weight_kg": 60, "age": 45, "sex": "female"})

        assert body["state"] == "idle"
        assert body["unit"] == "mi"
        assert body["split_distance_km"] == pytest.approx(1.609344)
        assert body["totals"]["distance_km"] == 0.0

        engine = registry.get(body["session_id"])
        assert engine.profile.weight_kg == 60
        assert engine.profile.sex.value == "female"

    def test_create_invalid_config(self, api):
        response = api.post("/api/v1/sessions", json={"split_distance_km": -1})

        assert response.status_code == 400

    def test_create_unknown_unit(self, api):
        response = api.post("/api/v1/sessions", json={"unit": "yards"})

        assert response.status_code == 422

    def test_unknown_session(self, api):
        assert api.get("/api/v1/sessions/run_missing").status_code == 404
        assert api.post("/api/v1/sessions/run_missing/start").status_code == 404
        assert api.delete("/api/v1/sessions/run_missing").status_code == 404

    def test_state_transitions(self, api):
        session_id = create(api)["session_id"]
        base = f"/api/v1/sessions/{session_id}"

        assert api.post(f"{base}/start").json()["state"] == "running"
        assert api.post(f"{base}/pause").json()["state"] == "paused"
        assert api.post(f"{base}/resume").json()["state"] == "running"
        assert api.post(f"{base}/stop").json()["state"] == "stopped"
        # Invalid transitions are ignored
        assert api.post(f"{base}/start").json()["state"] == "stopped"

    def test_reset_changes_id(self, api):
        session_id = create(api)["session_id"]
        api.post(f"/api/v1/sessions/{session_id}/start")

        body = api.post(f"/api/v1/sessions/{session_id}/reset").json()

        assert body["session_id"] != session_id
        assert body["state"] == "idle"
        assert api.get(f"/api/v1/sessions/{session_id}").status_code == 404
        assert api.get(f"/api/v1/sessions/{body['session_id']}").status_code == 200

    def test_delete(self, api, registry):
        session_id = create(api)["session_id"]

        assert api.delete(f"/api/v1/sessions/{session_id}").json() == {"success": True}
        assert registry.get(session_id) is None


# =============================================================================
# Test Fixes and Stats
# =============================================================================

class TestFixesAndStats:
    """Fix ingestion and derived data."""

    def test_fixes_before_start_rejected(self, api, clock):
        session_id = create(api)["session_id"]

        body = api.post(
            f"/api/v1/sessions/{session_id}/fixes",
            json={"fixes": [fix_json(0, 0, clock.now_ms)]},
        ).json()

        assert body["accepted"] == 0
        assert body["rejected"] == 1

    def test_run(self, api, clock):
        session_id = create(api)["session_id"]
        base = f"/api/v1/sessions/{session_id}"
        t0 = clock.now_ms
        api.post(f"{base}/start")

        fixes = [fix_json(i * 110, i * 10, t0) for i in range(12)]
        fixes.insert(3, fix_json(300, 25, t0, accuracy_m=50.0))
        clock.set(110)

        body = api.post(f"{base}/fixes", json={"fixes": fixes}).json()

        assert body["accepted"] == 12
        assert body["rejected"] == 1
        assert body["distance_km"] == pytest.approx(1.21, rel=1e-6)
        assert [lap["index"] for lap in body["completed_laps"]] == [1]

        stats = api.get(f"{base}/stats").json()
        assert stats["duration_s"] == pytest.approx(110.0)
        assert stats["sample_count"] == 12
        assert stats["total_laps"] == 1
        assert stats["current_lap"] == 2
        assert stats["gps_quality"] == "unavailable"
        assert stats["duration_formatted"] == "1:50"
        assert stats["avg_pace_formatted"] == "1:31"

        laps = api.get(f"{base}/laps").json()
        assert laps[0]["end_sample_index"] == 10

        samples = api.get(f"{base}/samples", params={"offset": 10}).json()
        assert [s["index"] for s in samples] == [10, 11]

        markers = api.get(f"{base}/splits/markers").json()
        assert markers == [{
            "lat": 0.0,
            "lon": pytest.approx(1100 / M_PER_DEG),
            "distance_km": 1.0,
            "lap_index": 1,
        }]

        session = api.get(base).json()
        assert session["rejected_samples"] == 1
        assert session["lap_count"] == 1

    def test_invalid_coordinates_counted(self, api, clock):
        session_id = create(api)["session_id"]
        api.post(f"/api/v1/sessions/{session_id}/start")

        body = api.post(
            f"/api/v1/sessions/{session_id}/fixes",
            json={"fixes": [{"lat": 120.0, "lon": 0.0, "timestamp_ms": clock.now_ms}]},
        ).json()

        assert body["rejected"] == 1


# =============================================================================
# Test Elevation Lookup
# =============================================================================

class TestElevationLookup:

    def test_lookup(self, api):
        response = api.post(
            "/api/v1/elevation",
            json={"locations": [{"lat": 1.0, "lon": 2.0}, {"lat": 3.0, "lon": 4.0}]},
        )

        body = response.json()
        assert response.status_code == 200
        assert body["success"] is True
        assert body["count"] == 2
        assert [r["elevation_m"] for r in body["results"]] == [100.0, 300.0]

    def test_lookup_failure(self, api):
        failing = ElevationClient(
            api_url="https://elevation.test/api/v1/lookup",
            retry_delay_seconds=0,
            max_retries=1,
            transport=httpx.MockTransport(lambda request: httpx.Response(500)),
        )
        app.dependency_overrides[get_elevation_client] = lambda: failing

        body = api.post("/api/v1/elevation", json={"locations": [{"lat": 1.0, "lon": 2.0}]}).json()

        assert body["success"] is False
        assert body["results"][0]["elevation_m"] is None

    def test_out_of_range_coordinates(self, api):
        response = api.post("/api/v1/elevation", json={"locations": [{"lat": 95.0, "lon": 0.0}]})

        assert response.status_code == 422
