"""Tests for the workout analytics API endpoints."""

from conftest import ride_stream, run_stream


def ride_payload(**overrides):
    payload = {
        "user_id": "athlete",
        "workout_date": "2026-03-02",
        "discipline": "bike",
        "stream": ride_stream(seconds=1800).to_dict(),
        "summary": {"moving_time": 1800, "distance": 15000},
    }
    payload.update(overrides)
    return payload


class TestRootEndpoints:
    """Tests for service metadata endpoints."""

    def test_root(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_health(self, client):
        assert client.get("/health").json() == {"status": "healthy"}


class TestAnalyzeWorkout:
    """Tests for POST /api/v1/analytics/workouts/{workout_id}."""

    def test_analyze_ride(self, client):
        response = client.post("/api/v1/analytics/workouts/ride-1", json=ride_payload())

        assert response.status_code == 200
        data = response.json()
        assert data["analytics"]["workout_id"] == "ride-1"
        assert data["analytics"]["normalized_power"] == 250.0
        # 250W over the default 220W FTP sits in zone 5
        assert data["analytics"]["power_zones"]["z5"] > 99
        assert data["training_load"]["date"] == "2026-03-02"

    def test_summary_only(self, client):
        payload = ride_payload(
            stream=None,
            summary={"moving_time": 3600, "average_watts": 200, "weighted_average_watts": 220},
        )
        response = client.post("/api/v1/analytics/workouts/ride-2", json=payload)

        assert response.status_code == 200
        assert response.json()["analytics"]["normalized_power"] == 220

    def test_unknown_discipline(self, client):
        response = client.post(
            "/api/v1/analytics/workouts/x", json=ride_payload(discipline="rowing")
        )
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "UNKNOWN_DISCIPLINE"

    def test_unusable_stream(self, client):
        response = client.post(
            "/api/v1/analytics/workouts/x",
            json=ride_payload(stream={"time": [], "watts": [200]}),
        )
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "UNUSABLE_STREAM"

    def test_invalid_intensity(self, client):
        response = client.post(
            "/api/v1/analytics/workouts/x",
            json=ride_payload(prescribed_intensity="brutal"),
        )
        assert response.status_code == 422
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"


class TestGetAnalytics:
    """Tests for reading stored analytics."""

    def test_stored_analytics(self, client):
        client.post("/api/v1/analytics/workouts/ride-1", json=ride_payload())

        response = client.get("/api/v1/analytics/workouts/ride-1")
        assert response.status_code == 200
        assert response.json()["normalized_power"] == 250.0

    def test_not_found(self, client):
        response = client.get("/api/v1/analytics/workouts/missing")

        assert response.status_code == 404
        error = response.json()["error"]
        assert error["code"] == "ANALYTICS_NOT_FOUND"
        assert error["details"]["resource_id"] == "missing"


class TestTrendEndpoints:
    """Tests for weekly stats and the EF trend."""

    def test_weekly(self, client):
        client.post("/api/v1/analytics/workouts/ride-1", json=ride_payload())
        client.post(
            "/api/v1/analytics/workouts/ride-2",
            json=ride_payload(workout_date="2026-03-04"),
        )

        response = client.get("/api/v1/analytics/weekly/athlete?weeks=2&end_date=2026-03-08")
        assert response.status_code == 200
        weeks = response.json()
        assert len(weeks) == 1
        assert weeks[0]["week_start"] == "2026-03-02"
        assert weeks[0]["workout_count"] == 2

    def test_efficiency(self, client):
        run = {
            "user_id": "athlete",
            "workout_date": "2026-03-03",
            "discipline": "run",
            "stream": run_stream().to_dict(),
            "summary": {"moving_time": 599, "distance": 1797},
        }
        client.post("/api/v1/analytics/workouts/run-1", json=run)
        client.post("/api/v1/analytics/workouts/ride-1", json=ride_payload())

        response = client.get("/api/v1/analytics/efficiency/athlete?discipline=run&end_date=2026-03-08")
        assert response.status_code == 200
        series = response.json()
        assert len(series) == 1
        assert series[0]["date"] == "2026-03-03"
        assert series[0]["ef"] > 0
