"""Tests for the training load API endpoints."""


class TestAddTrainingLoad:
    """Tests for POST /api/v1/load/{user_id}."""

    def test_add(self, client):
        response = client.post("/api/v1/load/athlete", json={"date": "2026-03-02", "tss": 100})

        assert response.status_code == 200
        data = response.json()
        assert data["atl"] == 13.31
        assert data["ctl"] == 2.35
        assert data["tsb"] == -10.96

    def test_same_day_accumulates(self, client):
        client.post("/api/v1/load/athlete", json={"date": "2026-03-02", "tss": 50})
        response = client.post("/api/v1/load/athlete", json={"date": "2026-03-02", "tss": 50})
        assert response.json()["daily_tss"] == 100
        assert response.json()["atl"] == 13.31

    def test_negative_tss_rejected(self, client):
        response = client.post("/api/v1/load/athlete", json={"date": "2026-03-02", "tss": -5})
        assert response.status_code == 422


class TestHistoryAndTrend:
    """Tests for reading the chain."""

    def test_history(self, client):
        for day in ("2026-03-01", "2026-03-02", "2026-03-03"):
            client.post("/api/v1/load/athlete", json={"date": day, "tss": 60})

        response = client.get("/api/v1/load/athlete/history?days=2&end_date=2026-03-03")
        assert [s["date"] for s in response.json()] == ["2026-03-02", "2026-03-03"]

    def test_trend_without_history(self, client):
        response = client.get("/api/v1/load/athlete/trend?end_date=2026-03-03")
        assert response.status_code == 200
        assert response.json()["form"] == "neutral"

    def test_trend_minimum_days(self, client):
        response = client.get("/api/v1/load/athlete/trend?days=3")
        assert response.status_code == 422


class TestReplay:
    """Tests for rebuilding the chain."""

    def test_replay(self, client):
        response = client.post(
            "/api/v1/load/athlete/replay",
            json={"entries": [
                {"date": "2026-03-01", "tss": 80},
                {"date": "2026-03-04", "tss": 40},
            ]},
        )
        assert response.status_code == 200
        assert len(response.json()) == 4

    def test_replay_requires_entries(self, client):
        response = client.post("/api/v1/load/athlete/replay", json={"entries": []})
        assert response.status_code == 422
