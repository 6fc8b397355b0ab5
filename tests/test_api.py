"""
Integration tests for the FastAPI application.
Providers are replaced with offline ones; no network access required.
"""

import sys
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))


@pytest.fixture
def client():
    from fastapi.testclient import TestClient
    from src.api.app import app

    return TestClient(app)


@pytest.fixture
def offline_pipeline():
    from src.advisory.engine import AdvisoryEngine
    from src.location.pipeline import AdvisoryPipeline
    from src.location.resolver import GeoResolver
    from src.location.weather import WeatherResolver

    pipeline = AdvisoryPipeline(
        geo=GeoResolver(providers=[]),
        weather=WeatherResolver(providers=[]),
        engine=AdvisoryEngine(),
    )
    with patch("src.api.app.build_pipeline", return_value=pipeline):
        yield pipeline


class TestHealthEndpoint:
    def test_health(self, client):
        with patch.dict("os.environ", {}, clear=True):
            resp = client.get("/health")
        assert resp.status_code == 200
        data = resp.json()
        assert data["status"] == "healthy"
        assert data["advisor_configured"] is False
        assert data["version"] == "1.0.0"


class TestSeasonEndpoint:
    def test_season(self, client):
        from src.location.season import NEXT_SEASON

        resp = client.get("/season")
        assert resp.status_code == 200
        data = resp.json()
        assert data["upcoming"]["season"] == NEXT_SEASON[data["current"]["season"]]
        assert data["current"]["typicalCrops"]


class TestRecommendationEndpoint:
    def test_recommendations(self, client, offline_pipeline):
        resp = client.post("/crop-recommendations", json={
            "location": "Pune, Maharashtra",
            "season": "Kharif",
            "coordinates": {"latitude": 18.5, "longitude": 73.8},
        })
        assert resp.status_code == 200
        data = resp.json()

        recs = data["recommendations"]
        assert 1 <= len(recs) <= 3
        assert {r["name"] for r in recs} <= {"Rice", "Ragi", "Groundnut"}
        assert data["mode"] == "deterministic"
        assert data["season"]["season"] == "Kharif"
        assert data["warnings"]

        rec = recs[0]
        assert rec["growthPeriod"].endswith("days")
        assert "perAcre" in rec["estimatedEarnings"]
        assert "seeds" in rec["inputs"]
        assert rec["waterRequirement"] in ("high", "medium", "low")
        assert rec["marketDemand"] in ("high", "medium", "low")

    def test_farming_data_wrapper(self, client, offline_pipeline):
        resp = client.post("/crop-recommendations", json={
            "farmingData": {
                "location": "Ludhiana, Punjab",
                "season": "rabi",
                "soilType": "",
                "climate": "",
                "temperature": "",
                "additionalInfo": "",
            },
        })
        assert resp.status_code == 200
        assert resp.json()["recommendations"][0]["name"] == "Wheat"

    def test_missing_location(self, client, offline_pipeline):
        resp = client.post("/crop-recommendations", json={"season": "Kharif"})
        assert resp.status_code == 422

    def test_invalid_coordinates(self, client, offline_pipeline):
        resp = client.post("/crop-recommendations", json={
            "location": "Pune",
            "season": "Kharif",
            "coordinates": {"latitude": 95, "longitude": 73.8},
        })
        assert resp.status_code == 422

    def test_total_failure_signals_fallback(self, client):
        from src.advisory.engine import AdvisoryError

        pipeline = MagicMock()
        pipeline.run.side_effect = AdvisoryError("Rule tables could not resolve season")

        with patch("src.api.app.build_pipeline", return_value=pipeline):
            resp = client.post("/crop-recommendations", json={
                "location": "Pune", "season": "Kharif",
            })

        assert resp.status_code == 500
        assert resp.json() == {
            "error": "Rule tables could not resolve season",
            "fallback": True,
        }

    def test_unexpected_error_still_signals_fallback(self, client):
        pipeline = MagicMock()
        pipeline.run.side_effect = AttributeError("'NoneType' object has no attribute 'lower'")

        with patch("src.api.app.build_pipeline", return_value=pipeline):
            resp = client.post("/crop-recommendations", json={
                "location": "Pune", "season": "Kharif",
            })

        assert resp.status_code == 500
        data = resp.json()
        assert data["fallback"] is True
        assert "NoneType" in data["error"]

    def test_failed_requests_are_timed(self, client):
        from prometheus_client import REGISTRY
        from src.advisory.engine import AdvisoryError

        def latency_count():
            return REGISTRY.get_sample_value("recommendation_latency_seconds_count") or 0

        pipeline = MagicMock()
        pipeline.run.side_effect = AdvisoryError("no tables")
        before = latency_count()

        with patch("src.api.app.build_pipeline", return_value=pipeline):
            client.post("/crop-recommendations", json={"location": "Pune", "season": "Kharif"})

        assert latency_count() == before + 1


class TestWeatherEndpoint:
    def test_weather_data(self, client):
        from src.location.weather import estimate_weather

        with patch("src.api.app.WeatherResolver") as MockResolver:
            MockResolver.return_value.resolve.return_value = estimate_weather(18.5, 7)
            resp = client.post("/weather-data", json={"latitude": 18.5, "longitude": 73.8})

        assert resp.status_code == 200
        data = resp.json()
        assert data["current"]["estimated"] is True
        assert data["current"]["temperature_current"] == 27
        assert data["agricultural_insights"]["pest_risk_level"] == "medium"

    def test_weather_invalid_latitude(self, client):
        resp = client.post("/weather-data", json={"latitude": -91, "longitude": 0})
        assert resp.status_code == 422


class TestMetricsEndpoint:
    def test_metrics(self, client, offline_pipeline):
        client.post("/crop-recommendations", json={"location": "Pune", "season": "Zaid"})
        resp = client.get("/metrics")
        assert resp.status_code == 200
        assert "recommendation_requests_total" in resp.text
        assert "advisory_results_total" in resp.text
