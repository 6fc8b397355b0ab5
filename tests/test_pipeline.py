"""
End-to-end tests for the advisory pipeline with offline providers.
"""

import sys
from datetime import date
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

MONSOON_DAY = date(2024, 7, 15)


def _offline_pipeline(engine=None):
    """Pipeline whose providers are all exhausted: heuristic geo, estimated weather."""
    from src.location.pipeline import AdvisoryPipeline
    from src.location.resolver import GeoResolver
    from src.location.weather import WeatherResolver

    return AdvisoryPipeline(
        geo=GeoResolver(providers=[]),
        weather=WeatherResolver(providers=[]),
        engine=engine,
    )


def _located_geo(city, state, accuracy="high"):
    from src.location.resolver import ResolvedLocation

    geo = MagicMock()
    geo.resolve_coordinates.return_value = ResolvedLocation(
        latitude=0, longitude=0, city=city, state=state, country="India",
        accuracy=accuracy, source="fake",
    )
    return geo


class TestAdvisoryPipeline:
    def test_pune_kharif_all_providers_down(self):
        from src.data.schema import Coordinates
        from src.location.pipeline import AdvisoryRequest

        result = _offline_pipeline().run(
            AdvisoryRequest(location="Pune, Maharashtra", season="Kharif",
                            coordinates=Coordinates(18.5, 73.8)),
            on=MONSOON_DAY,
        )

        ctx = result.context
        assert ctx.season == "Kharif"
        assert ctx.soil_type == "black"
        assert ctx.climate_type == "tropical"
        assert ctx.temperature_text == "27°C (estimated)"

        recs = result.recommendations
        assert 1 <= len(recs) <= 3
        assert {r.name for r in recs} <= {"Rice", "Ragi", "Groundnut"}
        assert [r.suitability for r in recs] == sorted((r.suitability for r in recs), reverse=True)
        assert all(r.profitability in ("high", "medium", "low") for r in recs)
        assert result.advisory.mode == "deterministic"

        assert result.location.accuracy == "low"
        assert result.weather.estimated is True
        assert any("approximated" in w for w in result.warnings)
        assert any("estimated weather" in w for w in result.warnings)
        assert "Seasonal crop rule tables" in result.data_sources

    def test_insights_are_attached_and_passed_to_context(self):
        from src.data.schema import Coordinates
        from src.location.pipeline import AdvisoryRequest

        result = _offline_pipeline().run(
            AdvisoryRequest(location="Pune", season="Kharif", coordinates=Coordinates(18.5, 73.8)),
            on=MONSOON_DAY,
        )

        assert set(result.insights) == {
            "season_suitability", "irrigation_recommendation",
            "pest_risk_level", "planting_conditions",
        }
        assert "Weather insights" in result.context.additional_notes

    def test_rabi_without_coordinates(self):
        from src.location.pipeline import AdvisoryRequest

        geo, weather = MagicMock(), MagicMock()
        pipeline = _offline_pipeline()
        pipeline.geo, pipeline.weather = geo, weather

        result = pipeline.run(AdvisoryRequest(location="Ludhiana, Punjab", season="rabi"))

        geo.resolve_coordinates.assert_not_called()
        weather.resolve_coordinates.assert_not_called()
        assert result.location is None
        assert result.weather is None
        assert result.insights is None
        assert result.context.season == "Rabi"
        assert result.context.soil_type == "alluvial"
        assert result.context.climate_type == "subtropical"
        assert result.recommendations[0].name == "Wheat"

    def test_blank_season_uses_clock(self):
        from src.location.pipeline import AdvisoryRequest

        result = _offline_pipeline().run(AdvisoryRequest(location="Nagpur"), on=date(2024, 12, 1))

        assert result.context.season == "Rabi"
        assert result.season_info.months == "November - March"
        assert result.upcoming_season.season == "Zaid"

    def test_upcoming_follows_requested_season(self):
        from src.location.pipeline import AdvisoryRequest

        result = _offline_pipeline().run(
            AdvisoryRequest(location="Nagpur", season="Zaid"), on=date(2024, 12, 1),
        )
        assert result.upcoming_season.season == "Kharif"

    def test_unrecognized_season_warns_and_uses_kharif_tables(self):
        from src.location.pipeline import AdvisoryRequest

        result = _offline_pipeline().run(AdvisoryRequest(location="Patna", season="monsoon"))

        assert result.context.season == "monsoon"
        assert result.season_info.season == "Kharif"
        assert result.recommendations[0].name == "Rice"
        assert any("Unrecognized season" in w for w in result.warnings)

    def test_explicit_fields_are_kept(self):
        from src.location.pipeline import AdvisoryRequest

        result = _offline_pipeline().run(AdvisoryRequest(
            location="Pune, Maharashtra", season="Kharif",
            soil_type="red", climate_type="semi-arid", temperature_text="32C",
        ))
        assert result.context.soil_type == "red"
        assert result.context.climate_type == "semi-arid"
        assert result.context.temperature_text == "32C"

    def test_defaults_from_geocoded_location(self):
        from src.data.schema import Coordinates
        from src.location.pipeline import AdvisoryRequest

        pipeline = _offline_pipeline()
        pipeline.geo = _located_geo("Kochi", "Kerala")

        result = pipeline.run(
            AdvisoryRequest(location="my farm", season="Kharif", coordinates=Coordinates(9.9, 76.3)),
            on=MONSOON_DAY,
        )
        assert result.context.soil_type == "laterite"
        assert result.context.climate_type == "coastal"
        assert "Regional soil type table" in result.data_sources

    def test_low_accuracy_location_is_not_used_for_defaults(self):
        from src.data.schema import Coordinates
        from src.location.pipeline import AdvisoryRequest

        result = _offline_pipeline().run(
            AdvisoryRequest(location="my farm", season="Kharif", coordinates=Coordinates(12.0, 77.0)),
            on=MONSOON_DAY,
        )
        # The heuristic says Karnataka, but a guessed state must not drive soil type
        assert result.context.soil_type == "alluvial"
        assert any("assumed alluvial" in w for w in result.warnings)

    def test_geo_failure_does_not_fail_request(self):
        from src.data.schema import Coordinates
        from src.location.pipeline import AdvisoryRequest

        pipeline = _offline_pipeline()
        pipeline.geo = MagicMock()
        pipeline.geo.resolve_coordinates.side_effect = RuntimeError("resolver crashed")

        result = pipeline.run(
            AdvisoryRequest(location="Pune, Maharashtra", season="Kharif",
                            coordinates=Coordinates(18.5, 73.8)),
            on=MONSOON_DAY,
        )
        assert result.location is None
        assert result.weather is not None
        assert any("resolver crashed" in w for w in result.warnings)
        assert result.recommendations

    def test_null_weather_description_does_not_fail_request(self):
        from src.data.schema import Coordinates
        from src.location.pipeline import AdvisoryRequest
        from src.location.weather import WeatherResolver

        current = {
            "main": {"temp": 29.0, "temp_min": 26.0, "temp_max": 31.0, "humidity": 75},
            "weather": [{"description": None}],
            "wind": {"speed": 3.0},
        }
        current_resp, forecast_resp = MagicMock(), MagicMock()
        current_resp.json.return_value = current
        forecast_resp.json.return_value = {"list": [{"rain": {"3h": 2.0}}]}

        pipeline = _offline_pipeline()
        pipeline.weather = WeatherResolver()

        with patch.dict("os.environ", {"OPENWEATHER_API_KEY": "test_key"}), \
             patch("src.location.weather.requests.get") as mock_get:
            mock_get.side_effect = [current_resp, forecast_resp]
            result = pipeline.run(
                AdvisoryRequest(location="Pune, Maharashtra", season="Kharif",
                                coordinates=Coordinates(18.5, 73.8)),
                on=MONSOON_DAY,
            )

        assert result.weather.source == "OpenWeatherMap"
        assert result.weather.conditions == ""
        assert result.insights["planting_conditions"] == "good_for_planting"
        assert result.recommendations

    def test_advisor_failure_is_reported(self):
        from src.advisory.engine import AdvisoryEngine
        from src.location.pipeline import AdvisoryRequest

        advisor = MagicMock(response_mode="structured")
        advisor.complete.return_value = "sorry, I cannot help"
        pipeline = _offline_pipeline(engine=AdvisoryEngine(advisor=advisor))

        result = pipeline.run(AdvisoryRequest(location="Pune", season="Rabi"))

        assert result.advisory.mode == "deterministic"
        assert result.recommendations[0].name == "Wheat"
        assert any("AI advisor unavailable" in w for w in result.warnings)

    def test_total_failure_propagates(self):
        from src.advisory.engine import AdvisoryError
        from src.location.pipeline import AdvisoryRequest

        engine = MagicMock()
        engine.advise.side_effect = AdvisoryError("no tables")

        with pytest.raises(AdvisoryError):
            _offline_pipeline(engine=engine).run(AdvisoryRequest(location="Pune", season="Kharif"))
