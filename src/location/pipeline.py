"""
Advisory pipeline orchestrator: resolves season, location and weather, fills
soil/climate defaults, assembles a FarmContext and runs the advisory engine.

    1. Season      - from the request, else from today's date
    2. Location    - reverse geocode the coordinates  } concurrently,
    3. Weather     - provider chain or estimator      } when coordinates given
    4. Defaults    - soil / climate / temperature for blank fields
    5. Advisory    - AI advisor or rule tables

Steps 1-4 never fail the request; only AdvisoryError from step 5 propagates.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Optional, Tuple

from src.advisory.engine import MODE_DELEGATED, AdvisoryEngine, AdvisoryResult
from src.data.schema import (
    ACCURACY_LOW, KHARIF, Coordinates, CropRecommendation, FarmContext, normalize_season,
)
from src.location.defaults import (
    DEFAULT_CLIMATE_TYPE, DEFAULT_SOIL_TYPE,
    lookup_climate_type, lookup_soil_type, split_location_text,
)
from src.location.insights import agricultural_insights
from src.location.resolver import GeoResolver, ResolvedLocation
from src.location.season import NEXT_SEASON, SeasonInfo, current_season, season_info
from src.location.weather import WeatherResolver, WeatherSnapshot

logger = logging.getLogger(__name__)


@dataclass
class AdvisoryRequest:
    """Inbound farm details. Only location is required."""
    location: str
    season: Optional[str] = None
    coordinates: Optional[Coordinates] = None
    soil_type: str = ""
    climate_type: str = ""
    temperature_text: str = ""
    additional_notes: str = ""


@dataclass
class PipelineResult:
    """Everything the pipeline resolved, plus the advisory outcome."""
    context: FarmContext
    season_info: SeasonInfo
    upcoming_season: SeasonInfo
    advisory: AdvisoryResult
    location: Optional[ResolvedLocation] = None
    weather: Optional[WeatherSnapshot] = None
    insights: Optional[Dict[str, str]] = None
    data_sources: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def recommendations(self) -> List[CropRecommendation]:
        return self.advisory.recommendations


class AdvisoryPipeline:
    """
    Orchestrate context resolution and produce crop recommendations.

    Usage:
        pipeline = AdvisoryPipeline()
        result = pipeline.run(AdvisoryRequest(location="Pune, Maharashtra", season="Kharif"))
        result.recommendations
    """

    def __init__(
        self,
        geo: Optional[GeoResolver] = None,
        weather: Optional[WeatherResolver] = None,
        engine: Optional[AdvisoryEngine] = None,
    ):
        self.geo = geo or GeoResolver()
        self.weather = weather or WeatherResolver()
        self.engine = engine or AdvisoryEngine()

    def run(self, request: AdvisoryRequest, on: Optional[date] = None) -> PipelineResult:
        """
        Execute the pipeline for one request.

        Raises:
            AdvisoryError: if no recommendations could be produced at all.
        """
        on = on or date.today()
        warnings: List[str] = []
        data_sources: List[str] = []

        # Step 1: Season
        logger.info("Step 1: Resolving season")
        season, info = self._resolve_season(request.season, on, warnings)

        # Steps 2-3: Location and weather
        location, weather = None, None
        if request.coordinates is not None:
            logger.info(
                "Steps 2-3: Resolving location and weather for (%.4f, %.4f)",
                request.coordinates.latitude, request.coordinates.longitude,
            )
            location, weather = self._resolve_surroundings(request.coordinates, on, warnings)
            if location is not None:
                data_sources.append(f"{location.source} (geocoding, {location.accuracy} accuracy)")
                if location.accuracy == ACCURACY_LOW:
                    warnings.append("Location approximated from latitude; verify state and district")
            if weather is not None:
                if weather.estimated:
                    data_sources.append("Latitude/season estimate (weather)")
                    warnings.append("Weather providers unavailable; using estimated weather")
                else:
                    data_sources.append(f"{weather.source} (weather)")

        insights = None
        if weather is not None:
            insights = agricultural_insights(weather, request.coordinates.latitude)

        # Step 4: Defaults for blank fields
        logger.info("Step 4: Applying agronomic defaults")
        soil = self._default_field(
            request.soil_type, lookup_soil_type, DEFAULT_SOIL_TYPE, "soil type",
            request.location, location, data_sources, warnings,
        )
        climate = self._default_field(
            request.climate_type, lookup_climate_type, DEFAULT_CLIMATE_TYPE, "climate",
            request.location, location, data_sources, warnings,
        )
        temperature_text = (request.temperature_text or "").strip()
        if not temperature_text and weather is not None:
            temperature_text = f"{weather.temperature_current:.0f}°C"
            if weather.estimated:
                temperature_text += " (estimated)"

        notes = (request.additional_notes or "").strip()
        if insights:
            summary = ", ".join(f"{k.replace('_', ' ')}: {v}" for k, v in insights.items())
            notes = f"{notes}\nWeather insights - {summary}".strip()

        context = FarmContext(
            location=request.location,
            season=season,
            coordinates=request.coordinates,
            soil_type=soil,
            climate_type=climate,
            temperature_text=temperature_text,
            additional_notes=notes,
            weather=weather,
        )

        # Step 5: Advisory
        logger.info("Step 5: Generating recommendations (%s, %s soil)", season, soil)
        advisory = self.engine.advise(context)
        if advisory.error:
            warnings.append(f"AI advisor unavailable; used rule tables ({advisory.error})")
        data_sources.append(
            "AI advisor" if advisory.mode == MODE_DELEGATED else "Seasonal crop rule tables"
        )

        return PipelineResult(
            context=context,
            season_info=info,
            upcoming_season=season_info(NEXT_SEASON[info.season]),
            advisory=advisory,
            location=location,
            weather=weather,
            insights=insights,
            data_sources=data_sources,
            warnings=warnings,
        )

    def _resolve_season(
        self, requested: Optional[str], on: date, warnings: List[str],
    ) -> Tuple[str, SeasonInfo]:
        clock = current_season(on)
        canonical = normalize_season(requested)
        if canonical is not None:
            return canonical, season_info(canonical)
        if requested and requested.strip():
            # Passed through as-is; the rule tables treat unknown seasons as Kharif
            warnings.append(f"Unrecognized season '{requested}'; using Kharif crop tables")
            return requested.strip(), season_info(KHARIF)
        return clock.season, clock

    def _resolve_surroundings(
        self, coords: Coordinates, on: date, warnings: List[str],
    ) -> Tuple[Optional[ResolvedLocation], Optional[WeatherSnapshot]]:
        with ThreadPoolExecutor(max_workers=2) as executor:
            geo_future = executor.submit(self.geo.resolve_coordinates, coords)
            weather_future = executor.submit(self.weather.resolve_coordinates, coords, on)

        location, weather = None, None
        try:
            location = geo_future.result()
        except Exception as e:
            logger.warning("Location resolution failed: %s", e)
            warnings.append(f"Location unavailable: {e}")
        try:
            weather = weather_future.result()
        except Exception as e:
            logger.warning("Weather resolution failed: %s", e)
            warnings.append(f"Weather unavailable: {e}")
        return location, weather

    def _default_field(
        self,
        given: str,
        lookup,
        default: str,
        label: str,
        location_text: str,
        resolved: Optional[ResolvedLocation],
        data_sources: List[str],
        warnings: List[str],
    ) -> str:
        """Explicit value, else a match on the typed location, else on the geocoded one."""
        given = (given or "").strip()
        if given:
            return given

        city, state = split_location_text(location_text)
        value = lookup(city, state)
        if value is None and resolved is not None and resolved.accuracy != ACCURACY_LOW:
            value = lookup(resolved.city, resolved.state)

        if value is None:
            warnings.append(f"No regional match for {label}; assumed {default}")
            return default
        data_sources.append(f"Regional {label} table")
        return value
