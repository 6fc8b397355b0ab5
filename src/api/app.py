"""
FastAPI application for crop advisory.

Endpoints:
    POST /crop-recommendations  - Ranked crop recommendations for a farm context
    POST /weather-data          - Current weather, 5-day rainfall and farming insights
    GET  /season                - Current and upcoming cropping season
    GET  /health                - Health check
    GET  /metrics               - Prometheus metrics
"""

import logging
import os
import time
from datetime import date

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest

from src.advisory.advisor import get_advisor
from src.advisory.engine import AdvisoryEngine, AdvisoryError
from src.api.schemas import (
    ErrorResponse, HealthResponse, RecommendationRequest, RecommendationResponse,
    SeasonOut, SeasonResponse, WeatherOut, WeatherRequest, WeatherResponse,
)
from src.data.schema import Coordinates
from src.location.insights import agricultural_insights
from src.location.pipeline import AdvisoryPipeline, AdvisoryRequest
from src.location.season import SeasonInfo, current_season, next_season
from src.location.weather import WeatherResolver

logger = logging.getLogger(__name__)

VERSION = "1.0.0"

# ---- App setup ----
app = FastAPI(
    title="Crop Advisory API",
    description="Location-aware crop recommendations for Indian farmers",
    version=VERSION,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ---- Prometheus metrics ----
REQUEST_COUNT = Counter("recommendation_requests_total", "Total recommendation requests")
REQUEST_LATENCY = Histogram(
    "recommendation_latency_seconds", "Recommendation latency",
    buckets=[0.05, 0.1, 0.5, 1.0, 2.0, 5.0, 10.0, 20.0],
)
ADVISORY_MODE = Counter(
    "advisory_results_total", "Advisory results by mode",
    ["mode"],
)
ADVISORY_FAILURES = Counter("advisory_failures_total", "Requests with no recommendations")


def build_pipeline() -> AdvisoryPipeline:
    """Fresh pipeline per request; the advisor is read from the environment."""
    return AdvisoryPipeline(engine=AdvisoryEngine(advisor=get_advisor()))


def _fallback_response(error: str) -> JSONResponse:
    """500 telling the client to use its own static recommendations."""
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(error=error).model_dump(),
    )


def _season_out(info: SeasonInfo) -> SeasonOut:
    return SeasonOut(
        season=info.season,
        months=info.months,
        description=info.description,
        typical_crops=list(info.typical_crops),
    )


@app.get("/health", response_model=HealthResponse)
def health_check():
    """Health check endpoint."""
    return HealthResponse(
        status="healthy",
        advisor_configured=bool(os.environ.get("GROQ_API_KEY")),
        version=VERSION,
    )


@app.get("/season", response_model=SeasonResponse)
def season():
    """Season for today's date and the one after it."""
    today = date.today()
    return SeasonResponse(
        current=_season_out(current_season(today)),
        upcoming=_season_out(next_season(today)),
    )


@app.post(
    "/crop-recommendations",
    response_model=RecommendationResponse,
    responses={500: {"model": ErrorResponse}},
)
def crop_recommendations(request: RecommendationRequest):
    """
    Resolve location, weather and soil defaults, then return up to three
    ranked crop recommendations.
    """
    start_time = time.time()
    REQUEST_COUNT.inc()

    coords = None
    if request.coordinates is not None:
        coords = Coordinates(request.coordinates.latitude, request.coordinates.longitude)

    advisory_request = AdvisoryRequest(
        location=request.location,
        season=request.season,
        coordinates=coords,
        soil_type=request.soil_type,
        climate_type=request.climate,
        temperature_text=request.temperature,
        additional_notes=request.additional_info,
    )

    try:
        result = build_pipeline().run(advisory_request)
    except AdvisoryError as e:
        logger.error("Advisory failed for '%s': %s", request.location, e)
        ADVISORY_FAILURES.inc()
        return _fallback_response(str(e))
    except Exception as e:
        logger.exception("Unexpected error advising '%s'", request.location)
        ADVISORY_FAILURES.inc()
        return _fallback_response(f"Recommendation failed: {e}")
    finally:
        REQUEST_LATENCY.observe(time.time() - start_time)

    ADVISORY_MODE.labels(mode=result.advisory.mode).inc()

    return RecommendationResponse(
        recommendations=result.recommendations,
        mode=result.advisory.mode,
        season=_season_out(result.season_info),
        advice=result.advisory.advice,
        warnings=result.warnings,
        data_sources=result.data_sources,
    )


@app.post("/weather-data", response_model=WeatherResponse)
def weather_data(request: WeatherRequest):
    """Current weather and farming insights; estimated when providers fail."""
    snapshot = WeatherResolver().resolve(request.latitude, request.longitude)
    return WeatherResponse(
        latitude=request.latitude,
        longitude=request.longitude,
        current=WeatherOut(**snapshot.to_dict()),
        agricultural_insights=agricultural_insights(snapshot, request.latitude),
    )


# ---- Prometheus metrics endpoint ----
@app.get("/metrics")
def metrics():
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


if __name__ == "__main__":
    import uvicorn
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    uvicorn.run(app, host="0.0.0.0", port=8000)
