"""
Pydantic request/response schemas for the crop advisory service.
"""

from typing import Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field, model_validator

from src.data.schema import CropRecommendation


class CoordinatesIn(BaseModel):
    latitude: float = Field(..., ge=-90, le=90, description="Latitude (degrees)")
    longitude: float = Field(..., ge=-180, le=180, description="Longitude (degrees)")


class RecommendationRequest(BaseModel):
    """Input schema for /crop-recommendations."""
    model_config = ConfigDict(populate_by_name=True, json_schema_extra={
        "examples": [{
            "location": "Pune, Maharashtra",
            "season": "Kharif",
            "coordinates": {"latitude": 18.5, "longitude": 73.8},
            "soilType": "",
            "climate": "",
            "temperature": "",
            "additionalInfo": "2 acres, borewell irrigation",
        }]
    })

    location: str = Field(..., min_length=1, description="Free-text location, e.g. 'Pune, Maharashtra'")
    season: str = Field(..., description="Kharif, Rabi or Zaid (any casing)")
    coordinates: Optional[CoordinatesIn] = None
    soil_type: str = Field("", alias="soilType")
    climate: str = ""
    temperature: str = ""
    additional_info: str = Field("", alias="additionalInfo")

    @model_validator(mode="before")
    @classmethod
    def _unwrap_farming_data(cls, data):
        # Web client posts {"farmingData": {...}}
        if isinstance(data, dict) and isinstance(data.get("farmingData"), dict):
            return data["farmingData"]
        return data


class SeasonOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    season: str
    months: str
    description: str
    typical_crops: List[str] = Field(..., alias="typicalCrops")


class RecommendationResponse(BaseModel):
    """Output schema for /crop-recommendations."""
    recommendations: List[CropRecommendation]
    mode: str
    season: SeasonOut
    advice: Optional[str] = None
    warnings: List[str] = []
    data_sources: List[str] = []


class ErrorResponse(BaseModel):
    """Total failure; the client should use its own static fallback."""
    error: str
    fallback: bool = True


class WeatherRequest(BaseModel):
    """Input schema for /weather-data."""
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)


class WeatherOut(BaseModel):
    temperature_current: float
    temperature_min: float
    temperature_max: float
    humidity_pct: float
    rainfall_next_5_days_mm: float
    conditions: str
    wind_speed: float
    soil_temperature_estimate: Optional[float] = None
    estimated: bool
    source: str


class WeatherResponse(BaseModel):
    """Output schema for /weather-data."""
    latitude: float
    longitude: float
    current: WeatherOut
    agricultural_insights: Dict[str, str]


class SeasonResponse(BaseModel):
    current: SeasonOut
    upcoming: SeasonOut


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    advisor_configured: bool
    version: str
