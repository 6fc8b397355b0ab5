"""
Canonical value types and lookup constants shared by the location resolvers,
the advisory engine and the API.

All objects here are created per request and discarded with the response.
"""

import re
from dataclasses import dataclass
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator


# ---------- Seasons ----------
KHARIF = "Kharif"
RABI = "Rabi"
ZAID = "Zaid"
SEASONS = [KHARIF, RABI, ZAID]


def normalize_season(name: Optional[str]) -> Optional[str]:
    """
    Map any casing of a season name ('kharif', 'RABI', ' Zaid ') to its
    canonical form. Returns None for blank or unrecognized names.
    """
    if not isinstance(name, str):
        return None
    key = name.strip().lower()
    for season in SEASONS:
        if season.lower() == key:
            return season
    return None


# ---------- Levels ----------
HIGH = "high"
MEDIUM = "medium"
LOW = "low"

# Accuracy tiers attached to a geocoding result
ACCURACY_HIGH = HIGH
ACCURACY_MEDIUM = MEDIUM
ACCURACY_LOW = LOW

# Sort order for profitability tie-breaks (lower sorts first)
TIER_ORDER = {HIGH: 0, MEDIUM: 1, LOW: 2}

Level = Literal["high", "medium", "low"]


# ---------- Coordinates ----------
_COORDS_RE = re.compile(r"^-?\d+\.?\d*\s*,\s*-?\d+\.?\d*$")


@dataclass(frozen=True)
class Coordinates:
    """A validated latitude/longitude pair."""
    latitude: float
    longitude: float

    def __post_init__(self):
        lat, lon = float(self.latitude), float(self.longitude)
        if not (-90 <= lat <= 90):
            raise ValueError(f"Latitude {lat} out of range [-90, 90]")
        if not (-180 <= lon <= 180):
            raise ValueError(f"Longitude {lon} out of range [-180, 180]")
        object.__setattr__(self, "latitude", lat)
        object.__setattr__(self, "longitude", lon)

    @classmethod
    def parse(cls, text: str) -> "Coordinates":
        """Parse a 'lat,lon' string."""
        if not is_coordinates(text):
            raise ValueError(f"Unrecognized coordinate format: '{text}'")
        lat, lon = text.strip().split(",")
        return cls(float(lat.strip()), float(lon.strip()))


def is_coordinates(text: str) -> bool:
    """Check if the string looks like lat,lon coordinates."""
    return bool(_COORDS_RE.match(text.strip())) if isinstance(text, str) else False


# ---------- Farm context ----------
@dataclass
class FarmContext:
    """
    Unit of work handed to the advisory engine. Only location and season
    are guaranteed; every other field may be empty.
    """
    location: str
    season: str
    coordinates: Optional[Coordinates] = None
    soil_type: str = ""
    climate_type: str = ""
    temperature_text: str = ""
    additional_notes: str = ""
    weather: Optional[Any] = None  # WeatherSnapshot, kept loose to avoid an import cycle


# ---------- Crop recommendation ----------
_PERIOD_RE = re.compile(
    r"(\d+)\s*(?:(?:-|–|to)\s*(\d+)\s*)?(day|week|month|year)s?\b",
    re.IGNORECASE,
)

# Days per unit; months and years are planning approximations
_PERIOD_UNIT_DAYS = {"day": 1, "week": 7, "month": 30, "year": 365}


class GrowthPeriod(BaseModel):
    """Crop duration range in days."""
    min_days: int = Field(..., ge=1)
    max_days: int = Field(..., ge=1)

    @classmethod
    def parse(cls, value: Any) -> "GrowthPeriod":
        """
        Accept '120-140 days', '90 days', '10-12 months', a [min, max] pair
        of days or a dict. Text without a day/week/month/year unit is rejected.
        """
        if isinstance(value, GrowthPeriod):
            return value
        if isinstance(value, dict):
            return cls(**value)
        if isinstance(value, (list, tuple)) and len(value) == 2:
            return cls(min_days=int(value[0]), max_days=int(value[1]))
        if isinstance(value, str):
            m = _PERIOD_RE.search(value)
            if m:
                factor = _PERIOD_UNIT_DAYS[m.group(3).lower()]
                lo = int(m.group(1)) * factor
                hi = int(m.group(2)) * factor if m.group(2) else lo
                return cls(min_days=min(lo, hi), max_days=max(lo, hi))
        raise ValueError(f"Unrecognized growth period: {value!r}")

    def __str__(self) -> str:
        if self.min_days == self.max_days:
            return f"{self.min_days} days"
        return f"{self.min_days}-{self.max_days} days"


class CropInputs(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    seed_rate: str = Field(..., alias="seeds")
    fertilizers: List[str]
    pesticides: List[str]


class EstimatedEarnings(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    per_acre: float = Field(..., ge=0, alias="perAcre")
    total: float = Field(..., ge=0)


class CropRecommendation(BaseModel):
    """
    A single ranked crop suggestion. Field aliases follow the JSON wire
    format shared with the AI advisor and the web client.

    suitability is a 0-100 rank signal, not a probability.
    """
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., min_length=1)
    profitability: Level
    estimated_earnings: EstimatedEarnings = Field(..., alias="estimatedEarnings")
    suitability: int = Field(..., ge=0, le=100)
    growth_period: GrowthPeriod = Field(..., alias="growthPeriod")
    water_requirement: Level = Field(..., alias="waterRequirement")
    inputs: CropInputs
    market_demand: Level = Field(..., alias="marketDemand")
    tips: List[str]

    @field_validator("growth_period", mode="before")
    @classmethod
    def _parse_growth_period(cls, value):
        return GrowthPeriod.parse(value)

    @field_serializer("growth_period")
    def _serialize_growth_period(self, value: GrowthPeriod) -> str:
        return str(value)

    @property
    def earnings_per_acre(self) -> float:
        return self.estimated_earnings.per_acre

    def to_dict(self) -> Dict:
        """Wire-format dict (camelCase keys)."""
        return self.model_dump(by_alias=True)
