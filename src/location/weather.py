"""
Weather resolver: current conditions plus a 5-day rainfall outlook for a point.

Provider tiers, tried in order:
    1. OpenWeatherMap current + 5-day/3-hour forecast (needs OPENWEATHER_API_KEY)
    2. Open-Meteo forecast API (free, no key)
    3. Deterministic estimator from latitude and calendar month

Provider-sourced snapshots are trusted; estimator snapshots carry
estimated=True and say so in their conditions text. WeatherResolver.resolve
never raises.

API docs:
    https://openweathermap.org/api
    https://open-meteo.com/en/docs
"""

import os
import logging
from dataclasses import asdict, dataclass
from datetime import date
from typing import Dict, Optional, Sequence

import requests

from src.data.schema import Coordinates

logger = logging.getLogger(__name__)

OPENWEATHER_CURRENT = "https://api.openweathermap.org/data/2.5/weather"
OPENWEATHER_FORECAST = "https://api.openweathermap.org/data/2.5/forecast"
OPEN_METEO_FORECAST = "https://api.open-meteo.com/v1/forecast"

DEFAULT_TIMEOUT_S = 10.0

PROVIDER_ERRORS = (
    requests.exceptions.RequestException,
    ValueError, KeyError, TypeError, IndexError, AttributeError,
)

ESTIMATED_CONDITIONS = "Clear conditions (estimated)"


def _get_timeout() -> float:
    try:
        return float(os.environ.get("PROVIDER_TIMEOUT_S", DEFAULT_TIMEOUT_S))
    except ValueError:
        return DEFAULT_TIMEOUT_S


def _get_api_key() -> Optional[str]:
    """Get OpenWeatherMap API key from environment."""
    return os.environ.get("OPENWEATHER_API_KEY")


def _num(value, default: float = 0.0) -> float:
    """Coerce a possibly-missing numeric field, defaulting instead of failing."""
    if value is None:
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _str(value) -> str:
    """Coerce a possibly-missing text field to a string, empty if absent."""
    if value is None:
        return ""
    return str(value).strip()


@dataclass
class WeatherSnapshot:
    """Current weather and short-term outlook for one point."""
    temperature_current: float
    temperature_min: float
    temperature_max: float
    humidity_pct: float
    rainfall_next_5_days_mm: float
    conditions: str
    wind_speed: float
    soil_temperature_estimate: Optional[float] = None
    estimated: bool = False
    source: str = ""

    def to_dict(self) -> Dict:
        return asdict(self)


# ---------- Providers ----------

class WeatherProvider:
    """One tier of the weather chain."""

    name = "provider"

    def fetch(self, lat: float, lon: float) -> Optional[WeatherSnapshot]:
        raise NotImplementedError


class OpenWeatherMapProvider(WeatherProvider):
    name = "OpenWeatherMap"

    def fetch(self, lat: float, lon: float) -> Optional[WeatherSnapshot]:
        api_key = _get_api_key()
        if not api_key:
            logger.info("OPENWEATHER_API_KEY not set; skipping OpenWeatherMap")
            return None

        params = {"lat": lat, "lon": lon, "appid": api_key, "units": "metric"}
        resp = requests.get(OPENWEATHER_CURRENT, params=params, timeout=_get_timeout())
        resp.raise_for_status()
        data = resp.json()

        main = data.get("main") or {}
        if "temp" not in main:
            raise ValueError("OpenWeatherMap payload has no current temperature")
        conditions = _str((data.get("weather") or [{}])[0].get("description"))
        temp = round(_num(main.get("temp")))

        return WeatherSnapshot(
            temperature_current=temp,
            temperature_min=round(_num(main.get("temp_min"), temp)),
            temperature_max=round(_num(main.get("temp_max"), temp)),
            humidity_pct=_num(main.get("humidity")),
            rainfall_next_5_days_mm=self._forecast_rainfall(params),
            conditions=conditions,
            wind_speed=_num((data.get("wind") or {}).get("speed")),
            soil_temperature_estimate=round(_num(main.get("temp")) - 2),
            source=self.name,
        )

    def _forecast_rainfall(self, params: Dict) -> float:
        """Sum 3-hour rain volumes across the forecast; 0 if unavailable."""
        try:
            resp = requests.get(OPENWEATHER_FORECAST, params=params, timeout=_get_timeout())
            resp.raise_for_status()
            entries = resp.json().get("list") or []
        except PROVIDER_ERRORS as e:
            logger.warning("OpenWeatherMap forecast failed: %s", e)
            return 0.0

        total = 0.0
        for item in entries:
            rain = item.get("rain") if isinstance(item, dict) else None
            if isinstance(rain, dict):
                total += _num(rain.get("3h"))
        return round(total, 1)


# WMO weather interpretation codes used by Open-Meteo
WMO_CODES = {
    0: "clear sky",
    1: "mainly clear", 2: "partly cloudy", 3: "overcast",
    45: "fog", 48: "depositing rime fog",
    51: "light drizzle", 53: "moderate drizzle", 55: "dense drizzle",
    61: "slight rain", 63: "moderate rain", 65: "heavy rain",
    71: "slight snow fall", 73: "moderate snow fall", 75: "heavy snow fall",
    80: "slight rain showers", 81: "moderate rain showers", 82: "violent rain showers",
    95: "thunderstorm", 96: "thunderstorm with hail", 99: "thunderstorm with heavy hail",
}


class OpenMeteoProvider(WeatherProvider):
    name = "Open-Meteo"

    def fetch(self, lat: float, lon: float) -> Optional[WeatherSnapshot]:
        params = {
            "latitude": lat,
            "longitude": lon,
            "current": ",".join([
                "temperature_2m",
                "relative_humidity_2m",
                "wind_speed_10m",
                "weather_code",
            ]),
            "daily": ",".join([
                "temperature_2m_max",
                "temperature_2m_min",
                "precipitation_sum",
            ]),
            "forecast_days": 5,
            "wind_speed_unit": "ms",
            "timezone": "auto",
        }
        resp = requests.get(OPEN_METEO_FORECAST, params=params, timeout=_get_timeout())
        resp.raise_for_status()
        data = resp.json()

        current = data.get("current") or {}
        if current.get("temperature_2m") is None:
            raise ValueError("Open-Meteo payload has no current temperature")
        daily = data.get("daily") or {}

        temp = round(_num(current.get("temperature_2m")))
        # Filter None values, as the archive API does
        tmax = [t for t in daily.get("temperature_2m_max", []) if t is not None]
        tmin = [t for t in daily.get("temperature_2m_min", []) if t is not None]
        precip = [p for p in daily.get("precipitation_sum", []) if p is not None]
        code = current.get("weather_code")

        return WeatherSnapshot(
            temperature_current=temp,
            temperature_min=round(tmin[0]) if tmin else temp,
            temperature_max=round(tmax[0]) if tmax else temp,
            humidity_pct=_num(current.get("relative_humidity_2m")),
            rainfall_next_5_days_mm=round(sum(precip), 1),
            conditions=WMO_CODES.get(code, ""),
            wind_speed=_num(current.get("wind_speed_10m")),
            soil_temperature_estimate=temp - 2,
            source=self.name,
        )


# ---------- Estimator ----------

def estimate_temperature(lat: float, month: int) -> float:
    """Rough air temperature (C) from latitude and calendar month."""
    temp = 25.0
    # Higher latitude is cooler
    if lat > 28:
        temp -= 5
    elif lat < 15:
        temp += 5

    if month == 12 or month <= 2:      # winter
        temp -= 8
    elif 3 <= month <= 5:              # summer
        temp += 5
    elif 6 <= month <= 9:              # monsoon
        temp += 2

    return max(10.0, min(45.0, temp))


def estimate_humidity(lat: float) -> float:
    """Relative humidity (%) by latitude band; the south is more humid."""
    if lat < 20:
        return 70.0
    if lat > 28:
        return 50.0
    return 60.0


def estimate_weather(lat: float, month: int) -> WeatherSnapshot:
    """Deterministic snapshot for when every provider has failed."""
    temp = estimate_temperature(lat, month)
    return WeatherSnapshot(
        temperature_current=temp,
        temperature_min=temp - 5,
        temperature_max=temp + 5,
        humidity_pct=estimate_humidity(lat),
        rainfall_next_5_days_mm=0.0,
        conditions=ESTIMATED_CONDITIONS,
        wind_speed=2.5,
        soil_temperature_estimate=temp - 2,
        estimated=True,
        source="estimate",
    )


DEFAULT_PROVIDERS = (OpenWeatherMapProvider, OpenMeteoProvider)


class WeatherResolver:
    """
    Resolve weather through an ordered provider chain, ending in the estimator.

    Usage:
        snapshot = WeatherResolver().resolve(18.52, 73.85)
        snapshot.estimated   # False when a provider answered
    """

    def __init__(self, providers: Optional[Sequence[WeatherProvider]] = None):
        if providers is None:
            providers = [cls() for cls in DEFAULT_PROVIDERS]
        self.providers = list(providers)

    def resolve(self, lat: float, lon: float, on: Optional[date] = None) -> WeatherSnapshot:
        """Best-effort weather snapshot. Never raises."""
        month = (on or date.today()).month
        try:
            coords = Coordinates(lat, lon)
        except (TypeError, ValueError) as e:
            logger.warning("Invalid coordinates (%s, %s): %s; estimating weather", lat, lon, e)
            return estimate_weather(_num(lat), month)

        for provider in self.providers:
            try:
                snapshot = provider.fetch(coords.latitude, coords.longitude)
            except PROVIDER_ERRORS as e:
                logger.warning("Weather via %s failed: %s", provider.name, e)
                continue
            if snapshot is not None:
                logger.info(
                    "Weather via %s: %.0fC, %.0f%% humidity, %.1fmm rain next 5 days",
                    provider.name, snapshot.temperature_current,
                    snapshot.humidity_pct, snapshot.rainfall_next_5_days_mm,
                )
                return snapshot

        logger.info("All weather providers failed; estimating from latitude %.2f", coords.latitude)
        return estimate_weather(coords.latitude, month)

    def resolve_coordinates(self, coords: Coordinates, on: Optional[date] = None) -> WeatherSnapshot:
        return self.resolve(coords.latitude, coords.longitude, on=on)
