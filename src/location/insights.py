"""
Agricultural reading of a weather snapshot: how suitable conditions are for
the region, whether to irrigate, pest pressure and planting conditions.
"""

from typing import Dict

from src.location.weather import WeatherSnapshot

# (min_temp, max_temp, min_humidity) for "excellent", then (min, max) for "good"
REGIONAL_COMFORT = {
    "northern": ((15, 30, 40), (10, 35)),
    "central": ((20, 35, 50), (15, 40)),
    "southern": ((22, 32, 60), (18, 38)),
}


def _band(lat: float) -> str:
    if lat > 28:
        return "northern"
    if lat > 20:
        return "central"
    return "southern"


def season_suitability(weather: WeatherSnapshot, lat: float) -> str:
    (lo, hi, min_humidity), (good_lo, good_hi) = REGIONAL_COMFORT[_band(lat)]
    temp = weather.temperature_current
    if lo <= temp <= hi and weather.humidity_pct >= min_humidity:
        return "excellent"
    if good_lo <= temp <= good_hi:
        return "good"
    return "moderate"


def irrigation_advice(weather: WeatherSnapshot) -> str:
    rainfall = weather.rainfall_next_5_days_mm
    humidity = weather.humidity_pct
    if rainfall > 20:
        return "reduce_irrigation"
    if rainfall > 5 and humidity > 70:
        return "minimal_irrigation"
    if humidity < 40:
        return "increase_irrigation"
    return "normal_irrigation"


def pest_risk_level(weather: WeatherSnapshot) -> str:
    temp, humidity = weather.temperature_current, weather.humidity_pct
    if temp > 30 and humidity > 80:
        return "high"
    if temp > 25 and humidity > 60:
        return "medium"
    return "low"


def planting_conditions(weather: WeatherSnapshot) -> str:
    temp = weather.temperature_current
    conditions = (weather.conditions or "").lower()
    rainy = any(w in conditions for w in ("rain", "drizzle", "shower"))
    if rainy and temp > 15:
        return "ideal_for_planting"
    if 18 <= temp <= 30:
        return "good_for_planting"
    if temp < 10 or temp > 40:
        return "poor_for_planting"
    return "moderate_for_planting"


def agricultural_insights(weather: WeatherSnapshot, lat: float) -> Dict[str, str]:
    return {
        "season_suitability": season_suitability(weather, lat),
        "irrigation_recommendation": irrigation_advice(weather),
        "pest_risk_level": pest_risk_level(weather),
        "planting_conditions": planting_conditions(weather),
    }
