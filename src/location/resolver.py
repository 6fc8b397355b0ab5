"""
Location resolver: converts GPS coordinates into an administrative location
(city / district / state / country) by trying reverse-geocoding providers in
a fixed priority order.

    1. BigDataCloud reverse geocode  - accuracy "high"
    2. Nominatim / OpenStreetMap     - accuracy "medium"
    3. Latitude-band heuristic       - accuracy "low", cannot fail

Any provider failure (network error, timeout, non-2xx, malformed payload)
is logged and the next provider is tried. GeoResolver.resolve never raises.

Also provides forward geocoding of PIN codes (offline, pgeocode) and free
text addresses (Nominatim search).
"""

import os
import re
import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

import pgeocode
import requests

from src.data.schema import (
    ACCURACY_HIGH, ACCURACY_LOW, ACCURACY_MEDIUM, Coordinates,
)

logger = logging.getLogger(__name__)

BIGDATACLOUD_REVERSE = "https://api.bigdatacloud.net/data/reverse-geocode-client"
NOMINATIM_REVERSE = "https://nominatim.openstreetmap.org/reverse"
NOMINATIM_SEARCH = "https://nominatim.openstreetmap.org/search"

DEFAULT_TIMEOUT_S = 10.0
DEFAULT_USER_AGENT = "KrishiAdvisor/1.0"

# Errors that mean "this provider is unusable for this request"
PROVIDER_ERRORS = (
    requests.exceptions.RequestException,
    ValueError, KeyError, TypeError, IndexError, AttributeError,
)


def _get_timeout() -> float:
    """Per-call HTTP timeout from PROVIDER_TIMEOUT_S."""
    try:
        return float(os.environ.get("PROVIDER_TIMEOUT_S", DEFAULT_TIMEOUT_S))
    except ValueError:
        return DEFAULT_TIMEOUT_S


def _get_user_agent() -> str:
    return os.environ.get("GEOCODER_USER_AGENT", DEFAULT_USER_AGENT)


def _text(value, default: Optional[str] = None) -> Optional[str]:
    """
    A provider field as a clean string. Missing or blank values give the
    default; any non-string value raises ValueError so the provider is
    treated as failed.
    """
    if value is None:
        return default
    if not isinstance(value, str):
        raise ValueError(f"Expected a string field, got {type(value).__name__}: {value!r:.50}")
    return value.strip() or default


@dataclass
class ResolvedLocation:
    """Structured location information."""
    latitude: float
    longitude: float
    city: str
    state: str
    country: str
    district: Optional[str] = None
    accuracy: str = ACCURACY_LOW
    source: str = ""

    @property
    def display_name(self) -> str:
        return ", ".join(filter(None, [self.city, self.district, self.state, self.country]))


# ---------- Providers ----------

class GeocodingProvider:
    """One tier of the reverse-geocoding chain."""

    name = "provider"
    accuracy = ACCURACY_LOW

    def reverse(self, lat: float, lon: float) -> Optional[ResolvedLocation]:
        raise NotImplementedError


class BigDataCloudProvider(GeocodingProvider):
    name = "BigDataCloud"
    accuracy = ACCURACY_HIGH

    def reverse(self, lat: float, lon: float) -> Optional[ResolvedLocation]:
        resp = requests.get(
            BIGDATACLOUD_REVERSE,
            params={"latitude": lat, "longitude": lon, "localityLanguage": "en"},
            timeout=_get_timeout(),
        )
        resp.raise_for_status()
        data = resp.json()
        if not isinstance(data, dict):
            raise ValueError("BigDataCloud returned a non-object payload")

        # District is one of the administrative levels, described as such
        district = None
        admin = (data.get("localityInfo") or {}).get("administrative") or []
        for item in admin:
            if "district" in (_text(item.get("description")) or "").lower():
                district = _text(item.get("name"))
                break

        return ResolvedLocation(
            latitude=lat,
            longitude=lon,
            city=_text(data.get("city")) or _text(data.get("locality"), "Unknown City"),
            state=_text(data.get("principalSubdivision"), "Unknown State"),
            country=_text(data.get("countryName"), "Unknown Country"),
            district=district,
            accuracy=self.accuracy,
            source=self.name,
        )


class NominatimProvider(GeocodingProvider):
    name = "Nominatim/OpenStreetMap"
    accuracy = ACCURACY_MEDIUM

    def reverse(self, lat: float, lon: float) -> Optional[ResolvedLocation]:
        resp = requests.get(
            NOMINATIM_REVERSE,
            params={
                "format": "json", "lat": lat, "lon": lon,
                "zoom": 10, "addressdetails": 1,
            },
            headers={"User-Agent": _get_user_agent()},
            timeout=_get_timeout(),
        )
        resp.raise_for_status()
        data = resp.json()
        if not isinstance(data, dict) or "error" in data:
            raise ValueError(f"Nominatim reverse lookup failed: {data!r:.200}")
        address = data.get("address") or {}

        return ResolvedLocation(
            latitude=lat,
            longitude=lon,
            city=(_text(address.get("city")) or _text(address.get("town"))
                  or _text(address.get("village"), "Unknown City")),
            state=_text(address.get("state"), "Unknown State"),
            country=_text(address.get("country"), "Unknown Country"),
            district=_text(address.get("state_district")),
            accuracy=self.accuracy,
            source=self.name,
        )


@dataclass(frozen=True)
class LatitudeRegion:
    name: str
    min_lat: float
    max_lat: Optional[float]
    states: Sequence[str]
    alternate: bool = False  # shares its band with another region; never chosen first


# Coarse partition of India by latitude
LATITUDE_REGIONS: List[LatitudeRegion] = [
    LatitudeRegion("Northern India", 28.0, None, ("Punjab", "Haryana", "Delhi", "Uttar Pradesh")),
    LatitudeRegion("Central India", 20.0, 28.0, ("Madhya Pradesh", "Maharashtra", "Gujarat")),
    LatitudeRegion("Southern India", 8.0, 20.0, ("Karnataka", "Tamil Nadu", "Kerala", "Andhra Pradesh")),
    LatitudeRegion("Eastern India", 20.0, 28.0, ("West Bengal", "Odisha", "Jharkhand"), alternate=True),
]
DEFAULT_REGION = LATITUDE_REGIONS[1]


def region_for_latitude(lat: float) -> LatitudeRegion:
    """Primary latitude region containing lat, Central India if none does."""
    for region in LATITUDE_REGIONS:
        if region.alternate:
            continue
        if lat >= region.min_lat and (region.max_lat is None or lat < region.max_lat):
            return region
    return DEFAULT_REGION


class LatitudeHeuristicProvider(GeocodingProvider):
    """Terminal tier: a representative state for the latitude band."""

    name = "Latitude heuristic"
    accuracy = ACCURACY_LOW

    def reverse(self, lat: float, lon: float) -> ResolvedLocation:
        region = region_for_latitude(lat)
        return ResolvedLocation(
            latitude=lat,
            longitude=lon,
            city="Location Area",
            state=region.states[0],
            country="India",
            district=None,
            accuracy=self.accuracy,
            source=self.name,
        )


DEFAULT_PROVIDERS = (BigDataCloudProvider, NominatimProvider)


class GeoResolver:
    """
    Resolve coordinates through an ordered provider chain.

    Usage:
        resolver = GeoResolver()
        loc = resolver.resolve(18.52, 73.85)
        loc.state, loc.accuracy   # 'Maharashtra', 'high'
    """

    def __init__(self, providers: Optional[Sequence[GeocodingProvider]] = None):
        if providers is None:
            providers = [cls() for cls in DEFAULT_PROVIDERS]
        self.providers = list(providers)
        self.fallback = LatitudeHeuristicProvider()

    def resolve(self, lat: float, lon: float) -> ResolvedLocation:
        """Best-effort reverse geocode. Never raises."""
        try:
            coords = Coordinates(lat, lon)
        except (TypeError, ValueError) as e:
            logger.warning("Invalid coordinates (%s, %s): %s; using heuristic", lat, lon, e)
            return self._heuristic(lat, lon)

        for provider in self.providers:
            try:
                result = provider.reverse(coords.latitude, coords.longitude)
                if result is not None:
                    logger.info(
                        "Resolved (%.4f, %.4f) via %s: %s",
                        coords.latitude, coords.longitude, provider.name, result.display_name,
                    )
            except PROVIDER_ERRORS as e:
                logger.warning("Geocoding via %s failed: %s", provider.name, e)
                continue
            if result is not None:
                return result
            logger.info("Geocoding via %s returned nothing; trying next", provider.name)

        return self._heuristic(coords.latitude, coords.longitude)

    def resolve_coordinates(self, coords: Coordinates) -> ResolvedLocation:
        return self.resolve(coords.latitude, coords.longitude)

    def _heuristic(self, lat, lon) -> ResolvedLocation:
        try:
            lat_f = float(lat)
        except (TypeError, ValueError):
            lat_f = 0.0
        try:
            lon_f = float(lon)
        except (TypeError, ValueError):
            lon_f = 0.0
        return self.fallback.reverse(lat_f, lon_f)


# ---------- Forward geocoding ----------

_nomi = None


def _postal_lookup():
    """Lazily build the India postal code index (downloads ~2MB on first use)."""
    global _nomi
    if _nomi is None:
        _nomi = pgeocode.Nominatim("IN")
    return _nomi


def is_pin_code(text: str) -> bool:
    """Check if the string looks like an Indian PIN code (6 digits)."""
    return bool(re.match(r"^\d{6}$", text.strip()))


def _geocode_pin(pin_code: str) -> Optional[Coordinates]:
    """Coordinates of an Indian PIN code from the offline pgeocode dataset."""
    result = _postal_lookup().query_postal_code(pin_code)
    # pgeocode returns NaN for unknown codes
    if result is None or str(getattr(result, "latitude", "nan")) == "nan":
        return None
    return Coordinates(float(result.latitude), float(result.longitude))


def _search_address(address: str) -> Optional[Coordinates]:
    resp = requests.get(
        NOMINATIM_SEARCH,
        params={"format": "json", "q": address, "limit": 1, "countrycodes": "in"},
        headers={"User-Agent": _get_user_agent()},
        timeout=_get_timeout(),
    )
    resp.raise_for_status()
    data = resp.json()
    if not data:
        return None
    return Coordinates(float(data[0]["lat"]), float(data[0]["lon"]))


def geocode_address(
    address: str,
    resolver: Optional[GeoResolver] = None,
) -> Optional[ResolvedLocation]:
    """
    Resolve a PIN code or free-text address to a ResolvedLocation.

    Returns None when the address cannot be found; never raises.
    """
    address = (address or "").strip()
    if not address:
        return None

    try:
        if is_pin_code(address):
            logger.info("Resolving PIN code: %s (offline)", address)
            coords = _geocode_pin(address)
        else:
            logger.info("Searching address: %s", address)
            coords = _search_address(address)
    except PROVIDER_ERRORS as e:
        logger.warning("Address geocoding failed for '%s': %s", address, e)
        return None

    if coords is None:
        logger.info("No match for address '%s'", address)
        return None

    return (resolver or GeoResolver()).resolve_coordinates(coords)
