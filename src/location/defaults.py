"""
Agronomic defaults: infer soil type and climate class from a place name.

Pure lookups against curated state/city keyword tables, evaluated in order;
the first row whose keywords appear in the state or city wins. When nothing
matches, the most common category for Indian farmland is returned
(alluvial soil, tropical climate). Callers that need to know whether a value
was matched or defaulted should use lookup_soil_type / lookup_climate_type,
which return None on no match.
"""

import logging
from typing import List, Optional, Tuple

logger = logging.getLogger(__name__)

DEFAULT_SOIL_TYPE = "alluvial"
DEFAULT_CLIMATE_TYPE = "tropical"

# (value, state keywords, city keywords)
SOIL_TABLE: List[Tuple[str, List[str], List[str]]] = [
    ("black",
     ["maharashtra", "gujarat"],
     ["pune", "mumbai", "nagpur", "aurangabad"]),
    ("alluvial",
     ["punjab", "haryana", "uttar pradesh", "bihar"],
     ["chandigarh", "delhi"]),
    ("red",
     ["tamil nadu", "karnataka", "andhra pradesh", "telangana"],
     ["bangalore", "bengaluru", "chennai", "hyderabad"]),
    ("laterite",
     ["kerala", "goa"],
     ["kochi", "panaji"]),
    ("desert",
     ["rajasthan"],
     ["jaipur", "jodhpur"]),
    ("mountain",
     ["himachal", "uttarakhand"],
     ["shimla", "manali", "dharamshala", "dehradun"]),
]

CLIMATE_TABLE: List[Tuple[str, List[str], List[str]]] = [
    ("coastal",
     ["kerala", "goa", "karnataka", "tamil nadu"],
     ["mumbai", "chennai", "kochi", "mangalore"]),
    ("arid",
     ["rajasthan", "gujarat"],
     ["jaipur", "jodhpur", "ahmedabad"]),
    ("temperate",
     ["himachal", "uttarakhand", "kashmir"],
     ["shimla", "manali", "dehradun"]),
    ("subtropical",
     ["punjab", "haryana", "uttar pradesh", "bihar"],
     ["delhi", "chandigarh"]),
]


def _match(
    table: List[Tuple[str, List[str], List[str]]],
    city: Optional[str],
    state: Optional[str],
) -> Optional[str]:
    city_lower = (city or "").lower()
    state_lower = (state or "").lower()
    for value, states, cities in table:
        if any(s in state_lower for s in states):
            return value
        if any(c in city_lower for c in cities):
            return value
    return None


def lookup_soil_type(city: Optional[str], state: Optional[str] = None) -> Optional[str]:
    """Soil type for a place, or None if no table row matches."""
    return _match(SOIL_TABLE, city, state)


def lookup_climate_type(city: Optional[str], state: Optional[str] = None) -> Optional[str]:
    """Climate class for a place, or None if no table row matches."""
    return _match(CLIMATE_TABLE, city, state)


def soil_type_for(city: Optional[str], state: Optional[str] = None) -> str:
    """Soil type for a place, defaulting to alluvial."""
    return lookup_soil_type(city, state) or DEFAULT_SOIL_TYPE


def climate_type_for(city: Optional[str], state: Optional[str] = None) -> str:
    """Climate class for a place, defaulting to tropical."""
    return lookup_climate_type(city, state) or DEFAULT_CLIMATE_TYPE


def split_location_text(location: str) -> Tuple[str, str]:
    """
    Split free-text 'City, State' input into (city, state).
    Single-part input is used for both so either table column can match.
    """
    parts = [p.strip() for p in (location or "").split(",") if p.strip()]
    if not parts:
        return "", ""
    if len(parts) == 1:
        return parts[0], parts[0]
    return parts[0], parts[-1]
