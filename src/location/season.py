"""
Season clock: maps a calendar date to the active Indian cropping season.

    Kharif - June to October (monsoon)
    Rabi   - November to March (winter)
    Zaid   - April to May (summer)

Every month belongs to exactly one season.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Optional, Tuple

from src.data.schema import KHARIF, RABI, ZAID


@dataclass(frozen=True)
class SeasonInfo:
    """Descriptive metadata for one season."""
    season: str
    month_range: Tuple[int, int]
    months: str
    description: str
    typical_crops: List[str] = field(default_factory=list)


SEASON_TABLE: Dict[str, SeasonInfo] = {
    KHARIF: SeasonInfo(
        season=KHARIF,
        month_range=(6, 10),
        months="June - October",
        description="Monsoon season - ideal for rain-fed crops",
        typical_crops=["Rice", "Cotton", "Sugarcane", "Pulses"],
    ),
    RABI: SeasonInfo(
        season=RABI,
        month_range=(11, 3),
        months="November - March",
        description="Winter season - perfect for cool weather crops",
        typical_crops=["Wheat", "Barley", "Peas", "Gram"],
    ),
    ZAID: SeasonInfo(
        season=ZAID,
        month_range=(4, 5),
        months="April - May",
        description="Summer season - suitable for irrigated crops",
        typical_crops=["Watermelon", "Cucumber", "Fodder crops"],
    ),
}

# Month (1-12) -> season
MONTH_TO_SEASON: Dict[int, str] = {
    1: RABI, 2: RABI, 3: RABI,
    4: ZAID, 5: ZAID,
    6: KHARIF, 7: KHARIF, 8: KHARIF, 9: KHARIF, 10: KHARIF,
    11: RABI, 12: RABI,
}

NEXT_SEASON: Dict[str, str] = {KHARIF: RABI, RABI: ZAID, ZAID: KHARIF}


def season_for_month(month: int) -> SeasonInfo:
    """Season active in a 1-indexed calendar month."""
    if month not in MONTH_TO_SEASON:
        raise ValueError(f"Month {month} out of range [1, 12]")
    return SEASON_TABLE[MONTH_TO_SEASON[month]]


def current_season(on: Optional[date] = None) -> SeasonInfo:
    """Season active on the given date (default: today, local time)."""
    on = on or date.today()
    return season_for_month(on.month)


def next_season(on: Optional[date] = None) -> SeasonInfo:
    """The season following the one active on the given date."""
    return SEASON_TABLE[NEXT_SEASON[current_season(on).season]]


def season_info(season: str) -> SeasonInfo:
    """Metadata for a canonical season name."""
    return SEASON_TABLE[season]
