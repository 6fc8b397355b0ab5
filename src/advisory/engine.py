"""
Advisory engine: turns a FarmContext into 1-3 ranked crop recommendations.

Every AdvisoryResult reports the mode that produced it:
    delegated          - the AI advisor returned a valid structured list
    delegated_failure  - the advisor was asked but its reply was unusable
    deterministic      - recommendations came from the static rule tables

A delegated failure always degrades to deterministic mode; only a failure of
the rule tables themselves raises AdvisoryError.

Ranking: suitability descending, then profitability (high > medium > low),
then original order.
"""

import re
import json
import logging
from dataclasses import dataclass
from typing import List, Optional

from pydantic import TypeAdapter

from src.advisory.advisor import AdvisorError, MODE_STRUCTURED, MODE_TEXT, build_request
from src.advisory.rules import band_candidates, crop_profile, fallback_recommendations
from src.data.schema import TIER_ORDER, CropRecommendation, FarmContext

logger = logging.getLogger(__name__)

MODE_DELEGATED = "delegated"
MODE_DELEGATED_FAILURE = "delegated_failure"
MODE_DETERMINISTIC = "deterministic"

MAX_RECOMMENDATIONS = 3

# Suitability adjustments for latitude-band candidates
POSITION_PENALTY = 4
SOIL_MATCH_BONUS = 5
SOIL_MISMATCH_PENALTY = 5
TEMP_FIT_BONUS = 3
TEMP_MISFIT_PENALTY = 5
DRY_SPELL_PENALTY = 3

_RECOMMENDATION_LIST = TypeAdapter(List[CropRecommendation])
_CODE_FENCE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)


class AdvisoryError(RuntimeError):
    """Neither the advisor nor the rule tables produced recommendations."""


@dataclass
class AdvisoryResult:
    """Outcome of one advisory run, tagged with the mode that produced it."""
    mode: str
    recommendations: List[CropRecommendation]
    error: Optional[str] = None
    advice: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return bool(self.recommendations)


def rank_recommendations(recs: List[CropRecommendation]) -> List[CropRecommendation]:
    """Sort by suitability desc, then profitability tier; stable for ties."""
    return sorted(recs, key=lambda r: (-r.suitability, TIER_ORDER[r.profitability]))


def parse_recommendations(text: str) -> List[CropRecommendation]:
    """
    Strictly parse an advisor reply as a JSON array of recommendations.

    Raises:
        AdvisorError: on malformed JSON, a non-array or empty array, or any
            entry missing a required field. Nothing is partially accepted.
    """
    body = _CODE_FENCE.sub("", text.strip())
    try:
        data = json.loads(body)
    except ValueError as e:
        raise AdvisorError(f"Invalid JSON response from advisor: {e}") from e

    if not isinstance(data, list) or not data:
        raise AdvisorError("Advisor response is not a non-empty JSON array")

    try:
        return _RECOMMENDATION_LIST.validate_python(data)
    except ValueError as e:
        raise AdvisorError(f"Advisor recommendations failed validation: {e}") from e


def _context_temperature(context: FarmContext) -> Optional[float]:
    """Mean of the first number(s) in the farmer's temperature text, else live weather."""
    numbers = re.findall(r"\d+(?:\.\d+)?", context.temperature_text or "")
    if numbers:
        values = [float(n) for n in numbers[:2]]
        return sum(values) / len(values)
    if context.weather is not None:
        return float(context.weather.temperature_current)
    return None


def score_candidate(base: int, position: int, name: str, context: FarmContext) -> int:
    """Suitability for a latitude-band candidate, clamped to 0-100."""
    score = base - POSITION_PENALTY * position
    profile = crop_profile(name)
    if profile is None:
        return max(0, min(100, score))

    soil = (context.soil_type or "").lower()
    if soil:
        if any(s in soil for s in profile["preferred_soils"]):
            score += SOIL_MATCH_BONUS
        elif any(s in soil for s in profile["poor_soils"]):
            score -= SOIL_MISMATCH_PENALTY

    temp = _context_temperature(context)
    if temp is not None:
        lo, hi = profile["temp_range"]
        score += TEMP_FIT_BONUS if lo <= temp <= hi else -TEMP_MISFIT_PENALTY

    weather = context.weather
    if (weather is not None and profile["waterRequirement"] == "high"
            and weather.humidity_pct < 50 and weather.rainfall_next_5_days_mm < 5):
        score -= DRY_SPELL_PENALTY

    return max(0, min(100, score))


def _candidate_recommendation(
    name: str, position: int, template: CropRecommendation, context: FarmContext,
) -> CropRecommendation:
    """Season template economics + crop profile agronomy + context score."""
    data = template.to_dict()
    data["name"] = name
    profile = crop_profile(name)
    if profile is not None:
        for key in ("growthPeriod", "waterRequirement", "inputs", "tips"):
            data[key] = profile[key]
    data["suitability"] = score_candidate(template.suitability, position, name, context)
    return CropRecommendation.model_validate(data)


class AdvisoryEngine:
    """
    Produce ranked crop recommendations for a farm context.

    Usage:
        engine = AdvisoryEngine(advisor=get_advisor())
        result = engine.advise(context)
        result.mode, result.recommendations
    """

    def __init__(self, advisor=None):
        self.advisor = advisor

    def recommend(self, context: FarmContext) -> List[CropRecommendation]:
        return self.advise(context).recommendations

    def advise(self, context: FarmContext) -> AdvisoryResult:
        if self.advisor is None:
            return self.deterministic(context)

        delegated = self.delegate(context)
        if delegated.mode == MODE_DELEGATED and delegated.succeeded:
            return delegated

        result = self.deterministic(context)
        result.error = delegated.error
        result.advice = delegated.advice
        return result

    def delegate(self, context: FarmContext) -> AdvisoryResult:
        """Ask the advisor. Never raises; failures come back tagged."""
        response_mode = getattr(self.advisor, "response_mode", MODE_STRUCTURED)
        request = build_request(context, response_mode)
        try:
            text = self.advisor.complete(request)
            if response_mode == MODE_TEXT:
                return AdvisoryResult(mode=MODE_DELEGATED, recommendations=[], advice=text.strip())
            recs = parse_recommendations(text)
        except AdvisorError as e:
            logger.warning("AI advisor failed; falling back to rule tables: %s", e)
            return AdvisoryResult(mode=MODE_DELEGATED_FAILURE, recommendations=[], error=str(e))
        except Exception as e:
            logger.exception("Unexpected AI advisor error; falling back to rule tables")
            return AdvisoryResult(
                mode=MODE_DELEGATED_FAILURE, recommendations=[],
                error=f"Unexpected advisor error: {e}",
            )

        logger.info("AI advisor returned %d recommendations", len(recs))
        return AdvisoryResult(
            mode=MODE_DELEGATED,
            recommendations=rank_recommendations(recs)[:MAX_RECOMMENDATIONS],
        )

    def deterministic(self, context: FarmContext) -> AdvisoryResult:
        """Recommendations from the static season table and latitude bands."""
        try:
            recs = self._rule_recommendations(context)
        except (KeyError, ValueError) as e:
            raise AdvisoryError(f"Rule tables could not resolve season '{context.season}': {e}") from e
        if not recs:
            raise AdvisoryError(f"No rule-table recommendations for season '{context.season}'")
        return AdvisoryResult(mode=MODE_DETERMINISTIC, recommendations=recs)

    def _rule_recommendations(self, context: FarmContext) -> List[CropRecommendation]:
        templates = fallback_recommendations(context.season)
        names = []
        if context.coordinates is not None:
            names = band_candidates(context.coordinates.latitude, context.season)

        if not names:
            return rank_recommendations(templates)[:MAX_RECOMMENDATIONS]

        logger.info("Latitude-band candidates for %s: %s", context.season, ", ".join(names))
        recs = [
            _candidate_recommendation(name, i, templates[0], context)
            for i, name in enumerate(names)
        ]
        return rank_recommendations(recs)[:MAX_RECOMMENDATIONS]
