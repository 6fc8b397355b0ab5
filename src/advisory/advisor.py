"""
Client for the hosted AI advisor (any OpenAI-compatible chat completions
endpoint; Groq by default).

The advisor runs in one of two response modes per deployment:
    structured - replies with a JSON array of crop recommendations
    text       - replies with free-text advice for display only

Optional: without GROQ_API_KEY no advisor is built and the advisory engine
uses its rule tables alone.
"""

import os
import logging
from dataclasses import dataclass
from typing import Optional

import openai

from src.data.schema import FarmContext

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.groq.com/openai/v1"
DEFAULT_MODEL = "llama-3.1-70b-versatile"

MODE_STRUCTURED = "structured"
MODE_TEXT = "text"
RESPONSE_MODES = (MODE_STRUCTURED, MODE_TEXT)

SYSTEM_ROLE = (
    "You are an expert agricultural advisor with deep knowledge of Indian "
    "farming practices, crop suitability, and market conditions. Provide "
    "accurate, location-specific crop recommendations based on scientific "
    "agricultural principles."
)

STRUCTURED_INSTRUCTIONS = """Please respond with a JSON array of 2-3 crop recommendations in this exact format:
[
  {
    "name": "Crop Name",
    "profitability": "high/medium/low",
    "estimatedEarnings": {
      "perAcre": 45000,
      "total": 45000
    },
    "suitability": 92,
    "growthPeriod": "120-140 days",
    "waterRequirement": "high/medium/low",
    "inputs": {
      "seeds": "20-25 kg per acre",
      "fertilizers": ["NPK 10:26:26", "Urea", "DAP"],
      "pesticides": ["Carbendazim", "Chlorpyrifos"]
    },
    "marketDemand": "high/medium/low",
    "tips": [
      "Specific cultivation tip 1",
      "Specific cultivation tip 2",
      "Specific cultivation tip 3"
    ]
  }
]

Consider the season, soil type, climate, and location to provide region-specific recommendations with accurate market prices in INR. Focus on crops that are well-suited to the given conditions and have good market demand. Make sure earnings are realistic based on current Indian agricultural market prices.

Respond ONLY with the JSON array, no additional text."""

TEXT_INSTRUCTIONS = """Write practical advice for this farmer in plain text: the 2-3 best crops for these conditions, why each suits them, expected earnings per acre in INR, key inputs, and the most important cultivation tips. Keep it under 300 words."""


def _get_api_key() -> Optional[str]:
    """Get the advisor API key from environment."""
    return os.environ.get("GROQ_API_KEY")


def get_response_mode() -> str:
    mode = os.environ.get("ADVISOR_RESPONSE_MODE", MODE_STRUCTURED).strip().lower()
    if mode not in RESPONSE_MODES:
        logger.warning("Unknown ADVISOR_RESPONSE_MODE '%s'; using '%s'", mode, MODE_STRUCTURED)
        return MODE_STRUCTURED
    return mode


class AdvisorError(RuntimeError):
    """The advisor could not produce a usable reply."""


@dataclass
class AdvisorRequest:
    system_role: str
    user_prompt: str
    temperature: float = 0.7
    max_tokens: int = 2000


def build_request(context: FarmContext, response_mode: str = MODE_STRUCTURED) -> AdvisorRequest:
    """Interpolate the farm context into the advisor prompt."""
    lines = [
        "Based on the following farming conditions, recommend the most profitable "
        "and suitable crops to cultivate.",
        "",
        "Farming Conditions:",
        f"- Location: {context.location}",
        f"- Season: {context.season}",
        f"- Soil Type: {context.soil_type}",
        f"- Climate: {context.climate_type}",
        f"- Temperature: {context.temperature_text}",
        f"- Additional Info: {context.additional_notes}",
    ]
    if context.coordinates is not None:
        lines.append(
            f"- GPS Coordinates: {context.coordinates.latitude}, {context.coordinates.longitude}"
        )
    weather = context.weather
    if weather is not None:
        label = " (estimated)" if weather.estimated else ""
        lines.append(
            f"- Current Weather{label}: {weather.temperature_current}C, "
            f"{weather.humidity_pct}% humidity, {weather.conditions}, "
            f"{weather.rainfall_next_5_days_mm} mm rain expected over 5 days"
        )
    lines.append("")
    lines.append(STRUCTURED_INSTRUCTIONS if response_mode == MODE_STRUCTURED else TEXT_INSTRUCTIONS)
    return AdvisorRequest(system_role=SYSTEM_ROLE, user_prompt="\n".join(lines))


class ChatAdvisor:
    """
    AI advisor backed by an OpenAI-compatible chat completions API.

    Usage:
        advisor = ChatAdvisor(api_key="...")
        text = advisor.complete(build_request(context))
    """

    def __init__(
        self,
        api_key: str,
        model: Optional[str] = None,
        base_url: Optional[str] = None,
        response_mode: str = MODE_STRUCTURED,
        timeout: float = 30.0,
    ):
        self.model = model or os.environ.get("ADVISOR_MODEL", DEFAULT_MODEL)
        self.response_mode = response_mode
        self.client = openai.OpenAI(
            api_key=api_key,
            base_url=base_url or os.environ.get("ADVISOR_BASE_URL", DEFAULT_BASE_URL),
            timeout=timeout,
        )

    def complete(self, request: AdvisorRequest) -> str:
        """Send one request and return the reply text."""
        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": request.system_role},
                    {"role": "user", "content": request.user_prompt},
                ],
                temperature=request.temperature,
                max_tokens=request.max_tokens,
            )
        except openai.OpenAIError as e:
            raise AdvisorError(f"Advisor API error: {e}") from e

        try:
            content = response.choices[0].message.content
        except (AttributeError, IndexError, TypeError) as e:
            raise AdvisorError(f"No response from advisor: {e}") from e
        if not isinstance(content, str) or not content.strip():
            raise AdvisorError("Empty response from advisor")
        return content


def get_advisor() -> Optional[ChatAdvisor]:
    """Advisor configured from the environment, or None if no key is set."""
    api_key = _get_api_key()
    if not api_key:
        logger.info("GROQ_API_KEY not set; AI advisor disabled")
        return None
    return ChatAdvisor(api_key=api_key, response_mode=get_response_mode())
