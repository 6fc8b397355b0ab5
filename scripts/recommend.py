"""
One-command crop advisory: describe a farm, get ranked crop recommendations.

Usage:
    python scripts/recommend.py --location "Pune, Maharashtra"
    python scripts/recommend.py --location "Pune, Maharashtra" --coordinates 18.5,73.8
    python scripts/recommend.py --location Ludhiana --season rabi --soil alluvial --json
    python scripts/recommend.py --location 411001          # PIN code, geocoded offline
"""

import argparse
import json
import logging
import sys
from dataclasses import asdict
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from src.advisory.advisor import get_advisor
from src.advisory.engine import AdvisoryEngine, AdvisoryError
from src.data.schema import SEASONS, Coordinates
from src.location.pipeline import AdvisoryPipeline, AdvisoryRequest, PipelineResult
from src.location.resolver import is_pin_code, geocode_address


def print_banner():
    print("=" * 60)
    print("   CROP ADVISORY")
    print("   Describe your farm -> Get top-3 crop recommendations")
    print("=" * 60)
    print()


def print_results(result: PipelineResult):
    """Pretty-print a pipeline result."""
    ctx = result.context

    print()
    print("-" * 60)
    print("  LOCATION")
    print("-" * 60)
    print(f"  Entered     : {ctx.location}")
    if ctx.coordinates is not None:
        print(f"  Coordinates : {ctx.coordinates.latitude}, {ctx.coordinates.longitude}")
    if result.location is not None:
        loc = result.location
        print(f"  Resolved    : {loc.display_name}")
        print(f"  Accuracy    : {loc.accuracy} ({loc.source})")

    if result.weather is not None:
        w = result.weather
        print()
        print("-" * 60)
        print("  WEATHER" + ("  (estimated)" if w.estimated else ""))
        print("-" * 60)
        print(f"  Temperature : {w.temperature_current:.0f} C "
              f"(min {w.temperature_min:.0f}, max {w.temperature_max:.0f})")
        print(f"  Humidity    : {w.humidity_pct:.0f} %")
        print(f"  Rain 5 days : {w.rainfall_next_5_days_mm} mm")
        print(f"  Conditions  : {w.conditions}")
        for key, value in (result.insights or {}).items():
            print(f"  {key.replace('_', ' ').capitalize():<26}: {value.replace('_', ' ')}")

    print()
    print("-" * 60)
    print("  FARM CONTEXT")
    print("-" * 60)
    print(f"  Season      : {ctx.season} ({result.season_info.months})")
    print(f"  Soil        : {ctx.soil_type}")
    print(f"  Climate     : {ctx.climate_type}")
    print(f"  Temperature : {ctx.temperature_text or '?'}")

    print()
    print("=" * 60)
    print(f"  TOP CROP RECOMMENDATIONS  [{result.advisory.mode}]")
    print("=" * 60)
    for i, rec in enumerate(result.recommendations, 1):
        print()
        print(f"  #{i}  {rec.name.upper()}")
        print(f"      Suitability   : {rec.suitability}/100")
        print(f"      Profitability : {rec.profitability}  "
              f"(~Rs {rec.earnings_per_acre:,.0f} per acre)")
        print(f"      Growth period : {rec.growth_period}")
        print(f"      Water need    : {rec.water_requirement}")
        print(f"      Seed rate     : {rec.inputs.seed_rate}")
        print(f"      Fertilizers   : {', '.join(rec.inputs.fertilizers)}")
        print(f"      Pesticides    : {', '.join(rec.inputs.pesticides)}")
        print(f"      Market demand : {rec.market_demand}")
        for tip in rec.tips:
            print(f"        - {tip}")

    if result.advisory.advice:
        print()
        print("-" * 60)
        print("  ADVISOR NOTES")
        print("-" * 60)
        print(result.advisory.advice)

    print()
    print("-" * 60)
    print("  Data sources:", " | ".join(result.data_sources))
    print("-" * 60)
    for w in result.warnings:
        print(f"  [!] {w}")
    print()


def to_json(result: PipelineResult) -> dict:
    return {
        "recommendations": [r.to_dict() for r in result.recommendations],
        "mode": result.advisory.mode,
        "season": result.context.season,
        "soil_type": result.context.soil_type,
        "climate_type": result.context.climate_type,
        "location": asdict(result.location) if result.location else None,
        "weather": result.weather.to_dict() if result.weather else None,
        "insights": result.insights,
        "advice": result.advisory.advice,
        "data_sources": result.data_sources,
        "warnings": result.warnings,
    }


def main():
    parser = argparse.ArgumentParser(
        description="Crop recommendations by location and season",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--location", "-l", required=True,
                        help="Place name ('Pune, Maharashtra') or 6-digit PIN code")
    parser.add_argument("--season", default=None,
                        help=f"One of {', '.join(SEASONS)} (default: current season)")
    parser.add_argument("--coordinates", default=None,
                        help="lat,lon (e.g., 18.52,73.85)")
    parser.add_argument("--soil", default="", help="Soil type (default: inferred)")
    parser.add_argument("--climate", default="", help="Climate type (default: inferred)")
    parser.add_argument("--temperature", default="", help="Temperature, e.g. '28C' or '25-30'")
    parser.add_argument("--notes", default="", help="Additional information for the advisor")
    parser.add_argument("--json", action="store_true", help="Print JSON instead of a report")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")
    args = parser.parse_args()

    level = logging.DEBUG if args.verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    coords = None
    if args.coordinates:
        try:
            coords = Coordinates.parse(args.coordinates)
        except ValueError as e:
            print(f"ERROR: {e}", file=sys.stderr)
            sys.exit(1)
    elif is_pin_code(args.location):
        resolved = geocode_address(args.location)
        if resolved is not None:
            coords = Coordinates(resolved.latitude, resolved.longitude)

    request = AdvisoryRequest(
        location=args.location,
        season=args.season,
        coordinates=coords,
        soil_type=args.soil,
        climate_type=args.climate,
        temperature_text=args.temperature,
        additional_notes=args.notes,
    )

    if not args.json:
        print_banner()
        print(f"[*] Fetching data for '{args.location}'...")

    pipeline = AdvisoryPipeline(engine=AdvisoryEngine(advisor=get_advisor()))
    try:
        result = pipeline.run(request)
    except AdvisoryError as e:
        print(f"[ERROR] {e}", file=sys.stderr)
        sys.exit(2)

    if args.json:
        print(json.dumps(to_json(result), indent=2, ensure_ascii=False))
    else:
        print_results(result)


if __name__ == "__main__":
    main()
