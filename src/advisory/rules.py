"""
Static reference data for deterministic recommendations.

    SEASON_TEMPLATES  - per-season fallback recommendations (wire format)
    BAND_CANDIDATES   - crop names by latitude band and season
    CROP_PROFILES     - agronomy details and growing preferences per crop

Sources: ICAR package-of-practices summaries and state agriculture
department advisories, rounded to planning-level figures.
"""

from typing import Dict, List, Optional

from src.data.schema import KHARIF, RABI, ZAID, CropRecommendation, normalize_season


# ---------- Season fallback table ----------
SEASON_TEMPLATES: Dict[str, List[Dict]] = {
    KHARIF: [
        {
            "name": "Rice",
            "profitability": "high",
            "estimatedEarnings": {"perAcre": 45000, "total": 45000},
            "suitability": 85,
            "growthPeriod": "120-140 days",
            "waterRequirement": "high",
            "inputs": {
                "seeds": "20-25 kg per acre",
                "fertilizers": ["NPK 10:26:26", "Urea", "DAP"],
                "pesticides": ["Carbendazim", "Chlorpyrifos"],
            },
            "marketDemand": "high",
            "tips": [
                "Ensure proper water management during flowering stage",
                "Apply phosphorus during land preparation",
                "Monitor for brown plant hopper",
            ],
        },
    ],
    RABI: [
        {
            "name": "Wheat",
            "profitability": "high",
            "estimatedEarnings": {"perAcre": 40000, "total": 40000},
            "suitability": 90,
            "growthPeriod": "120-150 days",
            "waterRequirement": "medium",
            "inputs": {
                "seeds": "100-125 kg per acre",
                "fertilizers": ["NPK 12:32:16", "Urea", "Zinc"],
                "pesticides": ["Mancozeb", "Propiconazole"],
            },
            "marketDemand": "high",
            "tips": [
                "Sow by end of November for best results",
                "Maintain proper seed depth (3-5 cm)",
                "Apply nitrogen in 3 split doses",
            ],
        },
    ],
    ZAID: [
        {
            "name": "Summer Vegetables",
            "profitability": "medium",
            "estimatedEarnings": {"perAcre": 35000, "total": 35000},
            "suitability": 80,
            "growthPeriod": "60-90 days",
            "waterRequirement": "high",
            "inputs": {
                "seeds": "2-3 kg per acre",
                "fertilizers": ["NPK 19:19:19", "Micronutrients"],
                "pesticides": ["Neem oil", "Bacillus thuringiensis"],
            },
            "marketDemand": "medium",
            "tips": [
                "Provide adequate shade during peak summer",
                "Ensure consistent water supply",
                "Use mulching to conserve moisture",
            ],
        },
    ],
}

DEFAULT_SEASON = KHARIF


def season_key(season: Optional[str]) -> str:
    """Canonical table key for a season name; unknown names map to Kharif."""
    return normalize_season(season) or DEFAULT_SEASON


def fallback_recommendations(season: Optional[str]) -> List[CropRecommendation]:
    """Fresh copies of the fallback table entries for a season."""
    return [CropRecommendation.model_validate(entry) for entry in SEASON_TEMPLATES[season_key(season)]]


# ---------- Latitude band candidates ----------
NORTHERN = "northern"
CENTRAL = "central"
SOUTHERN = "southern"

BAND_CANDIDATES: Dict[str, Dict[str, List[str]]] = {
    NORTHERN: {
        KHARIF: ["Rice", "Sugarcane", "Cotton"],
        RABI: ["Wheat", "Barley", "Mustard"],
    },
    CENTRAL: {
        KHARIF: ["Cotton", "Soybean", "Maize"],
        RABI: ["Wheat", "Gram", "Linseed"],
    },
    SOUTHERN: {
        KHARIF: ["Rice", "Ragi", "Groundnut"],
        RABI: ["Rice", "Millets", "Pulses"],
    },
}


def latitude_band(lat: float) -> str:
    if lat >= 28:
        return NORTHERN
    if lat >= 20:
        return CENTRAL
    return SOUTHERN


def band_candidates(lat: float, season: Optional[str]) -> List[str]:
    """Candidate crop names for a latitude and season; empty if the band has none."""
    return list(BAND_CANDIDATES[latitude_band(lat)].get(season_key(season), []))


# ---------- Crop profiles ----------
# temp_range is the comfortable mean air temperature band in C
CROP_PROFILES: Dict[str, Dict] = {
    "Rice": {
        "growthPeriod": "120-140 days",
        "waterRequirement": "high",
        "inputs": {
            "seeds": "20-25 kg per acre",
            "fertilizers": ["NPK 10:26:26", "Urea", "DAP"],
            "pesticides": ["Carbendazim", "Chlorpyrifos"],
        },
        "tips": [
            "Ensure proper water management during flowering stage",
            "Apply phosphorus during land preparation",
            "Monitor for brown plant hopper",
        ],
        "preferred_soils": ["alluvial", "laterite", "black"],
        "poor_soils": ["desert", "mountain"],
        "temp_range": (20, 35),
    },
    "Sugarcane": {
        "growthPeriod": "300-365 days",
        "waterRequirement": "high",
        "inputs": {
            "seeds": "3-4 tonnes of setts per acre",
            "fertilizers": ["NPK 12:32:16", "Urea", "Muriate of potash"],
            "pesticides": ["Chlorantraniliprole", "Imidacloprid"],
        },
        "tips": [
            "Use three-bud setts treated with fungicide",
            "Earth up at 90 and 120 days to prevent lodging",
            "Trash mulching saves irrigation water",
        ],
        "preferred_soils": ["alluvial", "black"],
        "poor_soils": ["desert", "mountain"],
        "temp_range": (20, 38),
    },
    "Cotton": {
        "growthPeriod": "150-180 days",
        "waterRequirement": "medium",
        "inputs": {
            "seeds": "4-6 kg per acre (Bt hybrid)",
            "fertilizers": ["NPK 20:20:0", "Urea", "Muriate of potash"],
            "pesticides": ["Emamectin benzoate", "Imidacloprid"],
        },
        "tips": [
            "Sow with the onset of monsoon rains",
            "Install pheromone traps for pink bollworm",
            "Avoid waterlogging at the seedling stage",
        ],
        "preferred_soils": ["black", "alluvial"],
        "poor_soils": ["laterite", "mountain"],
        "temp_range": (21, 35),
    },
    "Soybean": {
        "growthPeriod": "90-110 days",
        "waterRequirement": "medium",
        "inputs": {
            "seeds": "25-30 kg per acre",
            "fertilizers": ["DAP", "Muriate of potash", "Rhizobium culture"],
            "pesticides": ["Thiamethoxam", "Quinalphos"],
        },
        "tips": [
            "Treat seed with Rhizobium before sowing",
            "Use broad bed furrow planting for drainage",
            "Watch for girdle beetle after 30 days",
        ],
        "preferred_soils": ["black"],
        "poor_soils": ["desert", "laterite"],
        "temp_range": (20, 32),
    },
    "Maize": {
        "growthPeriod": "90-110 days",
        "waterRequirement": "medium",
        "inputs": {
            "seeds": "8-10 kg per acre",
            "fertilizers": ["NPK 12:32:16", "Urea", "Zinc sulphate"],
            "pesticides": ["Emamectin benzoate", "Atrazine"],
        },
        "tips": [
            "Scout for fall armyworm in the whorl",
            "Irrigate at tasseling and silking",
            "Apply nitrogen in two splits",
        ],
        "preferred_soils": ["alluvial", "red", "black"],
        "poor_soils": ["desert"],
        "temp_range": (18, 32),
    },
    "Ragi": {
        "growthPeriod": "100-120 days",
        "waterRequirement": "low",
        "inputs": {
            "seeds": "4-5 kg per acre",
            "fertilizers": ["NPK 17:17:17", "Farmyard manure"],
            "pesticides": ["Tricyclazole", "Neem oil"],
        },
        "tips": [
            "Transplant 21-day-old seedlings for higher yield",
            "Spray tricyclazole at first sign of blast",
            "Tolerates dry spells once established",
        ],
        "preferred_soils": ["red", "laterite"],
        "poor_soils": [],
        "temp_range": (20, 32),
    },
    "Groundnut": {
        "growthPeriod": "100-130 days",
        "waterRequirement": "medium",
        "inputs": {
            "seeds": "40-50 kg kernels per acre",
            "fertilizers": ["Gypsum", "SSP", "NPK 10:26:26"],
            "pesticides": ["Chlorpyrifos", "Mancozeb"],
        },
        "tips": [
            "Apply gypsum at flowering for pod filling",
            "Keep the field weed-free for the first 45 days",
            "Avoid irrigation at pod maturity",
        ],
        "preferred_soils": ["red", "alluvial"],
        "poor_soils": ["mountain"],
        "temp_range": (22, 33),
    },
    "Wheat": {
        "growthPeriod": "120-150 days",
        "waterRequirement": "medium",
        "inputs": {
            "seeds": "100-125 kg per acre",
            "fertilizers": ["NPK 12:32:16", "Urea", "Zinc"],
            "pesticides": ["Mancozeb", "Propiconazole"],
        },
        "tips": [
            "Sow by end of November for best results",
            "Maintain proper seed depth (3-5 cm)",
            "Apply nitrogen in 3 split doses",
        ],
        "preferred_soils": ["alluvial", "black"],
        "poor_soils": ["laterite", "desert"],
        "temp_range": (10, 25),
    },
    "Barley": {
        "growthPeriod": "110-130 days",
        "waterRequirement": "low",
        "inputs": {
            "seeds": "35-40 kg per acre",
            "fertilizers": ["NPK 12:32:16", "Urea"],
            "pesticides": ["Mancozeb", "Imidacloprid"],
        },
        "tips": [
            "Needs only 2-3 irrigations",
            "Tolerates mildly saline soils",
            "Harvest at hard dough stage to limit shattering",
        ],
        "preferred_soils": ["alluvial", "desert"],
        "poor_soils": ["laterite"],
        "temp_range": (8, 25),
    },
    "Mustard": {
        "growthPeriod": "110-140 days",
        "waterRequirement": "low",
        "inputs": {
            "seeds": "2-3 kg per acre",
            "fertilizers": ["Urea", "SSP", "Sulphur"],
            "pesticides": ["Dimethoate", "Mancozeb"],
        },
        "tips": [
            "Apply sulphur for better oil content",
            "Thin plants to 15 cm spacing",
            "Watch for aphids in late December",
        ],
        "preferred_soils": ["alluvial", "desert"],
        "poor_soils": ["laterite"],
        "temp_range": (10, 25),
    },
    "Gram": {
        "growthPeriod": "95-110 days",
        "waterRequirement": "low",
        "inputs": {
            "seeds": "30-35 kg per acre",
            "fertilizers": ["DAP", "Rhizobium culture"],
            "pesticides": ["Chlorantraniliprole", "Carbendazim"],
        },
        "tips": [
            "Nip the growing tips at 30 days to encourage branching",
            "One irrigation at pod formation is usually enough",
            "Monitor for pod borer at flowering",
        ],
        "preferred_soils": ["black", "alluvial"],
        "poor_soils": ["laterite"],
        "temp_range": (10, 28),
    },
    "Linseed": {
        "growthPeriod": "120-150 days",
        "waterRequirement": "low",
        "inputs": {
            "seeds": "10-12 kg per acre",
            "fertilizers": ["Urea", "SSP"],
            "pesticides": ["Mancozeb", "Dimethoate"],
        },
        "tips": [
            "Suited to residual moisture after kharif",
            "Sow in rows 25 cm apart",
            "Control bud fly at flowering",
        ],
        "preferred_soils": ["black", "alluvial"],
        "poor_soils": ["desert"],
        "temp_range": (10, 25),
    },
    "Millets": {
        "growthPeriod": "70-90 days",
        "waterRequirement": "low",
        "inputs": {
            "seeds": "3-4 kg per acre",
            "fertilizers": ["NPK 17:17:17", "Farmyard manure"],
            "pesticides": ["Neem oil", "Carbendazim"],
        },
        "tips": [
            "Good choice where irrigation is limited",
            "Line sowing eases weeding",
            "Strong demand from health-food processors",
        ],
        "preferred_soils": ["red", "desert"],
        "poor_soils": [],
        "temp_range": (20, 35),
    },
    "Pulses": {
        "growthPeriod": "90-120 days",
        "waterRequirement": "low",
        "inputs": {
            "seeds": "8-10 kg per acre",
            "fertilizers": ["DAP", "Rhizobium culture"],
            "pesticides": ["Imidacloprid", "Carbendazim"],
        },
        "tips": [
            "Fixes nitrogen for the following crop",
            "Avoid waterlogged fields",
            "Spray for yellow mosaic vectors early",
        ],
        "preferred_soils": ["red", "black"],
        "poor_soils": ["desert"],
        "temp_range": (18, 32),
    },
}


def crop_profile(name: str) -> Optional[Dict]:
    return CROP_PROFILES.get(name)
