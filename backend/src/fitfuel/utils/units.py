"""Unit handling for nutrition quantities.

Weights go through grams, volumes through milliliters. Conversions across the
two categories need a density and are never guessed: ``convert_unit`` answers
``None`` for them. Nothing here rounds; that is left to the callers.
"""

from __future__ import annotations

import logging
import re
from typing import Dict, Optional, Tuple

logger = logging.getLogger(__name__)

# -------------------- Tables --------------------
WEIGHT_TO_GRAMS: Dict[str, float] = {
    "g": 1.0,
    "kg": 1000.0,
    "oz": 28.3495,
    "lb": 453.592,
    "mg": 0.001,
}

VOLUME_TO_ML: Dict[str, float] = {
    "ml": 1.0,
    "l": 1000.0,
    "cup": 236.588,  # US cup
    "tbsp": 14.7868,
    "tsp": 4.92892,
    "fl oz": 29.5735,
}

COUNT_UNITS = ("serving", "piece", "slice", "whole")

UNIT_SYNONYMS: Dict[str, str] = {
    # weight
    "g": "g",
    "gram": "g",
    "grams": "g",
    "kg": "kg",
    "kilogram": "kg",
    "kilograms": "kg",
    "oz": "oz",
    "ounce": "oz",
    "ounces": "oz",
    "lb": "lb",
    "lbs": "lb",
    "pound": "lb",
    "pounds": "lb",
    "mg": "mg",
    "milligram": "mg",
    "milligrams": "mg",
    # volume
    "ml": "ml",
    "milliliter": "ml",
    "milliliters": "ml",
    "l": "l",
    "liter": "l",
    "liters": "l",
    "cup": "cup",
    "cups": "cup",
    "c": "cup",
    "tbsp": "tbsp",
    "tbs": "tbsp",
    "tablespoon": "tbsp",
    "tablespoons": "tbsp",
    "tsp": "tsp",
    "teaspoon": "tsp",
    "teaspoons": "tsp",
    "fl oz": "fl oz",
    "floz": "fl oz",
    "fluid ounce": "fl oz",
    "fluid ounces": "fl oz",
}

# Approximate densities in g/ml; matched as whole words of the food name.
FOOD_DENSITIES: Dict[str, float] = {
    # liquids
    "water": 1.0,
    "milk": 1.03,
    "olive oil": 0.92,
    "oil": 0.92,
    "honey": 1.42,
    "maple syrup": 1.37,
    # dry goods, loosely packed
    "flour": 0.53,
    "sugar": 0.85,
    "brown sugar": 0.90,
    "salt": 1.22,
    "rice": 0.85,
    "oats": 0.41,
    # semi-solids
    "butter": 0.96,
    "peanut butter": 1.08,
    "yogurt": 1.04,
    "sour cream": 1.03,
}

_QUANTITY_RE = re.compile(r"^([\d.]+)\s*([a-zA-Z\s]+)$")


# -------------------- Categories --------------------
def is_weight_unit(unit: str) -> bool:
    return unit in WEIGHT_TO_GRAMS


def is_volume_unit(unit: str) -> bool:
    return unit in VOLUME_TO_ML


def unit_category(unit: str) -> Optional[str]:
    if is_weight_unit(unit):
        return "weight"
    if is_volume_unit(unit):
        return "volume"
    return None


def normalize_unit(text: str) -> str:
    """Map a free-text unit onto its canonical token; unknown text passes through."""
    normalized = (text or "").strip().lower()
    return UNIT_SYNONYMS.get(normalized, normalized)


# -------------------- Conversion --------------------
def convert_weight(value: float, from_unit: str, to_unit: str) -> float:
    grams = value * WEIGHT_TO_GRAMS[from_unit]
    return grams / WEIGHT_TO_GRAMS[to_unit]


def convert_volume(value: float, from_unit: str, to_unit: str) -> float:
    ml = value * VOLUME_TO_ML[from_unit]
    return ml / VOLUME_TO_ML[to_unit]


def convert_unit(value: float, from_unit: str, to_unit: str) -> Optional[float]:
    """Convert within one category; ``None`` means no conversion is possible."""
    if from_unit == to_unit:
        return value
    if is_weight_unit(from_unit) and is_weight_unit(to_unit):
        return convert_weight(value, from_unit, to_unit)
    if is_volume_unit(from_unit) and is_volume_unit(to_unit):
        return convert_volume(value, from_unit, to_unit)

    logger.warning("Cannot convert between %s and %s without density information", from_unit, to_unit)
    return None


def density_for(food_name: str) -> Optional[float]:
    name = (food_name or "").strip().lower()
    # Whole words only; longest key first so "peanut butter" wins over "butter".
    for food in sorted(FOOD_DENSITIES, key=len, reverse=True):
        if re.search(rf"\b{re.escape(food)}\b", name):
            return FOOD_DENSITIES[food]
    return None


def volume_to_weight(value: float, from_unit: str, food_name: str) -> Optional[float]:
    """Grams for a volume of a food with a known density, else ``None``."""
    if not is_volume_unit(from_unit):
        return None
    density = density_for(food_name)
    if density is None:
        return None
    return convert_volume(value, from_unit, "ml") * density


def convert_to_grams(value: float, from_unit: str, density: Optional[float] = None) -> Optional[float]:
    if is_weight_unit(from_unit):
        return convert_weight(value, from_unit, "g")
    if is_volume_unit(from_unit) and density:
        return convert_volume(value, from_unit, "ml") * density
    return None


# -------------------- Parsing / display --------------------
def parse_quantity_string(text: str) -> Optional[Tuple[float, str]]:
    """'1 cup', '250g', '2 tablespoons' -> (value, canonical unit)."""
    match = _QUANTITY_RE.match((text or "").strip())
    if not match:
        return None
    try:
        value = float(match.group(1))
    except ValueError:
        return None
    return value, normalize_unit(match.group(2))


def format_unit_value(value: float, unit: str, decimals: int = 1) -> str:
    rounded = round(value, decimals)
    if float(rounded).is_integer():
        rounded = int(rounded)
    return f"{rounded} {unit}"
