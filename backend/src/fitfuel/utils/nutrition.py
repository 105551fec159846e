from __future__ import annotations

import logging
from typing import Iterable, Optional

from fitfuel.schemas import FoodItem, MealTotals, NutritionData
from fitfuel.utils.units import (
    convert_unit,
    convert_volume,
    convert_weight,
    density_for,
    is_volume_unit,
    is_weight_unit,
    normalize_unit,
    unit_category,
    volume_to_weight,
)

logger = logging.getLogger(__name__)

OPTIONAL_NUTRIENTS = (
    "fiber",
    "sugar",
    "sodium",
    "potassium",
    "calcium",
    "iron",
    "vitamin_c",
    "vitamin_a",
)


def _f(x: Optional[float]) -> float:
    try:
        return float(x or 0.0)
    except (TypeError, ValueError):
        return 0.0


def normalize_food_name(name: str) -> str:
    return (name or "").strip().lower()


def scaling_factor(
    record: NutritionData,
    quantity: float,
    unit: str,
    food_name: Optional[str] = None,
) -> Optional[float]:
    """Ratio between the requested amount and the record's serving, or ``None``.

    Weight/volume bridging uses the density table, looked up by ``food_name``
    (falls back to the record's own name).
    """
    if record.serving_size <= 0:
        return None

    target = normalize_unit(unit)
    base = normalize_unit(record.serving_unit)
    if target == base:
        return quantity / record.serving_size

    converted: Optional[float] = None
    name = food_name or record.food_name
    if unit_category(target) is not None and unit_category(target) == unit_category(base):
        converted = convert_unit(quantity, target, base)
    elif is_volume_unit(target) and is_weight_unit(base) and density_for(name) is not None:
        grams = volume_to_weight(quantity, target, name)
        converted = convert_weight(grams, "g", base) if grams is not None else None
    elif is_weight_unit(target) and is_volume_unit(base) and density_for(name) is not None:
        ml = convert_weight(quantity, target, "g") / density_for(name)
        converted = convert_volume(ml, "ml", base)
    else:
        converted = convert_unit(quantity, target, base)

    if converted is None:
        return None
    return converted / record.serving_size


def scale_nutrition(
    record: NutritionData,
    quantity: float,
    unit: str,
    food_name: Optional[str] = None,
) -> NutritionData:
    """Linear scaling to ``quantity`` ``unit``; unconvertible requests return ``record`` as is."""
    factor = scaling_factor(record, quantity, unit, food_name=food_name)
    if factor is None:
        logger.warning(
            "Cannot scale %s from %s to %s; returning per-serving values",
            record.food_name,
            record.serving_unit,
            unit,
        )
        return record

    scaled = {
        "calories": float(round(_f(record.calories) * factor)),
        "protein": round(_f(record.protein) * factor, 1),
        "carbs": round(_f(record.carbs) * factor, 1),
        "fats": round(_f(record.fats) * factor, 1),
    }
    for key in OPTIONAL_NUTRIENTS:
        value = getattr(record, key)
        scaled[key] = None if value is None else round(value * factor, 1)

    return record.model_copy(
        update={**scaled, "serving_size": quantity, "serving_unit": unit}
    )


def normalize_to_100g(record: NutritionData) -> NutritionData:
    if record.serving_size == 100 and normalize_unit(record.serving_unit) == "g":
        return record
    if is_weight_unit(normalize_unit(record.serving_unit)):
        return scale_nutrition(record, 100, "g")
    logger.warning("Cannot normalize %s to 100g without density information", record.serving_unit)
    return record


def to_food_item(name: str, quantity: float, unit: str, record: NutritionData) -> FoodItem:
    return FoodItem(
        name=name,
        quantity=quantity,
        unit=unit,
        calories=_f(record.calories),
        protein=record.protein,
        carbs=record.carbs,
        fats=record.fats,
        fiber=record.fiber,
        sugar=record.sugar,
        sodium=record.sodium,
        data_source=record.data_source,
    )


def calculate_totals(items: Iterable[FoodItem]) -> MealTotals:
    total = MealTotals()
    for it in items:
        total.calories += _f(it.calories)
        total.protein += _f(it.protein)
        total.carbs += _f(it.carbs)
        total.fats += _f(it.fats)
    return total


def round_totals(t: MealTotals, ndigits: int = 1) -> MealTotals:
    return MealTotals(
        calories=float(round(t.calories)),
        protein=round(t.protein, ndigits),
        carbs=round(t.carbs, ndigits),
        fats=round(t.fats, ndigits),
    )
