# backend/src/fitfuel/services/resolver.py
"""Nutrition lookup chain: local cache, then USDA, then the AI estimator.

Only USDA answers are memoized. Estimates are returned to the caller (flagged
``ai_estimate`` with their confidence and rationale) but never stored, so a
later USDA hit is not shadowed by a guess.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Iterable, List, Optional, Tuple

import requests
from sqlmodel import Session, select

from fitfuel.core.database import upsert
from fitfuel.models.nutrition import NutritionCacheEntry
from fitfuel.schemas import FoodQuery, FoodSearchResponse, ManualNutritionRequest, NutritionData
from fitfuel.services.estimator import NutritionEstimator
from fitfuel.services.usda import UsdaClient, UsdaError
from fitfuel.utils.dates import as_utc, utcnow
from fitfuel.utils.nutrition import OPTIONAL_NUTRIENTS, normalize_food_name, scale_nutrition

logger = logging.getLogger(__name__)

# Failures of an external tier that simply mean "no data from this tier"
TRANSIENT_ERRORS = (requests.RequestException, UsdaError, ValueError)


class NutritionUnresolved(Exception):
    def __init__(self, food_name: str):
        super().__init__(f"No nutrition data found for '{food_name}'")
        self.food_name = food_name


# -------------------- Cache --------------------
def _entry_to_record(entry: NutritionCacheEntry) -> NutritionData:
    return NutritionData(
        food_name=entry.food_name,
        fdc_id=entry.fdc_id,
        calories=entry.calories or 0.0,
        protein=entry.protein or 0.0,
        carbs=entry.carbs or 0.0,
        fats=entry.fats or 0.0,
        fiber=entry.fiber,
        sugar=entry.sugar,
        sodium=entry.sodium,
        potassium=entry.potassium,
        calcium=entry.calcium,
        iron=entry.iron,
        vitamin_c=entry.vitamin_c,
        vitamin_a=entry.vitamin_a,
        serving_size=entry.serving_size,
        serving_unit=entry.serving_unit,
        data_source=entry.data_source,
    )


def _get_entry(session: Session, key: str) -> Optional[NutritionCacheEntry]:
    return session.exec(select(NutritionCacheEntry).where(NutritionCacheEntry.food_name == key)).first()


def get_cached(session: Session, food_name: str) -> Optional[NutritionData]:
    entry = _get_entry(session, normalize_food_name(food_name))
    return _entry_to_record(entry) if entry else None


def save_to_cache(
    session: Session,
    record: NutritionData,
    key: Optional[str] = None,
) -> NutritionCacheEntry:
    """Upsert ``record`` (per-serving values) under ``key`` or its own normalized name."""
    if record.data_source == "ai_estimate":
        raise ValueError("AI estimates are not cached")

    name = normalize_food_name(key or record.food_name)
    values = {
        "food_name": name,
        "fdc_id": record.fdc_id,
        "calories": record.calories,
        "protein": record.protein,
        "carbs": record.carbs,
        "fats": record.fats,
        "serving_size": record.serving_size,
        "serving_unit": record.serving_unit,
        "data_source": record.data_source,
        "last_updated": utcnow(),
    }
    for field in OPTIONAL_NUTRIENTS:
        values[field] = getattr(record, field)

    upsert(session, NutritionCacheEntry, values, conflict_columns=("food_name",))
    session.commit()
    return _get_entry(session, name)


# -------------------- Resolution --------------------
def resolve_nutrition(
    session: Session,
    food_name: str,
    quantity: float = 1.0,
    unit: str = "serving",
    usda: Optional[UsdaClient] = None,
    estimator: Optional[NutritionEstimator] = None,
) -> NutritionData:
    """Nutrition for ``quantity`` ``unit`` of ``food_name``.

    Raises ``NutritionUnresolved`` when every tier came back empty.
    """
    key = normalize_food_name(food_name)

    cached = get_cached(session, key)
    if cached is not None:
        logger.info("Cache hit for %s", key)
        return scale_nutrition(cached, quantity, unit, food_name=food_name)
    logger.info("Cache miss for %s", key)

    if usda is not None:
        try:
            results = usda.search_and_parse(food_name, limit=1)
        except TRANSIENT_ERRORS as exc:
            logger.warning("USDA lookup failed for %s: %s", food_name, exc)
            results = []
        if results:
            best = results[0]
            save_to_cache(session, best, key=key)
            return scale_nutrition(best, quantity, unit, food_name=food_name)

    if estimator is not None:
        try:
            estimate = estimator.estimate(food_name, quantity, unit)
        except TRANSIENT_ERRORS as exc:
            logger.warning("AI estimate failed for %s: %s", food_name, exc)
        else:
            return scale_nutrition(estimate, quantity, unit, food_name=food_name)

    raise NutritionUnresolved(food_name)


def resolve_batch(
    session: Session,
    items: Iterable[FoodQuery],
    usda: Optional[UsdaClient] = None,
    estimator: Optional[NutritionEstimator] = None,
) -> List[NutritionData]:
    return [
        resolve_nutrition(session, it.food_name, it.quantity, it.unit, usda=usda, estimator=estimator)
        for it in items
    ]


def search_food(
    session: Session,
    query: str,
    usda: UsdaClient,
    limit: int = 10,
) -> FoodSearchResponse:
    """Candidate list for ``query``; USDA errors propagate to the caller."""
    cached = get_cached(session, query)
    if cached is not None:
        return FoodSearchResponse(query=query, cached=True, results=[cached])

    results = usda.search_and_parse(query, limit=limit)
    if results:
        save_to_cache(session, results[0], key=query)
    return FoodSearchResponse(query=query, cached=False, results=results)


def save_manual_nutrition(session: Session, req: ManualNutritionRequest) -> NutritionData:
    record = NutritionData(
        food_name=normalize_food_name(req.food_name),
        calories=req.calories,
        protein=req.protein or 0.0,
        carbs=req.carbs or 0.0,
        fats=req.fats or 0.0,
        serving_size=req.serving_size,
        serving_unit=req.serving_unit,
        data_source="manual",
    )
    save_to_cache(session, record)
    return record


def cleanup_stale_cache(
    session: Session,
    now: Optional[datetime] = None,
    days: int = 90,
) -> Tuple[int, datetime]:
    """Drop USDA entries not refreshed within ``days``; manual entries stay."""
    cutoff = as_utc(now or utcnow()) - timedelta(days=days)
    stale = session.exec(
        select(NutritionCacheEntry)
        .where(NutritionCacheEntry.data_source == "usda")
        .where(NutritionCacheEntry.last_updated < cutoff)
    ).all()
    for entry in stale:
        session.delete(entry)
    session.commit()
    if stale:
        logger.info("Removed %d stale cache entries", len(stale))
    return len(stale), cutoff
