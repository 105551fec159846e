# backend/src/fitfuel/services/meal_logging.py
from __future__ import annotations

import logging
import math
from datetime import datetime
from typing import List, Optional

from fastapi import HTTPException
from sqlmodel import Session, select

from fitfuel.models.meals import MealLog
from fitfuel.schemas import (
    FoodItem,
    MealConfirmRequest,
    MealDayResponse,
    MealLogRead,
    MealLogUpdate,
    MealPreview,
    MealPreviewRequest,
)
from fitfuel.services.aggregation import aggregate_day, meals_for_local_day
from fitfuel.services.estimator import NutritionEstimator
from fitfuel.services.resolver import resolve_nutrition
from fitfuel.services.usda import UsdaClient
from fitfuel.utils.dates import as_utc, local_date, utcnow
from fitfuel.utils.nutrition import calculate_totals, round_totals, to_food_item

logger = logging.getLogger(__name__)

SOURCE_LABELS = {"usda": "USDA", "manual": "manual entry", "ai_estimate": "AI estimated"}


def validate_meal_items(items: List[FoodItem]) -> List[FoodItem]:
    """Shared by preview and confirm; raises 400 on the first bad item."""
    if not items:
        raise HTTPException(status_code=400, detail="A meal needs at least one food item")
    for it in items:
        if not it.name.strip():
            raise HTTPException(status_code=400, detail="Food item name must not be empty")
        numbers = [it.quantity, it.calories, it.protein, it.carbs, it.fats]
        if any(n is not None and not math.isfinite(n) for n in numbers):
            raise HTTPException(status_code=400, detail=f"Invalid numbers for '{it.name}'")
    return items


def _nutrition_source(req: MealConfirmRequest) -> str:
    if req.recipe_id:
        return "recipe"
    if all(it.data_source == "manual" for it in req.food_items):
        return "manual"
    return "api"


def preview_meal(
    session: Session,
    req: MealPreviewRequest,
    usda: Optional[UsdaClient] = None,
    estimator: Optional[NutritionEstimator] = None,
) -> MealPreview:
    """Resolve every item and price the meal without writing a log."""
    items: List[FoodItem] = []
    details: List[str] = []
    estimates: List[str] = []

    for q in req.food_items:
        record = resolve_nutrition(session, q.food_name, q.quantity, q.unit, usda=usda, estimator=estimator)
        item = to_food_item(q.food_name, q.quantity, q.unit, record)
        items.append(item)
        details.append(
            f"{q.food_name}: {round(item.calories)} cal ({SOURCE_LABELS[record.data_source]})"
        )
        if record.estimated:
            estimates.append(f"{q.food_name}: {record.confidence} confidence. {record.rationale}")

    validate_meal_items(items)
    totals = round_totals(calculate_totals(items))
    message = (
        f"Ready to log {req.meal_type.value}:\n" + "\n".join(details)
        + f"\n\nTotals: {round(totals.calories)} cal, {round(totals.protein)}g protein, "
        f"{round(totals.carbs)}g carbs, {round(totals.fats)}g fats"
    )
    return MealPreview(
        meal_type=req.meal_type,
        food_items=items,
        notes=req.notes,
        logged_at=req.logged_at,
        totals=totals,
        lookup_details=details,
        estimates=estimates,
        message=message,
    )


def confirm_meal(session: Session, user_id: str, req: MealConfirmRequest, tz) -> MealLog:
    items = validate_meal_items(req.food_items)
    totals = round_totals(calculate_totals(items))

    meal = MealLog(
        user_id=user_id,
        meal_type=req.meal_type,
        food_items=[it.model_dump() for it in items],
        recipe_id=req.recipe_id,
        total_calories=totals.calories,
        total_protein=totals.protein,
        total_carbs=totals.carbs,
        total_fats=totals.fats,
        notes=req.notes,
        image_url=req.image_url,
        nutrition_source=_nutrition_source(req),
        logged_at=as_utc(req.logged_at or utcnow()),
    )
    session.add(meal)
    session.commit()
    session.refresh(meal)
    logger.info("Logged %s %d for %s (%.0f kcal)", meal.meal_type.value, meal.id, user_id, meal.total_calories)

    aggregate_day(session, user_id, local_date(meal.logged_at, tz), tz)
    return meal


def get_meal(session: Session, user_id: str, meal_id: int) -> MealLog:
    meal = session.get(MealLog, meal_id)
    if not meal or meal.user_id != user_id:
        raise HTTPException(status_code=404, detail="Meal not found")
    return meal


def list_meals(
    session: Session,
    user_id: str,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    limit: int = 100,
) -> List[MealLog]:
    stmt = select(MealLog).where(MealLog.user_id == user_id)
    if start is not None:
        stmt = stmt.where(MealLog.logged_at >= as_utc(start))
    if end is not None:
        stmt = stmt.where(MealLog.logged_at < as_utc(end))
    return list(session.exec(stmt.order_by(MealLog.logged_at.desc()).limit(limit)).all())


def meals_for_day(session: Session, user_id: str, day, tz) -> MealDayResponse:
    meals = meals_for_local_day(session, user_id, day, tz)
    items = [FoodItem.model_validate(fi) for m in meals for fi in m.food_items]
    return MealDayResponse(
        date=day.isoformat(),
        meals=[MealLogRead.model_validate(m) for m in meals],
        totals=round_totals(calculate_totals(items)),
    )


def update_meal(session: Session, user_id: str, meal_id: int, patch: MealLogUpdate, tz) -> MealLog:
    meal = get_meal(session, user_id, meal_id)
    old_day = local_date(meal.logged_at, tz)

    data = patch.model_dump(exclude_unset=True)
    if data.get("meal_type") is not None:
        meal.meal_type = patch.meal_type
    if "notes" in data:
        meal.notes = patch.notes
    if data.get("logged_at") is not None:
        meal.logged_at = as_utc(patch.logged_at)
    if patch.food_items is not None:
        items = validate_meal_items(patch.food_items)
        totals = round_totals(calculate_totals(items))
        meal.food_items = [it.model_dump() for it in items]
        meal.total_calories = totals.calories
        meal.total_protein = totals.protein
        meal.total_carbs = totals.carbs
        meal.total_fats = totals.fats

    session.add(meal)
    session.commit()
    session.refresh(meal)

    new_day = local_date(meal.logged_at, tz)
    aggregate_day(session, user_id, old_day, tz)
    if new_day != old_day:
        aggregate_day(session, user_id, new_day, tz)
    return meal


def delete_meal(session: Session, user_id: str, meal_id: int, tz) -> None:
    meal = get_meal(session, user_id, meal_id)
    day = local_date(meal.logged_at, tz)
    session.delete(meal)
    session.commit()
    aggregate_day(session, user_id, day, tz)
