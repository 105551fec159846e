# backend/src/fitfuel/routers/meals.py
from __future__ import annotations

from datetime import date, datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlmodel import Session

from fitfuel.core.database import get_session
from fitfuel.core.dependencies import (
    get_current_user_id,
    get_estimator,
    get_usda_client,
    get_user_timezone,
)
from fitfuel.schemas import (
    MealConfirmRequest,
    MealDayResponse,
    MealLogRead,
    MealLogUpdate,
    MealPreview,
    MealPreviewRequest,
)
from fitfuel.services import meal_logging
from fitfuel.services.estimator import NutritionEstimator
from fitfuel.services.usda import UsdaClient
from fitfuel.utils.dates import today_local

router = APIRouter(prefix="/meals", tags=["meals"])


@router.post("/preview", response_model=MealPreview)
def preview_meal(
    req: MealPreviewRequest,
    session: Session = Depends(get_session),
    usda: UsdaClient = Depends(get_usda_client),
    estimator: Optional[NutritionEstimator] = Depends(get_estimator),
):
    """Look up every item and return totals; nothing is written."""
    return meal_logging.preview_meal(session, req, usda=usda, estimator=estimator)


@router.post("/confirm", response_model=MealLogRead, status_code=201)
def confirm_meal(
    req: MealConfirmRequest,
    session: Session = Depends(get_session),
    user_id: str = Depends(get_current_user_id),
    tz=Depends(get_user_timezone),
):
    return meal_logging.confirm_meal(session, user_id, req, tz)


@router.get("", response_model=List[MealLogRead])
def list_meals(
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    limit: int = Query(100, ge=1, le=500),
    session: Session = Depends(get_session),
    user_id: str = Depends(get_current_user_id),
):
    return meal_logging.list_meals(session, user_id, start=start, end=end, limit=limit)


@router.get("/day", response_model=MealDayResponse)
def meals_day(
    day: Optional[date] = Query(None, description="Local date, defaults to today"),
    session: Session = Depends(get_session),
    user_id: str = Depends(get_current_user_id),
    tz=Depends(get_user_timezone),
):
    return meal_logging.meals_for_day(session, user_id, day or today_local(tz), tz)


@router.patch("/{meal_id}", response_model=MealLogRead)
def update_meal(
    meal_id: int,
    patch: MealLogUpdate,
    session: Session = Depends(get_session),
    user_id: str = Depends(get_current_user_id),
    tz=Depends(get_user_timezone),
):
    return meal_logging.update_meal(session, user_id, meal_id, patch, tz)


@router.delete("/{meal_id}", status_code=204)
def delete_meal(
    meal_id: int,
    session: Session = Depends(get_session),
    user_id: str = Depends(get_current_user_id),
    tz=Depends(get_user_timezone),
):
    meal_logging.delete_meal(session, user_id, meal_id, tz)
