# backend/src/fitfuel/routers/summary.py

from datetime import date, timedelta
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlmodel import Session

from fitfuel.core.config import Settings, get_settings
from fitfuel.core.database import get_session
from fitfuel.core.dependencies import get_current_user_id, get_user_timezone
from fitfuel.schemas import DailyNutrition, NutritionAnalytics, NutritionTargets
from fitfuel.services.aggregation import (
    aggregate_range,
    get_daily_nutrition,
    get_nutrition_analytics,
    get_nutrition_history,
)
from fitfuel.utils.dates import format_date_for_db, today_local

router = APIRouter(prefix="/summary", tags=["summary"])

MAX_REBUILD_DAYS = 92


@router.get("/day", response_model=DailyNutrition)
def summary_day(
    day: Optional[date] = Query(None, description="Local date, defaults to today"),
    session: Session = Depends(get_session),
    user_id: str = Depends(get_current_user_id),
    tz=Depends(get_user_timezone),
):
    d = day or today_local(tz)
    return get_daily_nutrition(session, user_id, format_date_for_db(d))


@router.get("/history", response_model=List[DailyNutrition])
def summary_history(
    start: Optional[date] = None,
    end: Optional[date] = None,
    session: Session = Depends(get_session),
    user_id: str = Depends(get_current_user_id),
):
    """Stored daily summaries, newest first."""
    return get_nutrition_history(
        session,
        user_id,
        start=format_date_for_db(start) if start else None,
        end=format_date_for_db(end) if end else None,
    )


@router.get("/analytics", response_model=NutritionAnalytics)
def summary_analytics(
    start: date,
    end: date,
    session: Session = Depends(get_session),
    user_id: str = Depends(get_current_user_id),
    settings: Settings = Depends(get_settings),
):
    """Per-day intake for [start, end] with totals, averages and the daily targets."""
    if start > end:
        raise HTTPException(status_code=400, detail="start must not be after end")
    targets = NutritionTargets(
        calories=settings.daily_calorie_target,
        protein=settings.daily_protein_target,
        carbs=settings.daily_carbs_target,
        fats=settings.daily_fats_target,
    )
    return get_nutrition_analytics(
        session, user_id, format_date_for_db(start), format_date_for_db(end), targets
    )

@router.post("/rebuild", response_model=List[DailyNutrition])
def summary_rebuild(
    start: Optional[date] = None,
    end: Optional[date] = None,
    session: Session = Depends(get_session),
    user_id: str = Depends(get_current_user_id),
    tz=Depends(get_user_timezone),
):
    """Recompute the summaries of [start, end] (default: the last 7 local days) from the logs."""
    end = end or today_local(tz)
    start = start or end - timedelta(days=6)
    if start > end:
        raise HTTPException(status_code=400, detail="start must not be after end")
    if (end - start).days >= MAX_REBUILD_DAYS:
        raise HTTPException(status_code=400, detail=f"at most {MAX_REBUILD_DAYS} days per rebuild")
    return aggregate_range(session, user_id, start, end, tz)
