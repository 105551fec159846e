# backend/src/fitfuel/services/aggregation.py
"""Daily calorie summaries.

Logs are stored with UTC timestamps but bucketed by the viewer's local date.
Rows are fetched with a UTC window wide enough for any real offset (-12h to
+14h) and then filtered exactly by converting each timestamp to local time.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, time, timedelta
from typing import List, Optional, Tuple

import pytz
from sqlmodel import Session, select

from fitfuel.core.database import upsert
from fitfuel.models.meals import MealLog
from fitfuel.models.tracking import CalorieTracking
from fitfuel.models.workouts import WorkoutLog
from fitfuel.schemas import (
    AnalyticsDay,
    AnalyticsSummary,
    DailyNutrition,
    NutritionAnalytics,
    NutritionTargets,
)
from fitfuel.utils.dates import format_date_for_db, local_date, utcnow

logger = logging.getLogger(__name__)

local_date_for = local_date


def fetch_window(day: date) -> Tuple[datetime, datetime]:
    """UTC range [day - 24h, day + 48h) around UTC midnight of ``day``."""
    midnight = pytz.UTC.localize(datetime.combine(day, time.min))
    return midnight - timedelta(hours=24), midnight + timedelta(hours=48)


def meals_for_local_day(session: Session, user_id: str, day: date, tz) -> List[MealLog]:
    start, end = fetch_window(day)
    rows = session.exec(
        select(MealLog)
        .where(MealLog.user_id == user_id)
        .where(MealLog.logged_at >= start)
        .where(MealLog.logged_at < end)
        .order_by(MealLog.logged_at)
    ).all()
    return [m for m in rows if local_date_for(m.logged_at, tz) == day]


def workouts_for_local_day(session: Session, user_id: str, day: date, tz) -> List[WorkoutLog]:
    start, end = fetch_window(day)
    rows = session.exec(
        select(WorkoutLog)
        .where(WorkoutLog.user_id == user_id)
        .where(WorkoutLog.completed_at >= start)
        .where(WorkoutLog.completed_at < end)
        .order_by(WorkoutLog.completed_at)
    ).all()
    return [w for w in rows if local_date_for(w.completed_at, tz) == day]


def _to_read(row: CalorieTracking) -> DailyNutrition:
    return DailyNutrition(
        user_id=row.user_id,
        date=row.date,
        total_calories_consumed=row.total_calories_consumed,
        total_protein_consumed=row.total_protein_consumed,
        total_carbs_consumed=row.total_carbs_consumed,
        total_fats_consumed=row.total_fats_consumed,
        total_calories_burned=row.total_calories_burned,
        net_calories=row.net_calories,
    )


def _get_row(session: Session, user_id: str, key: str) -> Optional[CalorieTracking]:
    return session.exec(
        select(CalorieTracking)
        .where(CalorieTracking.user_id == user_id)
        .where(CalorieTracking.date == key)
    ).first()


def aggregate_day(session: Session, user_id: str, day: date, tz) -> DailyNutrition:
    """Rebuild the (user, day) summary from the logs; idempotent."""
    meals = meals_for_local_day(session, user_id, day, tz)
    workouts = workouts_for_local_day(session, user_id, day, tz)

    consumed = sum(m.total_calories or 0 for m in meals)
    protein = sum(m.total_protein or 0 for m in meals)
    carbs = sum(m.total_carbs or 0 for m in meals)
    fats = sum(m.total_fats or 0 for m in meals)
    burned = sum(w.calories_burned or 0 for w in workouts)

    key = format_date_for_db(day)
    now = utcnow()
    upsert(
        session,
        CalorieTracking,
        {
            "user_id": user_id,
            "date": key,
            "total_calories_consumed": round(consumed, 1),
            "total_protein_consumed": round(protein, 1),
            "total_carbs_consumed": round(carbs, 1),
            "total_fats_consumed": round(fats, 1),
            "total_calories_burned": round(burned, 1),
            "net_calories": round(consumed - burned, 1),
            "created_at": now,
            "updated_at": now,
        },
        conflict_columns=("user_id", "date"),
        insert_only=("created_at",),
    )
    session.commit()
    row = _get_row(session, user_id, key)
    logger.info(
        "Aggregated %s for %s: %d meals, %d workouts, net %.1f kcal",
        key, user_id, len(meals), len(workouts), row.net_calories,
    )
    return _to_read(row)


def aggregate_range(session: Session, user_id: str, start: date, end: date, tz) -> List[DailyNutrition]:
    """Rebuild every day in [start, end]."""
    out: List[DailyNutrition] = []
    d = start
    while d <= end:
        out.append(aggregate_day(session, user_id, d, tz))
        d += timedelta(days=1)
    return out


def get_daily_nutrition(session: Session, user_id: str, day: str) -> DailyNutrition:
    row = _get_row(session, user_id, day)
    if row is None:
        return DailyNutrition(user_id=user_id, date=day)
    return _to_read(row)


def get_nutrition_history(
    session: Session,
    user_id: str,
    start: Optional[str] = None,
    end: Optional[str] = None,
) -> List[DailyNutrition]:
    stmt = select(CalorieTracking).where(CalorieTracking.user_id == user_id)
    if start:
        stmt = stmt.where(CalorieTracking.date >= start)
    if end:
        stmt = stmt.where(CalorieTracking.date <= end)
    rows = session.exec(stmt.order_by(CalorieTracking.date.desc())).all()
    return [_to_read(r) for r in rows]


def get_nutrition_analytics(
    session: Session,
    user_id: str,
    start: str,
    end: str,
    targets: NutritionTargets,
) -> NutritionAnalytics:
    """Stored summaries of [start, end] oldest first, with totals and per-day averages."""
    rows = session.exec(
        select(CalorieTracking)
        .where(CalorieTracking.user_id == user_id)
        .where(CalorieTracking.date >= start)
        .where(CalorieTracking.date <= end)
        .order_by(CalorieTracking.date)
    ).all()

    days = [
        AnalyticsDay(
            date=r.date,
            calories=r.total_calories_consumed,
            protein=r.total_protein_consumed,
            carbs=r.total_carbs_consumed,
            fats=r.total_fats_consumed,
            burned=r.total_calories_burned,
            net=r.net_calories,
        )
        for r in rows
    ]
    totals = {
        field: round(sum(getattr(d, field) for d in days), 1)
        for field in ("calories", "protein", "carbs", "fats", "burned")
    }
    n = len(days)

    def avg(field: str) -> int:
        return round(totals[field] / n) if n else 0

    summary = AnalyticsSummary(
        total_days=n,
        avg_calories=avg("calories"),
        avg_protein=avg("protein"),
        avg_carbs=avg("carbs"),
        avg_fats=avg("fats"),
        avg_burned=avg("burned"),
        total_calories=totals["calories"],
        total_protein=totals["protein"],
        total_carbs=totals["carbs"],
        total_fats=totals["fats"],
        total_burned=totals["burned"],
    )
    return NutritionAnalytics(start=start, end=end, days=days, summary=summary, targets=targets)
