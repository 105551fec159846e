# backend/src/fitfuel/services/workout_logging.py
from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Dict, List, Optional

from fastapi import HTTPException
from sqlmodel import Session, select

from fitfuel.models.workouts import Intensity, WorkoutLog
from fitfuel.schemas import (
    Exercise,
    WorkoutConfirmRequest,
    WorkoutDraft,
    WorkoutLogUpdate,
    WorkoutPreview,
    WorkoutPreviewRequest,
)
from fitfuel.services.aggregation import aggregate_day
from fitfuel.utils.dates import (
    as_utc,
    format_date_for_db,
    local_date,
    local_noon_utc,
    parse_natural_date,
    today_local,
    utcnow,
    validate_workout_date,
)

logger = logging.getLogger(__name__)

# rough kcal per minute
CALORIES_PER_MINUTE: Dict[Intensity, int] = {
    Intensity.low: 3,
    Intensity.medium: 6,
    Intensity.high: 10,
}
DEFAULT_DURATION_MINUTES = 30


def estimate_calories(duration_minutes: float, intensity: Intensity) -> int:
    return int(round(duration_minutes * CALORIES_PER_MINUTE[intensity]))


def resolve_workout_date(text: Optional[str], tz, now: Optional[datetime] = None) -> date:
    """Local date for a natural-language workout date; 400 when unusable."""
    today = today_local(tz, now)
    if not text:
        return today
    parsed = parse_natural_date(text, today)
    if parsed is None:
        raise HTTPException(
            status_code=400,
            detail=(
                f'Could not parse workout date "{text}". Use formats like "today", '
                '"yesterday", "Monday", "2 days ago", or "Nov 23".'
            ),
        )
    error = validate_workout_date(parsed, today)
    if error:
        raise HTTPException(status_code=400, detail=error)
    return parsed


def summarize_exercise(ex: Exercise) -> str:
    parts = [ex.name]
    if ex.sets and ex.reps:
        parts.append(f"{ex.sets}x{ex.reps}")
    if ex.weight and ex.weight_unit:
        parts.append(f"{ex.weight:g}{ex.weight_unit}")
    if ex.duration_minutes:
        parts.append(f"{ex.duration_minutes:g} min")
    if ex.intensity:
        parts.append(f"({ex.intensity.value})")
    return " ".join(parts)


def preview_workout(req: WorkoutPreviewRequest, tz, now: Optional[datetime] = None) -> WorkoutPreview:
    day = resolve_workout_date(req.workout_date, tz, now)

    duration = req.total_duration_minutes
    if not duration:
        summed = sum(e.duration_minutes or 0 for e in req.exercises)
        duration = int(round(summed)) if summed > 0 else DEFAULT_DURATION_MINUTES
    intensity = req.overall_intensity or Intensity.medium
    calories = estimate_calories(duration, intensity)

    summary = [summarize_exercise(e) for e in req.exercises]
    pretty = day.strftime("%a, %b %d, %Y")

    assumptions: Dict[str, str] = {}
    if not req.workout_date:
        assumptions["date"] = f"Assumed today ({pretty})"
    if not req.total_duration_minutes:
        assumptions["duration"] = f"Assumed {duration} minutes (not specified)"
    if not req.overall_intensity:
        assumptions["intensity"] = "Assumed medium intensity (not specified)"

    lines = "\n".join(f"- {s}" for s in summary) or "- (no exercises listed)"
    message = (
        f'Ready to log workout: "{req.title}"\n\nDate: {pretty}\nExercises:\n{lines}\n\n'
        f"Duration: {duration} min\nIntensity: {intensity.value}\n"
        f"Estimated calories burned: ~{calories} cal"
    )
    return WorkoutPreview(
        workout=WorkoutDraft(
            title=req.title,
            exercises=req.exercises,
            total_duration_minutes=duration,
            intensity=intensity,
            estimated_calories=calories,
            notes=req.notes,
            workout_date=format_date_for_db(day),
        ),
        exercise_summary=summary,
        assumptions=assumptions,
        message=message,
    )


def confirm_workout(
    session: Session,
    user_id: str,
    req: WorkoutConfirmRequest,
    tz,
    now: Optional[datetime] = None,
) -> WorkoutLog:
    now = now or utcnow()
    day = resolve_workout_date(req.workout_date, tz, now)
    # today keeps the real time, back-dated workouts land at local noon
    completed_at = now if day == today_local(tz, now) else local_noon_utc(day, tz)

    workout = WorkoutLog(
        user_id=user_id,
        title=req.title.strip(),
        exercises=[e.model_dump(mode="json") for e in req.exercises],
        total_duration_minutes=req.total_duration_minutes,
        calories_burned=req.estimated_calories,
        intensity=req.intensity,
        notes=req.notes,
        completed_at=as_utc(completed_at),
    )
    session.add(workout)
    session.commit()
    session.refresh(workout)
    logger.info("Logged workout %d for %s on %s", workout.id, user_id, day)

    aggregate_day(session, user_id, day, tz)
    return workout


def get_workout(session: Session, user_id: str, workout_id: int) -> WorkoutLog:
    workout = session.get(WorkoutLog, workout_id)
    if not workout or workout.user_id != user_id:
        raise HTTPException(status_code=404, detail="Workout not found")
    return workout


def list_workouts(
    session: Session,
    user_id: str,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    limit: int = 100,
) -> List[WorkoutLog]:
    stmt = select(WorkoutLog).where(WorkoutLog.user_id == user_id)
    if start is not None:
        stmt = stmt.where(WorkoutLog.completed_at >= as_utc(start))
    if end is not None:
        stmt = stmt.where(WorkoutLog.completed_at < as_utc(end))
    return list(session.exec(stmt.order_by(WorkoutLog.completed_at.desc()).limit(limit)).all())


def update_workout(
    session: Session,
    user_id: str,
    workout_id: int,
    patch: WorkoutLogUpdate,
    tz,
) -> WorkoutLog:
    workout = get_workout(session, user_id, workout_id)
    old_day = local_date(workout.completed_at, tz)

    data = patch.model_dump(exclude_unset=True)
    for field in ("title", "total_duration_minutes", "calories_burned", "intensity", "notes"):
        if field in data and (data[field] is not None or field == "notes"):
            setattr(workout, field, getattr(patch, field))
    if patch.exercises is not None:
        workout.exercises = [e.model_dump(mode="json") for e in patch.exercises]
    if patch.completed_at is not None:
        workout.completed_at = as_utc(patch.completed_at)

    session.add(workout)
    session.commit()
    session.refresh(workout)

    new_day = local_date(workout.completed_at, tz)
    aggregate_day(session, user_id, old_day, tz)
    if new_day != old_day:
        aggregate_day(session, user_id, new_day, tz)
    return workout


def delete_workout(session: Session, user_id: str, workout_id: int, tz) -> None:
    workout = get_workout(session, user_id, workout_id)
    day = local_date(workout.completed_at, tz)
    session.delete(workout)
    session.commit()
    aggregate_day(session, user_id, day, tz)
