# backend/src/fitfuel/routers/workouts.py
from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlmodel import Session

from fitfuel.core.database import get_session
from fitfuel.core.dependencies import get_current_user_id, get_user_timezone
from fitfuel.schemas import (
    WorkoutConfirmRequest,
    WorkoutLogRead,
    WorkoutLogUpdate,
    WorkoutPreview,
    WorkoutPreviewRequest,
    WorkoutStreakResponse,
)
from fitfuel.services import workout_logging
from fitfuel.services.streaks import get_workout_streak

router = APIRouter(prefix="/workouts", tags=["workouts"])


@router.post("/preview", response_model=WorkoutPreview)
def preview_workout(req: WorkoutPreviewRequest, tz=Depends(get_user_timezone)):
    """Fill in defaults and estimate calories; nothing is written."""
    return workout_logging.preview_workout(req, tz)


@router.post("/confirm", response_model=WorkoutLogRead, status_code=201)
def confirm_workout(
    req: WorkoutConfirmRequest,
    session: Session = Depends(get_session),
    user_id: str = Depends(get_current_user_id),
    tz=Depends(get_user_timezone),
):
    return workout_logging.confirm_workout(session, user_id, req, tz)


@router.get("/streak", response_model=WorkoutStreakResponse)
def workout_streak(
    session: Session = Depends(get_session),
    user_id: str = Depends(get_current_user_id),
    tz=Depends(get_user_timezone),
):
    return get_workout_streak(session, user_id, tz)


@router.get("", response_model=List[WorkoutLogRead])
def list_workouts(
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    limit: int = Query(100, ge=1, le=500),
    session: Session = Depends(get_session),
    user_id: str = Depends(get_current_user_id),
):
    return workout_logging.list_workouts(session, user_id, start=start, end=end, limit=limit)


@router.patch("/{workout_id}", response_model=WorkoutLogRead)
def update_workout(
    workout_id: int,
    patch: WorkoutLogUpdate,
    session: Session = Depends(get_session),
    user_id: str = Depends(get_current_user_id),
    tz=Depends(get_user_timezone),
):
    return workout_logging.update_workout(session, user_id, workout_id, patch, tz)


@router.delete("/{workout_id}", status_code=204)
def delete_workout(
    workout_id: int,
    session: Session = Depends(get_session),
    user_id: str = Depends(get_current_user_id),
    tz=Depends(get_user_timezone),
):
    workout_logging.delete_workout(session, user_id, workout_id, tz)
