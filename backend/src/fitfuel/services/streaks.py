# backend/src/fitfuel/services/streaks.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Iterable, Optional

from sqlmodel import Session, select

from fitfuel.models.workouts import WorkoutLog
from fitfuel.schemas import WorkoutStreakResponse
from fitfuel.utils.dates import as_utc, local_date, today_local, utcnow


@dataclass(frozen=True)
class WorkoutStreak:
    current_streak: int = 0
    longest_streak: int = 0


def calculate_streaks(timestamps: Iterable[datetime], tz, today: date) -> WorkoutStreak:
    """Consecutive local days with at least one workout.

    The current streak counts back from ``today`` and is 0 when today has no
    workout yet.
    """
    days = {local_date(ts, tz) for ts in timestamps if ts is not None}
    if not days:
        return WorkoutStreak()

    current = 0
    check = today
    while check in days:
        current += 1
        check -= timedelta(days=1)

    ordered = sorted(days)
    longest = run = 1
    for prev, nxt in zip(ordered, ordered[1:]):
        if (nxt - prev).days == 1:
            run += 1
        else:
            run = 1
        longest = max(longest, run)

    return WorkoutStreak(current_streak=current, longest_streak=max(longest, current))


def streak_status(current: int) -> str:
    if current == 0:
        return "No active streak"
    if current == 1:
        return "Streak just started!"
    if current < 7:
        return "Building momentum"
    if current < 14:
        return "On fire!"
    if current < 30:
        return "Incredible consistency"
    return "Legendary streak!"


def encouragement(current: int, longest: int) -> str:
    if current == 0:
        if longest > 0:
            return f"You've had a {longest}-day streak before - you can do it again!"
        return "Start your streak today!"
    if current == longest:
        return "This is your longest streak ever! Keep it going!"
    if longest > current:
        left = longest - current
        return f"{left} more day{'' if left == 1 else 's'} to match your record!"
    return "Keep up the great work!"


def get_workout_streak(
    session: Session,
    user_id: str,
    tz,
    now: Optional[datetime] = None,
) -> WorkoutStreakResponse:
    now = now or utcnow()
    completed = session.exec(
        select(WorkoutLog.completed_at).where(WorkoutLog.user_id == user_id)
    ).all()

    streak = calculate_streaks(completed, tz, today_local(tz, now))
    week_start = as_utc(now) - timedelta(days=7)
    this_week = sum(1 for ts in completed if ts is not None and as_utc(ts) >= week_start)

    return WorkoutStreakResponse(
        current_streak=streak.current_streak,
        longest_streak=streak.longest_streak,
        this_week_workouts=this_week,
        streak_status=streak_status(streak.current_streak),
        encouragement=encouragement(streak.current_streak, streak.longest_streak),
    )
