from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from sqlalchemy import JSON, Column, DateTime
from sqlmodel import Field, SQLModel

from fitfuel.utils.dates import utcnow


class Intensity(str, Enum):
    low = "low"
    medium = "medium"
    high = "high"


class WorkoutLog(SQLModel, table=True):
    __tablename__ = "workout_logs"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: str = Field(index=True)
    title: str

    # [{name, sets, reps, weight, weight_unit, duration_minutes, intensity, notes}]
    exercises: List[Dict[str, Any]] = Field(
        default_factory=list, sa_column=Column(JSON, nullable=False)
    )

    total_duration_minutes: int = Field(default=0, ge=0)
    calories_burned: Optional[int] = Field(default=None, ge=0)
    intensity: Optional[Intensity] = None
    notes: Optional[str] = None

    completed_at: datetime = Field(
        default_factory=utcnow, sa_column=Column(DateTime(timezone=True), nullable=False, index=True)
    )
