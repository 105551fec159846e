from datetime import datetime
from typing import Optional

from sqlalchemy import Column, DateTime
from sqlmodel import Field, SQLModel, UniqueConstraint

from fitfuel.utils.dates import utcnow


class CalorieTracking(SQLModel, table=True):
    """Daily summary per (user, local date); always rebuilt from the logs."""

    __tablename__ = "calorie_tracking"
    __table_args__ = (UniqueConstraint("user_id", "date", name="uq_user_date"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: str = Field(index=True)
    date: str = Field(index=True, description="YYYY-MM-DD in the viewer's timezone")

    total_calories_consumed: float = 0.0
    total_protein_consumed: float = 0.0
    total_carbs_consumed: float = 0.0
    total_fats_consumed: float = 0.0
    total_calories_burned: float = 0.0
    net_calories: float = 0.0

    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime(timezone=True), nullable=False))
    updated_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime(timezone=True), nullable=False))
