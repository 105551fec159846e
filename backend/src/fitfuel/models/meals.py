from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from sqlalchemy import JSON, Column, DateTime
from sqlmodel import Field, SQLModel

from fitfuel.utils.dates import utcnow


class MealType(str, Enum):
    breakfast = "breakfast"
    lunch = "lunch"
    dinner = "dinner"
    snack = "snack"


class MealLog(SQLModel, table=True):
    __tablename__ = "meal_logs"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: str = Field(index=True)
    meal_type: MealType = Field(index=True)

    # [{name, quantity, unit, calories, protein, carbs, fats, ..., data_source}]
    food_items: List[Dict[str, Any]] = Field(
        default_factory=list, sa_column=Column(JSON, nullable=False)
    )
    recipe_id: Optional[str] = None

    # Projection of food_items, recomputed whenever the items change
    total_calories: float = 0.0
    total_protein: float = 0.0
    total_carbs: float = 0.0
    total_fats: float = 0.0

    notes: Optional[str] = None
    image_url: Optional[str] = None
    nutrition_source: str = Field(default="api")  # "api" | "manual" | "recipe"

    logged_at: datetime = Field(
        default_factory=utcnow, sa_column=Column(DateTime(timezone=True), nullable=False, index=True)
    )
