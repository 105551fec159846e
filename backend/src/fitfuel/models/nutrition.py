from datetime import datetime
from typing import Optional

from sqlalchemy import Column, DateTime
from sqlmodel import Field, SQLModel

from fitfuel.utils.dates import utcnow


class NutritionCacheEntry(SQLModel, table=True):
    """Per-serving nutrition memoized under the normalized food name."""

    __tablename__ = "nutrition_cache"

    id: Optional[int] = Field(default=None, primary_key=True)
    food_name: str = Field(index=True, unique=True)  # lowercased + trimmed
    fdc_id: Optional[int] = None

    calories: float = 0.0
    protein: Optional[float] = None
    carbs: Optional[float] = None
    fats: Optional[float] = None
    fiber: Optional[float] = None
    sugar: Optional[float] = None

    sodium: Optional[float] = None
    potassium: Optional[float] = None
    calcium: Optional[float] = None
    iron: Optional[float] = None
    vitamin_c: Optional[float] = None
    vitamin_a: Optional[float] = None

    serving_size: float = 100.0
    serving_unit: str = "g"

    data_source: str = Field(default="usda", index=True)  # "usda" | "manual"
    last_updated: datetime = Field(
        default_factory=utcnow, sa_column=Column(DateTime(timezone=True), nullable=False, index=True)
    )
