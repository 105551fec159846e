from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from fitfuel.models.meals import MealType
from fitfuel.models.workouts import Intensity

NutritionSource = Literal["usda", "manual", "ai_estimate"]
Confidence = Literal["high", "medium", "low"]


# ----------------------------
# Nutrition
# ----------------------------

class NutritionData(BaseModel):
    food_name: str
    fdc_id: Optional[int] = None

    calories: float = 0.0
    protein: float = 0.0
    carbs: float = 0.0
    fats: float = 0.0
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

    data_source: NutritionSource = "usda"
    confidence: Optional[Confidence] = None
    rationale: Optional[str] = None

    @property
    def estimated(self) -> bool:
        return self.data_source == "ai_estimate"


class NutritionEstimate(BaseModel):
    """Structured output requested from the LLM."""

    model_config = ConfigDict(extra="ignore")

    food_name: str = Field(..., description="The food name being estimated")
    calories: float = Field(..., ge=0, description="Estimated calories per serving")
    protein: float = Field(..., ge=0, description="Protein in grams per serving")
    carbs: float = Field(..., ge=0, description="Carbohydrates in grams per serving")
    fats: float = Field(..., ge=0, description="Total fat in grams per serving")
    fiber: Optional[float] = Field(default=None, ge=0, description="Fiber in grams per serving")
    sugar: Optional[float] = Field(default=None, ge=0, description="Sugar in grams per serving")
    sodium: Optional[float] = Field(default=None, ge=0, description="Sodium in mg per serving")
    serving_size: float = Field(..., gt=0, description="Typical serving size")
    serving_unit: str = Field(..., min_length=1, description="Unit for the serving size (g, oz, cup, piece)")
    confidence: Confidence
    rationale: str = Field(..., min_length=1, description="One line on how the estimate was derived")


class FoodQuery(BaseModel):
    food_name: str = Field(..., min_length=1)
    quantity: float = Field(1.0, gt=0)
    unit: str = Field("serving", min_length=1)


class ManualNutritionRequest(BaseModel):
    food_name: str = Field(..., min_length=1)
    calories: float = Field(..., ge=0)
    protein: Optional[float] = Field(default=None, ge=0)
    carbs: Optional[float] = Field(default=None, ge=0)
    fats: Optional[float] = Field(default=None, ge=0)
    serving_size: float = Field(100.0, gt=0)
    serving_unit: str = "g"


class FoodSearchResponse(BaseModel):
    query: str
    cached: bool
    results: List[NutritionData] = []


class CacheCleanupResponse(BaseModel):
    deleted: int
    older_than: datetime


# ----------------------------
# Meals
# ----------------------------

class FoodItem(BaseModel):
    name: str = Field(..., min_length=1)
    quantity: float = Field(..., gt=0)
    unit: str = Field(..., min_length=1)
    calories: float = Field(..., ge=0)
    protein: Optional[float] = Field(default=None, ge=0)
    carbs: Optional[float] = Field(default=None, ge=0)
    fats: Optional[float] = Field(default=None, ge=0)
    fiber: Optional[float] = Field(default=None, ge=0)
    sugar: Optional[float] = Field(default=None, ge=0)
    sodium: Optional[float] = Field(default=None, ge=0)
    data_source: NutritionSource = "manual"


class MealTotals(BaseModel):
    calories: float = 0.0
    protein: float = 0.0
    carbs: float = 0.0
    fats: float = 0.0


class MealPreviewRequest(BaseModel):
    meal_type: MealType
    food_items: List[FoodQuery] = Field(..., min_length=1)
    notes: Optional[str] = None
    logged_at: Optional[datetime] = None


class MealPreview(BaseModel):
    preview: bool = True
    meal_type: MealType
    food_items: List[FoodItem]
    notes: Optional[str] = None
    logged_at: Optional[datetime] = None
    totals: MealTotals
    lookup_details: List[str] = []
    estimates: List[str] = []
    message: str


class MealConfirmRequest(BaseModel):
    meal_type: MealType
    food_items: List[FoodItem] = Field(..., min_length=1)
    notes: Optional[str] = None
    recipe_id: Optional[str] = None
    image_url: Optional[str] = None
    logged_at: Optional[datetime] = None


class MealLogUpdate(BaseModel):
    meal_type: Optional[MealType] = None
    food_items: Optional[List[FoodItem]] = None
    notes: Optional[str] = None
    logged_at: Optional[datetime] = None


class MealLogRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: str
    meal_type: MealType
    food_items: List[Dict[str, Any]]
    recipe_id: Optional[str] = None
    total_calories: float
    total_protein: float
    total_carbs: float
    total_fats: float
    notes: Optional[str] = None
    image_url: Optional[str] = None
    nutrition_source: str
    logged_at: datetime


class MealDayResponse(BaseModel):
    date: str
    meals: List[MealLogRead]
    totals: MealTotals


# ----------------------------
# Workouts
# ----------------------------

class Exercise(BaseModel):
    name: str = Field(..., min_length=1)
    sets: Optional[int] = Field(default=None, ge=0)
    reps: Optional[int] = Field(default=None, ge=0)
    weight: Optional[float] = Field(default=None, ge=0)
    weight_unit: Optional[Literal["lbs", "kg"]] = None
    duration_minutes: Optional[float] = Field(default=None, ge=0)
    intensity: Optional[Intensity] = None
    notes: Optional[str] = None


class WorkoutPreviewRequest(BaseModel):
    title: str = Field(..., min_length=1)
    exercises: List[Exercise] = []
    workout_date: Optional[str] = Field(
        default=None, description="'today', 'yesterday', '2 days ago', 'Monday', 'Nov 23' or YYYY-MM-DD"
    )
    total_duration_minutes: Optional[int] = Field(default=None, gt=0)
    overall_intensity: Optional[Intensity] = None
    notes: Optional[str] = None


class WorkoutDraft(BaseModel):
    title: str
    exercises: List[Exercise]
    total_duration_minutes: int
    intensity: Intensity
    estimated_calories: int
    notes: Optional[str] = None
    workout_date: str  # YYYY-MM-DD, local


class WorkoutPreview(BaseModel):
    preview: bool = True
    workout: WorkoutDraft
    exercise_summary: List[str]
    assumptions: Dict[str, str] = {}
    message: str


class WorkoutConfirmRequest(BaseModel):
    title: str = Field(..., min_length=1)
    exercises: List[Exercise] = []
    workout_date: Optional[str] = None
    total_duration_minutes: int = Field(..., gt=0)
    intensity: Intensity
    estimated_calories: int = Field(..., ge=0)
    notes: Optional[str] = None


class WorkoutLogUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1)
    exercises: Optional[List[Exercise]] = None
    total_duration_minutes: Optional[int] = Field(default=None, gt=0)
    calories_burned: Optional[int] = Field(default=None, ge=0)
    intensity: Optional[Intensity] = None
    notes: Optional[str] = None
    completed_at: Optional[datetime] = None


class WorkoutLogRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: str
    title: str
    exercises: List[Dict[str, Any]]
    total_duration_minutes: int
    calories_burned: Optional[int] = None
    intensity: Optional[Intensity] = None
    notes: Optional[str] = None
    completed_at: datetime


class WorkoutStreakResponse(BaseModel):
    current_streak: int
    longest_streak: int
    this_week_workouts: int = 0
    streak_status: str
    encouragement: str


# ----------------------------
# Daily summary
# ----------------------------

class DailyNutrition(BaseModel):
    user_id: str
    date: str
    total_calories_consumed: float = 0.0
    total_protein_consumed: float = 0.0
    total_carbs_consumed: float = 0.0
    total_fats_consumed: float = 0.0
    total_calories_burned: float = 0.0
    net_calories: float = 0.0


class AnalyticsDay(BaseModel):
    date: str
    calories: float = 0.0
    protein: float = 0.0
    carbs: float = 0.0
    fats: float = 0.0
    burned: float = 0.0
    net: float = 0.0


class AnalyticsSummary(BaseModel):
    total_days: int = 0
    avg_calories: int = 0
    avg_protein: int = 0
    avg_carbs: int = 0
    avg_fats: int = 0
    avg_burned: int = 0
    total_calories: float = 0.0
    total_protein: float = 0.0
    total_carbs: float = 0.0
    total_fats: float = 0.0
    total_burned: float = 0.0


class NutritionTargets(BaseModel):
    calories: int = 2000
    protein: int = 150
    carbs: int = 200
    fats: int = 70


class NutritionAnalytics(BaseModel):
    start: str
    end: str
    days: List[AnalyticsDay]
    summary: AnalyticsSummary
    targets: NutritionTargets
