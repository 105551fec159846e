import pytest

from fitfuel.schemas import FoodItem, NutritionData
from fitfuel.utils.nutrition import (
    calculate_totals,
    normalize_food_name,
    normalize_to_100g,
    round_totals,
    scale_nutrition,
    to_food_item,
)


def _per_100g(name="apple", **kw):
    base = dict(food_name=name, calories=52, protein=0.3, carbs=14, fats=0.2, fiber=2.4)
    base.update(kw)
    return NutritionData(**base)


def test_scale_same_unit():
    r = scale_nutrition(_per_100g(), 200, "g")
    assert r.calories == 104
    assert r.carbs == 28.0
    assert r.fiber == 4.8
    assert r.serving_size == 200
    assert r.serving_unit == "g"


def test_scaling_is_linear():
    rec = _per_100g(calories=100, protein=10, carbs=20, fats=4)
    a = scale_nutrition(rec, 50, "g")
    b = scale_nutrition(rec, 150, "g")
    both = scale_nutrition(rec, 200, "g")
    assert both.calories == a.calories + b.calories
    assert both.protein == pytest.approx(a.protein + b.protein)
    assert both.fats == pytest.approx(a.fats + b.fats)


def test_scale_within_weight_category():
    r = scale_nutrition(_per_100g(calories=100), 1, "oz")
    assert r.calories == 28


def test_scale_count_serving():
    rec = NutritionData(food_name="apple", calories=95, protein=0.5, carbs=25, fats=0.3,
                        serving_size=1, serving_unit="piece")
    r = scale_nutrition(rec, 2, "piece")
    assert r.calories == 190
    assert r.carbs == 50.0


def test_volume_request_on_weight_record_uses_density():
    milk = NutritionData(food_name="milk", calories=42, protein=3.4, carbs=5, fats=1)
    r = scale_nutrition(milk, 1, "cup")
    assert r.calories == 102
    assert r.serving_unit == "cup"


def test_unconvertible_request_returns_record_unchanged():
    chicken = _per_100g(name="chicken breast", calories=165)
    r = scale_nutrition(chicken, 1, "cup")
    assert r.calories == 165
    assert r.serving_size == 100
    assert r.serving_unit == "g"


def test_missing_optional_nutrients_stay_missing():
    r = scale_nutrition(_per_100g(fiber=None), 2, "oz")
    assert r.fiber is None
    assert r.sodium is None


def test_normalize_to_100g_from_ounces():
    rec = NutritionData(food_name="cheddar", calories=114, protein=7, carbs=0.4, fats=9.4,
                        serving_size=1, serving_unit="oz")
    r = normalize_to_100g(rec)
    assert r.serving_size == 100
    assert r.calories == 402


def test_normalize_food_name():
    assert normalize_food_name("  Greek Yogurt ") == "greek yogurt"


def test_totals_and_rounding():
    items = [
        FoodItem(name="oats", quantity=80, unit="g", calories=311.2, protein=10.8, carbs=47.0, fats=5.6),
        FoodItem(name="milk", quantity=1, unit="cup", calories=102, protein=8.3, carbs=12.2, fats=2.4),
        FoodItem(name="water", quantity=1, unit="cup", calories=0),
    ]
    t = round_totals(calculate_totals(items))
    assert t.calories == 413
    assert t.protein == 19.1
    assert t.carbs == 59.2
    assert t.fats == 8.0


def test_to_food_item_keeps_source():
    rec = _per_100g(data_source="ai_estimate", confidence="low", rationale="guess")
    item = to_food_item("mystery fruit", 100, "g", rec)
    assert item.data_source == "ai_estimate"
    assert item.calories == 52
