from datetime import datetime

import pytest
import pytz

from fitfuel.models.meals import MealLog
from fitfuel.schemas import NutritionData
from fitfuel.services.resolver import save_to_cache
from fitfuel.utils.dates import as_utc


def _seed(db_session):
    save_to_cache(db_session, NutritionData(food_name="apple", calories=95, protein=0.5, carbs=25,
                                            fats=0.3, serving_size=1, serving_unit="piece"))
    save_to_cache(db_session, NutritionData(food_name="peanut butter", calories=588, protein=25,
                                            carbs=20, fats=50))


def _item(name, quantity, unit, calories, **kw):
    return {"name": name, "quantity": quantity, "unit": unit, "calories": calories, **kw}


@pytest.mark.asyncio
async def test_preview_does_not_write(client, db_session, headers):
    _seed(db_session)
    r = await client.post("/meals/preview", json={
        "meal_type": "snack",
        "food_items": [
            {"food_name": "apple", "quantity": 2, "unit": "piece"},
            {"food_name": "peanut butter", "quantity": 32, "unit": "g"},
        ],
    })
    assert r.status_code == 200, r.text
    d = r.json()
    assert d["preview"] is True
    assert [i["calories"] for i in d["food_items"]] == [190, 188]
    assert d["totals"]["calories"] == 378
    assert len(d["lookup_details"]) == 2
    assert d["estimates"] == []

    r = await client.get("/meals", headers=headers)
    assert r.json() == []


@pytest.mark.asyncio
async def test_preview_flags_ai_estimates(client, fake_estimator):
    fake_estimator.add("space food", NutritionData(
        food_name="space food", calories=200, serving_size=1, serving_unit="serving",
        data_source="ai_estimate", confidence="low", rationale="Freeze-dried ration guess."))
    r = await client.post("/meals/preview", json={
        "meal_type": "lunch", "food_items": [{"food_name": "space food"}],
    })
    assert r.status_code == 200, r.text
    d = r.json()
    assert d["food_items"][0]["data_source"] == "ai_estimate"
    assert "low confidence" in d["estimates"][0]


@pytest.mark.asyncio
async def test_preview_unresolved_item(client):
    r = await client.post("/meals/preview", json={
        "meal_type": "dinner", "food_items": [{"food_name": "void soup"}],
    })
    assert r.status_code == 422
    assert r.json()["error"] == "nutrition_unresolved"


@pytest.mark.asyncio
async def test_confirm_requires_user(client):
    r = await client.post("/meals/confirm", json={
        "meal_type": "snack", "food_items": [_item("apple", 1, "piece", 95)],
    })
    assert r.status_code == 401


@pytest.mark.asyncio
async def test_confirm_recomputes_totals_and_updates_summary(client, headers):
    r = await client.post("/meals/confirm", headers=headers, json={
        "meal_type": "breakfast",
        "logged_at": "2025-01-15T08:00:00Z",
        "food_items": [
            _item("oats", 80, "g", 311.2, protein=10.8, carbs=47.0, fats=5.6, data_source="usda"),
            _item("milk", 1, "cup", 102, protein=8.3, carbs=12.2, fats=2.4, data_source="usda"),
        ],
    })
    assert r.status_code == 201, r.text
    meal = r.json()
    assert meal["total_calories"] == 413
    assert meal["total_protein"] == 19.1
    assert meal["nutrition_source"] == "api"

    r = await client.get("/summary/day", headers=headers, params={"day": "2025-01-15"})
    assert r.status_code == 200
    assert r.json()["total_calories_consumed"] == 413


@pytest.mark.asyncio
async def test_day_view_uses_viewer_timezone(client, headers):
    # 23:30 in New York
    await client.post("/meals/confirm", headers=headers, json={
        "meal_type": "snack", "logged_at": "2025-01-15T04:30:00Z",
        "food_items": [_item("cookie", 1, "piece", 150)],
    })
    ny = {**headers, "X-User-Timezone": "America/New_York"}
    r = await client.get("/meals/day", headers=ny, params={"day": "2025-01-14"})
    assert r.status_code == 200
    assert len(r.json()["meals"]) == 1
    assert r.json()["totals"]["calories"] == 150

    r = await client.get("/meals/day", headers=headers, params={"day": "2025-01-14"})
    assert r.json()["meals"] == []


@pytest.mark.asyncio
async def test_offset_timestamp_is_stored_as_utc(client, db_session, headers):
    # 01:30 at +02:00 is 23:30 UTC the day before
    r = await client.post("/meals/confirm", headers=headers, json={
        "meal_type": "snack", "logged_at": "2025-01-15T01:30:00+02:00",
        "food_items": [_item("cookie", 1, "piece", 150)],
    })
    assert r.status_code == 201, r.text

    stored = db_session.get(MealLog, r.json()["id"])
    assert as_utc(stored.logged_at) == pytz.UTC.localize(datetime(2025, 1, 14, 23, 30))

    d14 = (await client.get("/summary/day", headers=headers, params={"day": "2025-01-14"})).json()
    d15 = (await client.get("/summary/day", headers=headers, params={"day": "2025-01-15"})).json()
    assert d14["total_calories_consumed"] == 150
    assert d15["total_calories_consumed"] == 0


@pytest.mark.asyncio
async def test_update_moves_meal_and_reaggregates_both_days(client, headers):
    r = await client.post("/meals/confirm", headers=headers, json={
        "meal_type": "lunch", "logged_at": "2025-01-15T12:00:00Z",
        "food_items": [_item("salad", 1, "serving", 300)],
    })
    meal_id = r.json()["id"]

    r = await client.patch(f"/meals/{meal_id}", headers=headers, json={
        "logged_at": "2025-01-16T12:00:00Z",
        "food_items": [_item("salad", 2, "serving", 600)],
    })
    assert r.status_code == 200, r.text
    assert r.json()["total_calories"] == 600

    d15 = (await client.get("/summary/day", headers=headers, params={"day": "2025-01-15"})).json()
    d16 = (await client.get("/summary/day", headers=headers, params={"day": "2025-01-16"})).json()
    assert d15["total_calories_consumed"] == 0
    assert d16["total_calories_consumed"] == 600


@pytest.mark.asyncio
async def test_delete_and_ownership(client, headers):
    r = await client.post("/meals/confirm", headers=headers, json={
        "meal_type": "dinner", "logged_at": "2025-01-15T19:00:00Z",
        "food_items": [_item("pasta", 1, "serving", 700)],
    })
    meal_id = r.json()["id"]

    other = {"X-User-Id": "someone-else"}
    assert (await client.delete(f"/meals/{meal_id}", headers=other)).status_code == 404

    assert (await client.delete(f"/meals/{meal_id}", headers=headers)).status_code == 204
    d = (await client.get("/summary/day", headers=headers, params={"day": "2025-01-15"})).json()
    assert d["total_calories_consumed"] == 0
    assert (await client.delete(f"/meals/{meal_id}", headers=headers)).status_code == 404


@pytest.mark.asyncio
async def test_list_meals_range(client, headers):
    for ts in ("2025-01-10T12:00:00Z", "2025-01-12T12:00:00Z"):
        await client.post("/meals/confirm", headers=headers, json={
            "meal_type": "snack", "logged_at": ts, "food_items": [_item("nuts", 30, "g", 180)],
        })
    r = await client.get("/meals", headers=headers, params={"start": "2025-01-11T00:00:00Z"})
    assert r.status_code == 200
    meals = r.json()
    assert len(meals) == 1
    assert datetime.fromisoformat(meals[0]["logged_at"]).day == 12


@pytest.mark.asyncio
async def test_confirm_rejects_blank_item_name(client, headers):
    r = await client.post("/meals/confirm", headers=headers, json={
        "meal_type": "snack", "food_items": [_item("   ", 1, "piece", 10)],
    })
    assert r.status_code == 400
