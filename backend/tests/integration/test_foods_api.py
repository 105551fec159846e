import pytest

from fitfuel.schemas import NutritionData
from fitfuel.services.usda import UsdaError


@pytest.mark.asyncio
async def test_resolve_scales_usda_result(client, fake_usda):
    fake_usda.add("greek yogurt", NutritionData(food_name="Yogurt, Greek, plain", calories=59,
                                                protein=10.2, carbs=3.6, fats=0.4))
    r = await client.post("/foods/resolve", json={"food_name": "Greek Yogurt", "quantity": 200, "unit": "g"})
    assert r.status_code == 200, r.text
    d = r.json()
    assert d["data_source"] == "usda"
    assert d["calories"] == 118
    assert d["protein"] == 20.4


@pytest.mark.asyncio
async def test_resolve_unknown_food_is_422_with_hint(client):
    r = await client.post("/foods/resolve", json={"food_name": "dragon stew"})
    assert r.status_code == 422
    body = r.json()
    assert body["error"] == "nutrition_unresolved"
    assert body["food"] == "dragon stew"
    assert "manual" in body["hint"]


@pytest.mark.asyncio
async def test_search_reports_cache_state(client, fake_usda):
    fake_usda.add("lentils", NutritionData(food_name="Lentils, cooked", calories=116))
    first = await client.get("/foods/search", params={"q": "lentils"})
    assert first.status_code == 200
    assert first.json()["cached"] is False
    second = await client.get("/foods/search", params={"q": "lentils"})
    assert second.json()["cached"] is True


@pytest.mark.asyncio
async def test_search_upstream_error_is_502(client, fake_usda):
    fake_usda.error = UsdaError("HTTP 503", status_code=503)
    r = await client.get("/foods/search", params={"q": "lentils"})
    assert r.status_code == 502


@pytest.mark.asyncio
async def test_manual_entry_then_resolve(client, fake_usda):
    r = await client.post("/foods/manual", json={
        "food_name": "House Smoothie", "calories": 280, "protein": 12,
        "serving_size": 1, "serving_unit": "cup",
    })
    assert r.status_code == 201, r.text
    assert r.json()["data_source"] == "manual"

    r = await client.post("/foods/resolve", json={"food_name": "house smoothie", "quantity": 2, "unit": "cups"})
    assert r.status_code == 200
    assert r.json()["calories"] == 560
    assert fake_usda.calls == []


@pytest.mark.asyncio
async def test_cache_cleanup_endpoint(client):
    r = await client.post("/foods/cache/cleanup")
    assert r.status_code == 200
    assert r.json()["deleted"] == 0
