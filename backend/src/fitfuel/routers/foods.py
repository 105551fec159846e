# backend/src/fitfuel/routers/foods.py
from __future__ import annotations

from typing import Optional

import requests
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlmodel import Session

from fitfuel.core.config import Settings, get_settings
from fitfuel.core.database import get_session
from fitfuel.core.dependencies import get_estimator, get_usda_client
from fitfuel.schemas import (
    CacheCleanupResponse,
    FoodQuery,
    FoodSearchResponse,
    ManualNutritionRequest,
    NutritionData,
)
from fitfuel.services.estimator import NutritionEstimator
from fitfuel.services.resolver import (
    cleanup_stale_cache,
    resolve_nutrition,
    save_manual_nutrition,
    search_food,
)
from fitfuel.services.usda import UsdaClient, UsdaError

router = APIRouter(prefix="/foods", tags=["foods"])


@router.get("/search", response_model=FoodSearchResponse)
def foods_search(
    q: str = Query(..., min_length=2, description="Free text, e.g. 'greek yogurt'"),
    limit: int = Query(10, ge=1, le=25),
    session: Session = Depends(get_session),
    usda: UsdaClient = Depends(get_usda_client),
):
    try:
        return search_food(session, q.strip(), usda, limit=limit)
    except (requests.RequestException, UsdaError) as e:
        raise HTTPException(status_code=502, detail=f"USDA search failed: {e}")


@router.post("/resolve", response_model=NutritionData)
def foods_resolve(
    req: FoodQuery,
    session: Session = Depends(get_session),
    usda: UsdaClient = Depends(get_usda_client),
    estimator: Optional[NutritionEstimator] = Depends(get_estimator),
):
    """Nutrition for a quantity of a food: cache, USDA, then AI estimate."""
    return resolve_nutrition(session, req.food_name, req.quantity, req.unit, usda=usda, estimator=estimator)


@router.post("/manual", response_model=NutritionData, status_code=201)
def foods_manual(req: ManualNutritionRequest, session: Session = Depends(get_session)):
    return save_manual_nutrition(session, req)


@router.post("/cache/cleanup", response_model=CacheCleanupResponse)
def foods_cache_cleanup(
    days: Optional[int] = Query(None, ge=1),
    session: Session = Depends(get_session),
    settings: Settings = Depends(get_settings),
):
    deleted, cutoff = cleanup_stale_cache(session, days=days or settings.cache_stale_days)
    return CacheCleanupResponse(deleted=deleted, older_than=cutoff)
