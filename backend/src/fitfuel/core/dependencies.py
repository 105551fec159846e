from __future__ import annotations

from typing import Optional

from fastapi import Cookie, Depends, Header, HTTPException

from fitfuel.core.config import Settings, get_settings
from fitfuel.services.estimator import NutritionEstimator
from fitfuel.services.usda import UsdaClient
from fitfuel.utils.dates import get_timezone


def get_current_user_id(x_user_id: Optional[str] = Header(default=None)) -> str:
    # Authentication happens upstream; the gateway forwards the user id.
    user_id = (x_user_id or "").strip()
    if not user_id:
        raise HTTPException(status_code=401, detail="Missing X-User-Id header")
    return user_id


def get_user_timezone(
    x_user_timezone: Optional[str] = Header(default=None),
    user_timezone: Optional[str] = Cookie(default=None),
    settings: Settings = Depends(get_settings),
):
    """Header, then cookie, then the configured default; unknown names mean UTC."""
    return get_timezone(x_user_timezone or user_timezone or settings.default_timezone)


def get_usda_client(settings: Settings = Depends(get_settings)) -> UsdaClient:
    return UsdaClient(
        api_key=settings.usda_api_key,
        base_url=settings.usda_base_url,
        timeout=settings.usda_timeout,
    )


def get_estimator(settings: Settings = Depends(get_settings)) -> Optional[NutritionEstimator]:
    if not settings.estimator_enabled:
        return None
    return NutritionEstimator(
        model=settings.ollama_model,
        endpoint=settings.ollama_url,
        timeout=settings.ollama_timeout,
    )
