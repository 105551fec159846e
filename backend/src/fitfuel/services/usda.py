# backend/src/fitfuel/services/usda.py
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import requests

from fitfuel.schemas import NutritionData

logger = logging.getLogger(__name__)

# FoodData Central nutrient ids
NUTRIENT_IDS: Dict[str, int] = {
    "calories": 1008,
    "protein": 1003,
    "carbs": 1005,
    "fats": 1004,
    "fiber": 1079,
    "sugar": 2000,
    "sodium": 1093,
    "potassium": 1092,
    "calcium": 1087,
    "iron": 1089,
    "vitamin_c": 1162,
    "vitamin_a": 1106,
}
CORE_NUTRIENTS = ("calories", "protein", "carbs", "fats")

DEFAULT_DATA_TYPES = ["Foundation", "SR Legacy", "Survey (FNDDS)"]


class UsdaError(Exception):
    """Non-success answer from FoodData Central."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


def _http_session() -> requests.Session:
    s = requests.Session()
    s.trust_env = False  # ignore proxy env vars
    s.headers.update({
        "Accept": "application/json",
        "User-Agent": "FitFuel/0.1",
    })
    return s


def _nutrient_id(entry: Dict[str, Any]) -> Optional[int]:
    # search results carry nutrientId, detail responses nest it under nutrient.id
    nid = entry.get("nutrientId")
    if nid is None:
        nid = (entry.get("nutrient") or {}).get("id")
    try:
        return int(nid) if nid is not None else None
    except (TypeError, ValueError):
        return None


def _nutrient_value(entry: Dict[str, Any]) -> Optional[float]:
    value = entry.get("value")
    if value is None:
        value = entry.get("amount")
    try:
        return float(value) if value is not None else None
    except (TypeError, ValueError):
        return None


def parse_usda_food(food: Dict[str, Any]) -> NutritionData:
    """Map a FoodData Central food (search hit or detail) onto ``NutritionData``."""
    by_id: Dict[int, float] = {}
    for entry in food.get("foodNutrients") or []:
        nid = _nutrient_id(entry)
        value = _nutrient_value(entry)
        if nid is not None and value is not None:
            by_id[nid] = value

    values: Dict[str, Optional[float]] = {}
    for key, nid in NUTRIENT_IDS.items():
        value = by_id.get(nid)
        if value is None and key in CORE_NUTRIENTS:
            value = 0.0
        values[key] = value

    serving_size = food.get("servingSize") or 100
    serving_unit = food.get("servingSizeUnit") or "g"
    try:
        serving_size = float(serving_size)
    except (TypeError, ValueError):
        serving_size = 100.0

    return NutritionData(
        food_name=food.get("description") or food.get("lowercaseDescription") or "unknown",
        fdc_id=food.get("fdcId"),
        serving_size=serving_size,
        serving_unit=str(serving_unit).lower(),
        data_source="usda",
        **values,
    )


class UsdaClient:
    """Thin FoodData Central client; one instance per request."""

    def __init__(
        self,
        api_key: str = "DEMO_KEY",
        base_url: str = "https://api.nal.usda.gov/fdc/v1",
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ):
        self.api_key = (api_key or "DEMO_KEY").strip().strip('"').strip("'")
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or _http_session()

    def _get(self, path: str, params: Dict[str, Any]) -> Dict[str, Any]:
        url = f"{self.base_url}/{path.lstrip('/')}"
        r = self.session.get(url, params={"api_key": self.api_key, **params}, timeout=self.timeout)
        logger.debug("FDC GET %s -> %s", path, r.status_code)
        if r.status_code != 200:
            raise UsdaError(f"FDC request failed: HTTP {r.status_code}", status_code=r.status_code)
        try:
            return r.json()
        except ValueError as exc:
            raise UsdaError("FDC returned invalid JSON") from exc

    def search_foods(
        self,
        query: str,
        page_size: int = 10,
        page_number: int = 1,
        data_type: Optional[List[str]] = None,
    ) -> Dict[str, Any]:
        return self._get(
            "foods/search",
            {
                "query": query,
                "pageSize": page_size,
                "pageNumber": page_number,
                "dataType": ",".join(data_type or DEFAULT_DATA_TYPES),
            },
        )

    def get_food_details(self, fdc_id: int) -> Dict[str, Any]:
        return self._get(f"food/{fdc_id}", {})

    def search_and_parse(self, query: str, limit: int = 5) -> List[NutritionData]:
        data = self.search_foods(query, page_size=limit)
        foods = data.get("foods") or []
        return [parse_usda_food(f) for f in foods[:limit]]
