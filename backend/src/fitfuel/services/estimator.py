# backend/src/fitfuel/services/estimator.py
from __future__ import annotations

import logging
from typing import Optional

import requests

from fitfuel.schemas import NutritionData, NutritionEstimate
from fitfuel.utils.llm import llm_generate_json

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a nutrition expert. Estimate nutritional values for foods that are not "
    "in standard databases. Base the estimate on similar common foods and typical "
    "ingredients. Reply with JSON only, matching the given schema. Values are for the "
    "serving size you state. Be conservative and set confidence to low when unsure. "
    "The rationale is one short sentence on how you derived the numbers."
)


def _user_prompt(food_name: str, quantity: Optional[float], unit: Optional[str]) -> str:
    prompt = f'Estimate nutrition for: "{food_name}"'
    if quantity and unit:
        prompt += f" (serving: {quantity:g} {unit})"
    return prompt


class NutritionEstimator:
    """Last-resort nutrition source backed by an Ollama chat model."""

    def __init__(
        self,
        model: str = "llama3.1",
        endpoint: str = "http://127.0.0.1:11434",
        timeout: float = 60.0,
        session: Optional[requests.Session] = None,
    ):
        self.model = model
        self.endpoint = endpoint
        self.timeout = timeout
        self.session = session

    def estimate(
        self,
        food_name: str,
        quantity: Optional[float] = None,
        unit: Optional[str] = None,
    ) -> NutritionData:
        """Raises ``requests.RequestException`` or ``ValueError`` when no usable estimate comes back."""
        raw = llm_generate_json(
            SYSTEM_PROMPT,
            _user_prompt(food_name, quantity, unit),
            model=self.model,
            endpoint=self.endpoint,
            schema=NutritionEstimate.model_json_schema(),
            temperature=0.3,
            timeout=self.timeout,
            session=self.session,
        )
        if not isinstance(raw, dict):
            raise ValueError("Estimator reply is not a JSON object")
        est = NutritionEstimate.model_validate(raw)
        if not est.rationale.strip():
            raise ValueError("Estimator reply has an empty rationale")

        def r1(v: Optional[float]) -> Optional[float]:
            return None if v is None else round(v, 1)

        logger.info("AI estimate for %s (%s confidence)", food_name, est.confidence)
        return NutritionData(
            food_name=food_name,
            calories=float(round(est.calories)),
            protein=round(est.protein, 1),
            carbs=round(est.carbs, 1),
            fats=round(est.fats, 1),
            fiber=r1(est.fiber),
            sugar=r1(est.sugar),
            sodium=r1(est.sodium),
            serving_size=est.serving_size,
            serving_unit=est.serving_unit,
            data_source="ai_estimate",
            confidence=est.confidence,
            rationale=est.rationale.strip(),
        )
