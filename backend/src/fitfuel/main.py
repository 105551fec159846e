from __future__ import annotations

import logging

from fastapi import FastAPI, Response
from fastapi.responses import JSONResponse, RedirectResponse
from sqlalchemy import inspect
from starlette.requests import Request

from fitfuel.core import database
from fitfuel.core.config import get_settings
from fitfuel.routers import foods, health, meals, summary, workouts
from fitfuel.services.resolver import NutritionUnresolved

logger = logging.getLogger(__name__)


CORE_ROUTERS = (
    (health.router, {"tags": ["health"]}),
    (foods.router, {}),
    (meals.router, {}),
    (workouts.router, {}),
    (summary.router, {}),
)


def create_app() -> FastAPI:
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    application = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        docs_url=settings.docs_url,
    )

    @application.middleware("http")
    async def enforce_utf8_json(request: Request, call_next):
        response = await call_next(request)
        if response.headers.get("content-type", "").startswith("application/json"):
            response.headers["content-type"] = "application/json; charset=utf-8"
        return response

    @application.exception_handler(NutritionUnresolved)
    async def nutrition_unresolved_handler(request: Request, exc: NutritionUnresolved):
        logger.info("Nutrition unresolved for %s", exc.food_name)
        return JSONResponse(
            status_code=422,
            content={
                "error": "nutrition_unresolved",
                "food": exc.food_name,
                "hint": "Enter the nutrition manually via POST /foods/manual",
            },
        )

    @application.get("/favicon.ico")
    def favicon():
        return Response(status_code=204)

    for router, include_kwargs in CORE_ROUTERS:
        application.include_router(router, **include_kwargs)

    @application.get("/", include_in_schema=False)
    def root():
        target = settings.docs_url or "/docs"
        return RedirectResponse(target)

    @application.get("/__dbcheck", include_in_schema=False)
    def dbcheck():
        return {"tables": inspect(database.engine).get_table_names()}

    @application.on_event("startup")
    def _startup():
        database.init_db()

    return application


app = create_app()
