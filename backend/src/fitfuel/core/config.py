from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict


BACKEND_ROOT = Path(__file__).resolve().parents[3]
ENV_PATH = BACKEND_ROOT / ".env"

# Load environment variables as early as possible so Settings picks them up.
if ENV_PATH.exists():
    load_dotenv(ENV_PATH)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(ENV_PATH),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = "FitFuel API"
    app_version: str = "0.1.0"
    docs_url: str = "/docs"
    database_url: str = f"sqlite:///{(BACKEND_ROOT / 'fitfuel.db').as_posix()}"
    database_echo: bool = False
    log_level: str = "INFO"

    # Wall-clock used for day bucketing when the request carries no timezone.
    default_timezone: str = "UTC"

    usda_api_key: str = "DEMO_KEY"
    usda_base_url: str = "https://api.nal.usda.gov/fdc/v1"
    usda_timeout: float = 10.0
    usda_page_size: int = 10

    estimator_enabled: bool = True
    ollama_url: str = "http://127.0.0.1:11434"
    ollama_model: str = "llama3.1"
    ollama_timeout: float = 60.0

    cache_stale_days: int = 90

    # Daily goals reported alongside nutrition analytics
    daily_calorie_target: int = 2000
    daily_protein_target: int = 150
    daily_carbs_target: int = 200
    daily_fats_target: int = 70


@lru_cache
def get_settings() -> Settings:
    return Settings()
