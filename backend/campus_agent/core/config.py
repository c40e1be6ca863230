"""Application configuration managed via environment variables."""
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "Campus Agent Planner"
    debug: bool = False
    log_level: str = "INFO"
    database_url: str = "postgresql+psycopg2://campus@localhost:5432/campus_agent"
    plan_store_backend: str = "memory"
    opik_enabled: bool = False
    opik_api_key: str | None = None
    opik_project: str = "campus-agent"
    openai_api_key: str | None = None
    openai_model: str = "gpt-4o"
    llm_timeout_seconds: float = 20.0
    daily_study_cap_hours: float = 4.0
    urgent_threshold_days: int = 2
    study_day_start: str = "08:00"
    study_day_end: str = "22:00"
    intensity_low_max_hours: float = 10.0
    intensity_high_min_hours: float = 25.0


@lru_cache
def get_settings() -> Settings:
    """Return a cached Settings instance."""
    return Settings()


settings = get_settings()
