# app/config.py

from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # App
    app_name: str = "Recon API"
    app_env: str = "development"
    debug: bool = True
    log_level: str = "INFO"
    frontend_url: str = "http://localhost:3000"
    api_url: str = "http://localhost:8000"

    # Supabase
    supabase_url: str
    supabase_anon_key: str
    supabase_service_role_key: str

    # Matching config
    match_threshold: float = 0.80
    exception_severity_threshold: float = 0.50
    exact_match_bonus: float = 0.10
    default_fuzzy_threshold: float = 0.80
    range_decay_factor: float = 0.20
    amount_tolerance_divisor: float = 10.0
    high_confidence_threshold: float = 0.95

    # Record identity (first non-empty field wins)
    source_id_fields: list[str] = ["id", "order_id", "charge_id"]
    target_id_fields: list[str] = ["id", "transaction_id", "charge_id"]

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


@lru_cache()
def get_settings() -> Settings:
    """Cached settings instance."""
    return Settings()
