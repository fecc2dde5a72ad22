"""Application configuration."""

from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache


class Settings(BaseSettings):
    """Engine settings loaded from environment variables."""

    # App settings
    app_name: str = "Label Verification Engine"
    debug: bool = False

    # CORS - allow all origins unless restricted by deployment
    cors_origins: list[str] = ["*"]

    # Field comparison
    confidence_threshold: float = 80.0  # Minimum confidence for auto-approval
    abv_tolerance: float = 0.5  # Percentage points
    net_contents_tolerance: float = 0.01  # Relative, 1%
    warning_similarity_threshold: float = 90.0  # rapidfuzz ratio, 0-100

    # Per-field strictness: strict | moderate | lenient
    field_strictness: dict[str, str] = {
        "brand_name": "moderate",
        "fanciful_name": "moderate",
        "class_type": "lenient",
        "alcohol_content": "strict",
        "net_contents": "strict",
        "health_warning": "strict",
        "name_and_address": "lenient",
        "qualifying_phrase": "moderate",
        "country_of_origin": "moderate",
        "grape_varietal": "moderate",
        "appellation_of_origin": "moderate",
        "vintage_year": "strict",
        "sulfite_declaration": "moderate",
        "age_statement": "moderate",
        "state_of_distillation": "moderate",
    }
    strictness_thresholds: dict[str, float] = {
        "strict": 0.80,
        "moderate": 0.75,
        "lenient": 0.65,
    }

    # Fields whose mismatch is a cosmetic discrepancy rather than a correction
    minor_discrepancy_fields: set[str] = {
        "brand_name",
        "fanciful_name",
        "appellation_of_origin",
        "grape_varietal",
    }

    # Extra canonical -> variants entries merged over the built-in table
    accepted_variants: dict[str, dict[str, list[str]]] = {}

    # Auto-approval
    auto_approval_enabled: bool = False

    # Correction deadlines (days)
    conditional_deadline_days: int = 7
    correction_deadline_days: int = 30

    # Fuzzy word matcher
    matcher_min_coverage: float = 0.6
    matcher_max_window: int = 60

    # Pipeline
    pipeline_timeout_seconds: float = 60.0
    batch_concurrency: int = 4

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="LABEL_ENGINE_",
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
