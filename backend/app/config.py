"""Application configuration."""
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # App settings
    app_name: str = "TakeCut"
    debug: bool = True

    # Server settings
    host: str = "0.0.0.0"
    port: int = 8000

    # Review filters (defaults for segments outside clusters)
    filter_min_confidence: float = 0.7
    filter_high_severity_only: bool = False

    # Clustering
    aggressive_fallback_enabled: bool = True  # Pair nearby segments when nothing else clusters

    # Cut list refinement (applied when a plan request asks for it or refine_cuts is set)
    refine_cuts: bool = False
    merge_threshold_sec: float = 0.5
    transition_buffer_sec: float = 0.15

    # Frontend
    frontend_url: str = "http://localhost:5173"


settings = Settings()
