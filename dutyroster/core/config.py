# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Core configuration — all env-driven, zero hardcode.
Single source of truth for every tunable parameter.
"""

import os


class Settings:
    """Application settings loaded from environment variables."""

    SERVICE_NAME: str = os.getenv("SERVICE_NAME", "roster-engine")
    SERVICE_VERSION: str = os.getenv("SERVICE_VERSION", "1.0.0")
    SERVICE_PORT: int = int(os.getenv("SERVICE_PORT", "8010"))

    PERSISTENCE_SERVICE_URL: str = os.getenv(
        "PERSISTENCE_SERVICE_URL", "http://roster-store:8011"
    )
    PERSISTENCE_TIMEOUT: float = float(os.getenv("PERSISTENCE_TIMEOUT", "3.0"))

    DEFAULT_SHUFFLE_MODE: str = os.getenv("DEFAULT_SHUFFLE_MODE", "all")
    DEFAULT_HISTORY_LIMIT: int = int(os.getenv("DEFAULT_HISTORY_LIMIT", "100"))
    MAX_HISTORY_SIZE: int = int(os.getenv("MAX_HISTORY_SIZE", "10000"))
    MAX_AVAILABILITY_RANGE_DAYS: int = int(os.getenv("MAX_AVAILABILITY_RANGE_DAYS", "366"))

    CORS_ORIGINS: list[str] = os.getenv("CORS_ORIGINS", "*").split(",")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    SEED_DEMO_ROSTER: bool = (
        os.getenv("SEED_DEMO_ROSTER", "true").lower() == "true"
    )


settings = Settings()
