"""Configuration settings for the training analytics engine."""

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings


# __file__ = <root>/src/training_analytics/config.py
PACKAGE_ROOT = Path(__file__).parent
PROJECT_ROOT = PACKAGE_ROOT.parent.parent


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # API settings
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    debug: bool = False

    # CORS
    cors_origins: list[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]

    # Logging
    log_level: str = "INFO"

    # Database
    db_path: Path | None = None

    # Breakthrough detection
    breakthrough_lookback_days: int = 30
    min_ftp_increase_pct: float = 3.0
    min_pace_improvement_pct: float = 2.0

    # TRIMP defaults when the profile does not carry them
    default_resting_hr: int = 50
    default_gender: str = "male"

    def model_post_init(self, __context) -> None:
        """Set default database path after initialization."""
        if self.db_path is None:
            self.db_path = PROJECT_ROOT / "training_analytics.db"

    class Config:
        env_prefix = "TRAINING_ANALYTICS_"
        env_file = str(PROJECT_ROOT / ".env")
        env_file_encoding = "utf-8"
        extra = "ignore"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
