"""Configuration management for the HYROX program generator."""

import os
from typing import Optional
from dotenv import load_dotenv

load_dotenv()


class Config:
    """Application configuration."""

    # Elite pace provider
    PACE_API_BASE_URL: str = os.getenv("PACE_API_BASE_URL", "")
    PACE_API_TOKEN: str = os.getenv("PACE_API_TOKEN", "")
    PACE_API_TIMEOUT: float = float(os.getenv("PACE_API_TIMEOUT", "5"))  # seconds

    # Template selection
    DEFAULT_TEMPLATE_ID: str = os.getenv("DEFAULT_TEMPLATE_ID", "hyrox-intermediate-16")

    # Race model
    TRANSITION_SECONDS: float = float(os.getenv("TRANSITION_SECONDS", "45"))  # per roxzone transition
    RUN_SEGMENTS: int = 8  # 8 x 1 km in every HYROX race

    # Athlete type thresholds (scores are relative to benchmark, 100 = at benchmark)
    BALANCED_SCORE_GAP: float = float(os.getenv("BALANCED_SCORE_GAP", "15"))
    BALANCED_MIN_RUNNING_SCORE: float = float(os.getenv("BALANCED_MIN_RUNNING_SCORE", "90"))
    BALANCED_MAX_STATION_SCORE: float = float(os.getenv("BALANCED_MAX_STATION_SCORE", "115"))
    FAST_WEAK_STATION_SCORE: float = float(os.getenv("FAST_WEAK_STATION_SCORE", "120"))
    SLOW_STRONG_STATION_SCORE: float = float(os.getenv("SLOW_STRONG_STATION_SCORE", "95"))

    # Strength programming
    WEIGHT_ROUNDING_KG: float = float(os.getenv("WEIGHT_ROUNDING_KG", "2.5"))
    LONG_RUN_MINUTES: float = float(os.getenv("LONG_RUN_MINUTES", "70"))  # runs this long count as hard days

    # Application
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    @classmethod
    def pace_api_enabled(cls) -> bool:
        """Whether an elite pace provider is configured."""
        return bool(cls.PACE_API_BASE_URL)

    @classmethod
    def get_default_template_id(cls) -> Optional[str]:
        """Template used for unknown goal labels, None when the fallback is disabled."""
        template_id = cls.DEFAULT_TEMPLATE_ID.strip()
        return template_id or None

    @classmethod
    def validate(cls) -> bool:
        """Validate configuration values."""
        if cls.PACE_API_TIMEOUT <= 0:
            raise ValueError("PACE_API_TIMEOUT must be a positive number of seconds")
        if cls.WEIGHT_ROUNDING_KG <= 0:
            raise ValueError("WEIGHT_ROUNDING_KG must be positive")
        if cls.BALANCED_SCORE_GAP < 0:
            raise ValueError("BALANCED_SCORE_GAP cannot be negative")
        return True


config = Config()
