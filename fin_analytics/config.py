"""Configuration management using Pydantic Settings"""

from dataclasses import replace

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from fin_analytics.domain.thresholds import DEFAULT_THRESHOLDS, HeuristicThresholds


class Settings(BaseSettings):
    """Application configuration loaded from FIN_ANALYTICS_* environment variables"""

    model_config = SettingsConfigDict(
        env_prefix="FIN_ANALYTICS_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    # Service
    service_name: str = "fin-analytics"
    log_level: str = "INFO"

    # Recurring detection
    normalize_merchant_names: bool = False  # fuzzy grouping ("Tesco Store #12" == "tesco")
    amount_tolerance: float = Field(default=DEFAULT_THRESHOLDS.amount_tolerance, gt=0)
    stable_confidence: float = Field(default=DEFAULT_THRESHOLDS.stable_confidence, ge=0, le=1)
    unstable_confidence: float = Field(default=DEFAULT_THRESHOLDS.unstable_confidence, ge=0, le=1)

    # Forecasting
    forecast_horizon_days: int = Field(default=DEFAULT_THRESHOLDS.forecast_horizon_days, ge=0)
    spend_window_days: int = Field(default=DEFAULT_THRESHOLDS.spend_window_days, gt=0)

    def heuristic_thresholds(self) -> HeuristicThresholds:
        """Defaults with the environment overrides applied"""
        return replace(
            DEFAULT_THRESHOLDS,
            amount_tolerance=self.amount_tolerance,
            stable_confidence=self.stable_confidence,
            unstable_confidence=self.unstable_confidence,
            forecast_horizon_days=self.forecast_horizon_days,
            spend_window_days=self.spend_window_days,
        )


settings = Settings()
