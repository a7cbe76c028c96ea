import os
from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, model_validator

load_dotenv(dotenv_path=".env")


class TimerSettings(BaseModel):
    """Timer alert thresholds, expressed as remaining seconds"""
    warning_threshold_seconds: int = 600
    critical_threshold_seconds: int = 300
    tick_interval_seconds: float = 1.0

    @model_validator(mode="after")
    def check_thresholds(self) -> "TimerSettings":
        if self.critical_threshold_seconds <= 0 or self.warning_threshold_seconds <= 0:
            raise ValueError("Timer thresholds must be positive")
        if self.critical_threshold_seconds > self.warning_threshold_seconds:
            raise ValueError("Critical threshold cannot exceed the warning threshold")
        if self.tick_interval_seconds <= 0:
            raise ValueError("Tick interval must be positive")
        return self


class ProductionSettings(BaseModel):
    """Defaults offered when a batch goes into the proofer or the oven"""
    default_proof_minutes: int = 45
    default_bake_minutes: int = 18
    default_rotate_at_minutes: int = 9
    default_oven_temp: float = 180
    max_dough_age_minutes: int = 90


class Settings(BaseModel):
    app_name: str = "BreadHub ProofMaster"
    version: str = "1.0.0"
    timers: TimerSettings = TimerSettings()
    production: ProductionSettings = ProductionSettings()
    notification_history_size: int = 200
    supabase_url: Optional[str] = None
    supabase_service_role_key: Optional[str] = None

    @property
    def supabase_configured(self) -> bool:
        return bool(self.supabase_url and self.supabase_service_role_key)


def load_settings() -> Settings:
    """Build settings from environment variables (.env is loaded on import)"""
    timers = TimerSettings(
        warning_threshold_seconds=int(os.getenv("TIMER_WARNING_SECONDS", "600")),
        critical_threshold_seconds=int(os.getenv("TIMER_CRITICAL_SECONDS", "300")),
        tick_interval_seconds=float(os.getenv("TIMER_TICK_INTERVAL_SECONDS", "1.0")),
    )
    production = ProductionSettings(
        default_proof_minutes=int(os.getenv("DEFAULT_PROOF_MINUTES", "45")),
        default_bake_minutes=int(os.getenv("DEFAULT_BAKE_MINUTES", "18")),
        default_rotate_at_minutes=int(os.getenv("DEFAULT_ROTATE_AT_MINUTES", "9")),
        default_oven_temp=float(os.getenv("DEFAULT_OVEN_TEMP", "180")),
        max_dough_age_minutes=int(os.getenv("MAX_DOUGH_AGE_MINUTES", "90")),
    )
    return Settings(
        timers=timers,
        production=production,
        notification_history_size=int(os.getenv("NOTIFICATION_HISTORY_SIZE", "200")),
        supabase_url=os.getenv("SUPABASE_URL"),
        supabase_service_role_key=os.getenv("SUPABASE_SERVICE_ROLE_KEY"),
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings"""
    return load_settings()
