"""
config.py — Centralized Application Configuration Loader

Purpose:
- Define a single source of truth for application settings.
- Load and validate environment variables from `.env` or OS environment.

The projection engine itself reads no settings: a run is a pure function of
its Assumptions. Settings only shape the layers around it:
- Logging level
- HTTP surface (CORS)
- Sensitivity sweep grid sizes

This module does NOT:
- Make external API calls.
- Modify runtime settings.
"""

from pathlib import Path
from typing import Any, List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# config.py is at: backend/dcf_engine/core/config.py
# .env should be at: backend/.env
_CONFIG_DIR = Path(__file__).parent  # backend/dcf_engine/core
_BACKEND_DIR = _CONFIG_DIR.parent.parent  # backend
_ENV_FILE = _BACKEND_DIR / ".env"

if _ENV_FILE.exists():
    _ENV_FILE_PATH = str(_ENV_FILE.resolve())
else:
    # Fallback: use relative path (pydantic will look in CWD)
    _ENV_FILE_PATH = ".env"


class Settings(BaseSettings):
    """
    Settings container for the valuation backend.
    """
    APP_NAME: str = Field(
        "DCF Projection Engine",
        description="Title reported by the HTTP surface",
    )
    LOG_LEVEL: str = Field(
        "INFO",
        description="Root logging level: DEBUG, INFO, WARNING, ERROR, CRITICAL",
    )
    CORS_ALLOW_ORIGINS: List[str] = Field(
        default_factory=lambda: ["*"],
        description="Origins allowed to call the API from a browser",
    )

    # Sensitivity sweeps
    SENSITIVITY_MAX_STEPS: int = Field(
        10,
        description="Maximum number of sampled values per heatmap axis",
    )
    SENSITIVITY_WACC_STEP: float = Field(
        0.5,
        description="WACC increment (percentage points) in the sensitivity table",
    )
    SENSITIVITY_GROWTH_STEP: float = Field(
        0.25,
        description="Terminal growth increment (percentage points) in the sensitivity table",
    )
    SENSITIVITY_LOG_RUNS: bool = Field(
        False,
        description="Keep per-run engine DEBUG logs during sensitivity sweeps",
    )

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def normalize_log_level(cls, v: Any) -> str:
        """Upper-case and strip the configured level."""
        if isinstance(v, str):
            return v.strip().upper() or "INFO"
        return "INFO"

    @field_validator("SENSITIVITY_MAX_STEPS")
    @classmethod
    def check_max_steps(cls, v: int) -> int:
        if v < 2:
            raise ValueError("SENSITIVITY_MAX_STEPS must be at least 2")
        return v

    @field_validator("SENSITIVITY_WACC_STEP", "SENSITIVITY_GROWTH_STEP")
    @classmethod
    def check_positive_step(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("Sensitivity step sizes must be positive")
        return v

    model_config = SettingsConfigDict(
        env_file=_ENV_FILE_PATH,
        env_file_encoding="utf-8",
        extra="ignore",
    )


# Singleton pattern: settings imported anywhere will reference same object.
settings = Settings()
