"""
Environment settings for the chapter runner.
Values come from `.env` and the process environment and are validated once, then cached.
Chapter configuration in `configs/chapters.yaml` may override the reports directory and seed per run.
"""

from __future__ import annotations

import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Final

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

REQUIRED_ENV_VARS: Final[tuple[str, ...]] = (
    "PROJECT_NAME",
    "ENV",
    "LOG_LEVEL",
    "MLFLOW_TRACKING_URI",
    "REPORTS_DIR",
    "RANDOM_SEED",
)

LOG_LEVELS: Final[tuple[str, ...]] = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class Settings(BaseModel):
    """Typed runtime configuration shared by every chapter."""

    model_config = ConfigDict(extra="ignore")

    PROJECT_NAME: str
    ENV: str
    LOG_LEVEL: str
    MLFLOW_TRACKING_URI: str
    REPORTS_DIR: Path
    RANDOM_SEED: int = Field(ge=0, le=2**32 - 1)

    @field_validator("LOG_LEVEL")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}")
        return level

    @property
    def log_level(self) -> int:
        return logging.getLevelName(self.LOG_LEVEL)


def load_settings(*, load_env: bool = True) -> Settings:
    """Read `.env` (unless disabled) and validate the required variables."""

    if load_env:
        load_dotenv()

    missing = [key for key in REQUIRED_ENV_VARS if not os.getenv(key)]
    if missing:
        raise RuntimeError(
            f"Missing required environment variables: {', '.join(sorted(missing))}. "
            "Copy `.env.example` to `.env` before running a chapter."
        )

    try:
        return Settings.model_validate({key: os.environ[key] for key in REQUIRED_ENV_VARS})
    except ValidationError as exc:
        raise RuntimeError(f"Invalid environment configuration: {exc}") from exc


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return load_settings()
