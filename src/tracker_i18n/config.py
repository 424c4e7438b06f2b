"""Application configuration via environment variables with TRACKER_I18N_ prefix."""

from __future__ import annotations

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Translation store and date-input configuration.

    All settings are read from environment variables prefixed with
    ``TRACKER_I18N_``.
    """

    model_config = SettingsConfigDict(env_prefix="TRACKER_I18N_")

    # ── Translations API ────────────────────────────────────────────────
    api_base_url: str = "http://localhost:5000/api"
    request_timeout: float = Field(default=30.0, gt=0.0)

    # ── Culture ─────────────────────────────────────────────────────────
    default_culture: str = "en-US"
    language_storage_key: str = "preferred-language"

    # ── Date parsing ────────────────────────────────────────────────────
    # Two-digit years below the pivot land in the 2000s, the rest in the 1900s
    two_digit_year_pivot: int = Field(default=50, ge=0, le=100)
    min_year: int = 1900
    max_year: int = 2200

    # ── Logging ─────────────────────────────────────────────────────────
    log_level: str = "INFO"
    log_format: Literal["json", "console"] = "json"
