from __future__ import annotations

from pathlib import Path

from pydantic import Field, field_validator
from pydantic.aliases import AliasChoices
from pydantic_settings import BaseSettings, SettingsConfigDict


BACKEND_DIR = Path(__file__).resolve().parents[1]

_DAY_NAMES = ("MONDAY", "TUESDAY", "WEDNESDAY", "THURSDAY", "FRIDAY", "SATURDAY", "SUNDAY")


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=BACKEND_DIR / ".env", env_file_encoding="utf-8")

    database_url: str = Field(validation_alias=AliasChoices("database_url", "DATABASE_URL"))

    # Runtime
    environment: str = Field(default="development", validation_alias=AliasChoices("environment", "ENVIRONMENT"))
    frontend_origin: str = Field(
        default="http://localhost:5173",
        validation_alias=AliasChoices("frontend_origin", "FRONTEND_ORIGIN"),
    )
    # Overrides the environment-derived level (DEBUG in development, INFO in production).
    log_level: str | None = Field(default=None, validation_alias=AliasChoices("log_level", "LOG_LEVEL"))

    # Generation defaults, used when a request leaves a field out.
    default_working_days: str = Field(
        default="MONDAY,TUESDAY,WEDNESDAY,THURSDAY,FRIDAY",
        validation_alias=AliasChoices("default_working_days", "DEFAULT_WORKING_DAYS"),
    )
    default_periods_per_day: int = Field(
        default=8,
        ge=1,
        le=10,
        validation_alias=AliasChoices("default_periods_per_day", "DEFAULT_PERIODS_PER_DAY"),
    )
    default_period_duration: int = Field(
        default=45,
        ge=30,
        le=120,
        validation_alias=AliasChoices("default_period_duration", "DEFAULT_PERIOD_DURATION"),
    )
    default_break_after_period: int = Field(
        default=4,
        ge=0,
        validation_alias=AliasChoices("default_break_after_period", "DEFAULT_BREAK_AFTER_PERIOD"),
    )
    default_break_duration: int = Field(
        default=30,
        ge=0,
        validation_alias=AliasChoices("default_break_duration", "DEFAULT_BREAK_DURATION"),
    )
    default_school_start_time: str = Field(
        default="08:00",
        validation_alias=AliasChoices("default_school_start_time", "DEFAULT_SCHOOL_START_TIME"),
    )

    @field_validator("frontend_origin")
    @classmethod
    def _normalize_frontend_origin(cls, v: str) -> str:
        # Starlette CORS expects the Origin to match exactly (no trailing slash).
        return v.strip().rstrip("/")

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, v: str | None) -> str | None:
        if v is None:
            return None
        v = v.strip().upper()
        return v or None

    @field_validator("default_working_days")
    @classmethod
    def _normalize_working_days(cls, v: str) -> str:
        days = [d.strip().upper() for d in (v or "").split(",") if d.strip()]
        if not days:
            raise ValueError("DEFAULT_WORKING_DAYS must name at least one day")
        unknown = [d for d in days if d not in _DAY_NAMES]
        if unknown:
            raise ValueError(f"DEFAULT_WORKING_DAYS has unknown day(s): {', '.join(unknown)}")
        return ",".join(days)

    @field_validator("default_school_start_time")
    @classmethod
    def _normalize_school_start_time(cls, v: str) -> str:
        hours, sep, minutes = (v or "").strip().partition(":")
        if not sep or not hours.isdigit() or not minutes.isdigit() or int(hours) > 23 or int(minutes) > 59:
            raise ValueError("DEFAULT_SCHOOL_START_TIME must be HH:MM")
        return f"{int(hours):02d}:{int(minutes):02d}"

    @property
    def working_day_names(self) -> list[str]:
        return self.default_working_days.split(",")


settings = Settings()
