from __future__ import annotations

from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from colloscope.model import SUBJECT_NAMES

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class Settings(BaseSettings):
    """
    Runtime settings, read from COLLOSCOPE_* environment variables or a .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="COLLOSCOPE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    DATA_DIR: Path = Path("data")
    TZ: str = "Europe/Paris"
    LOG_LEVEL: str = "INFO"

    # Subscriber reminders
    REMINDER_SUBJECT: str = "A"
    REMINDER_WINDOW_HOURS: int = 30
    REMINDER_LOOKAHEAD: int = 4

    @field_validator("TZ")
    @classmethod
    def validate_timezone(cls, value: str):
        try:
            ZoneInfo(value)
        except ZoneInfoNotFoundError as exc:
            raise ValueError(f"TZ must be a valid IANA timezone, got '{value}'") from exc
        return value

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, value: str):
        level = value.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"LOG_LEVEL must be a logging level name, got '{value}'")
        return level

    @field_validator("REMINDER_SUBJECT")
    @classmethod
    def validate_subject(cls, value: str):
        if value not in SUBJECT_NAMES:
            raise ValueError(f"REMINDER_SUBJECT must be one of {', '.join(SUBJECT_NAMES)}")
        return value

    @property
    def timezone(self) -> ZoneInfo:
        return ZoneInfo(self.TZ)


def get_settings() -> Settings:
    return Settings()
