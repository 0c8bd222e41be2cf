"""
StageNotes – Application configuration.
Reads environment variables from a .env file via pydantic-settings.
"""

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parent


class Settings(BaseSettings):
    """Central configuration loaded from environment / .env."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # ── App ──
    APP_NAME: str = "StageNotes"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # ── Database ──
    DATABASE_URL: str = "sqlite+aiosqlite:///./stagenotes.db"

    # ── Boards ──
    BOARD_CODE_ATTEMPTS: int = 5
    EXPORT_DATE_FORMAT: str = "%d-%m-%Y %H:%M:%S"

    # ── Note composer throttling (milliseconds) ──
    NOTE_INTERVAL_MS: int = 10000
    MOBILE_NOTE_INTERVAL_MS: int = 2000
    COMPOSER_REGISTRY_SIZE: int = 5000

    # ── Device identity ──
    DEVICE_COOKIE_MAX_AGE: int = 60 * 60 * 24 * 365


settings = Settings()
