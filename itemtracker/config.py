"""
Configuration settings using Pydantic Settings.
"""

from pathlib import Path
from pydantic import model_validator
from pydantic_settings import BaseSettings
from functools import lru_cache

BASE_DIR = Path(__file__).resolve().parents[1]


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    SAVES_ROOT_DIR: str = str(Path.home() / ".minecraft" / "saves")
    SAVE_PATH: str = ""
    SAVE_NAME_PREFIX: str = "New World"
    AUTO_START: bool = True

    CATALOG_PATH: str = "items.txt"

    HISTORY_FILENAME: str = "tracker_history_v2.txt"
    IGNORE_FILENAME: str = "tracker_ignored.txt"

    PRIMARY_SAVE_FILE: str = "level.dat"
    PLAYER_DATA_DIR: str = "playerdata"
    PLAYER_DATA_EXTENSION: str = ".dat"

    SCAN_INTERVAL_SECONDS: float = 5.0
    GAP_THRESHOLD_MS: int = 15000
    MAX_SCAN_DEPTH: int = 64
    FILE_READ_TIMEOUT_SECONDS: float = 3.0

    CORS_ORIGINS: list[str] = [
        "http://localhost:5173",
        "http://localhost:3000",
        "http://127.0.0.1:5173",
    ]

    HOST: str = "127.0.0.1"
    PORT: int = 8000

    DEBUG: bool = False

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore"
    }

    @model_validator(mode="after")
    def resolve_relative_paths(self):
        catalog_path = Path(self.CATALOG_PATH)
        if not catalog_path.is_absolute():
            self.CATALOG_PATH = str((BASE_DIR / catalog_path).resolve())

        if self.SAVE_PATH:
            self.SAVE_PATH = str(Path(self.SAVE_PATH).expanduser())
        self.SAVES_ROOT_DIR = str(Path(self.SAVES_ROOT_DIR).expanduser())

        return self


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    :return: Cached Settings instance
    :rtype: Settings
    """
    return Settings()


settings = get_settings()
