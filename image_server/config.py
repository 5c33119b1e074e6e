from __future__ import annotations

import enum
from pathlib import Path

from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parent.parent

_env_file = BASE_DIR / ".env"
if _env_file.exists():
    load_dotenv(_env_file)

APP_NAME = "image-mcp-server"
APP_VERSION = "1.0.0"


class TransportMode(str, enum.Enum):
    STDIO = "stdio"
    HTTP = "http"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Managed directory
    IMAGES_DIR: Path = BASE_DIR / "images"

    # HTTP transport (used only when PORT is set)
    PORT: int | None = None
    HOST: str = "127.0.0.1"
    ALLOWED_ORIGINS: str = "http://localhost:3000"

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_DIR: Path | None = None
    MAX_LOG_FILE_SIZE: int = 10 * 1024 * 1024
    BACKUP_COUNT: int = 5

    @property
    def transport_mode(self) -> TransportMode:
        return TransportMode.HTTP if self.PORT else TransportMode.STDIO

    @property
    def allowed_origin_list(self) -> list[str]:
        return [o.strip() for o in self.ALLOWED_ORIGINS.split(",") if o.strip()]


def get_settings() -> Settings:
    return Settings()
