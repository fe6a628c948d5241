"""Application settings and environment loading utilities."""
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings


BASE_DIR = Path(__file__).resolve().parent.parent.parent
ENV_FILE = BASE_DIR / ".env"

load_dotenv(dotenv_path=ENV_FILE)


class Settings(BaseSettings):
    """Central application configuration."""

    app_name: str = "Factures BTP Dashboard"
    environment: str = Field(default="development", alias="ENVIRONMENT")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    database_url: str = Field(
        default="sqlite:///./data/dev.db",
        description="SQLAlchemy database URL",
        alias="DATABASE_URL",
    )
    store_backend: str = Field(
        default="sql",
        description="Invoice store implementation: 'sql' or 'rest'",
        alias="STORE_BACKEND",
    )
    rest_url: str | None = Field(default=None, alias="REST_URL")
    rest_api_key: str | None = Field(default=None, alias="REST_API_KEY")
    rest_table: str = Field(default="facture_btp", alias="REST_TABLE")
    request_timeout: float = Field(default=8.0, alias="REQUEST_TIMEOUT")
    export_sheet_name: str = Field(default="Factures", alias="EXPORT_SHEET_NAME")
    export_filename: str = Field(default="factures_export.xlsx", alias="EXPORT_FILENAME")
    export_dir: Path | None = Field(default=None, alias="EXPORT_DIR")

    class Config:
        env_file = ENV_FILE
        env_file_encoding = "utf-8"
        case_sensitive = False
        populate_by_name = True


@lru_cache
def get_settings() -> "Settings":
    """Return cached settings instance."""

    return Settings()
