"""Runtime configuration via pydantic-settings.

Every field can be set through an ``LR_``-prefixed environment variable or
a ``.env`` file in the working directory.
"""

from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    DEVELOPMENT = "development"
    TESTING = "testing"
    PRODUCTION = "production"


class LogLevel(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


class Settings(BaseSettings):
    """Settings for the report client, exporters and UI server.

    Examples:
        LR_API_BASE_URL=https://erp.example.com
        LR_CURRENCY_LABEL=USD
        LR_EXPORT_DIR=/srv/reports
        LR_ENVIRONMENT=production
    """

    model_config = SettingsConfigDict(
        env_prefix="LR_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = "Ledger Reports"
    environment: Environment = Environment.DEVELOPMENT

    # Backend API
    api_base_url: str = Field(
        default="http://localhost:5000",
        description="Base URL of the ERP backend serving /api/reports",
    )
    api_timeout: float = Field(default=30.0, gt=0, description="Request timeout in seconds")
    reports_path: str = Field(
        default="/api/reports", description="Path prefix of the report endpoints"
    )

    # Report presentation
    currency_label: str = Field(
        default="EGP", description="Label prefixed to every formatted amount"
    )
    brand_name: str = Field(
        default="Morgan Chemical ERP",
        description="Name printed in the header band of exported PDFs",
    )
    export_dir: Path = Field(
        default=Path("exports"), description="Directory for exported report files"
    )

    # Logging
    log_level: LogLevel = LogLevel.INFO
    log_format: Literal["json", "console"] | None = Field(
        default=None,
        description="'json' or 'console'; unset means json in production, console elsewhere",
    )
    log_file: Path | None = Field(default=None, description="Optional log file path")

    # UI server
    ui_host: str = "127.0.0.1"
    ui_port: int = Field(default=3000, ge=1, le=65535)
    ui_reload: bool = False

    @field_validator("api_base_url", mode="after")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @field_validator("reports_path", mode="after")
    @classmethod
    def normalize_reports_path(cls, v: str) -> str:
        return "/" + v.strip("/")

    @property
    def is_production(self) -> bool:
        return self.environment == Environment.PRODUCTION

    @property
    def is_development(self) -> bool:
        return self.environment == Environment.DEVELOPMENT

    @property
    def is_testing(self) -> bool:
        return self.environment == Environment.TESTING

    @property
    def resolved_log_format(self) -> str:
        if self.log_format is not None:
            return self.log_format
        return "json" if self.is_production else "console"


@lru_cache
def get_settings() -> Settings:
    """Settings loaded once per process; ``get_settings.cache_clear()`` reloads."""
    return Settings()
