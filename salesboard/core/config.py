from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Ignore unrelated env keys so local/dev .env can include front-end settings.
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "Supernova Sales Dashboard"
    environment: str = "development"
    api_prefix: str = "/api/v1"
    cors_allow_origins: str = "http://localhost:3000,http://127.0.0.1:3000"

    google_sheets_id: Optional[str] = Field(default=None, alias="GOOGLE_SHEETS_ID")
    google_service_account_email: Optional[str] = Field(
        default=None, alias="GOOGLE_SERVICE_ACCOUNT_EMAIL"
    )
    google_service_account_private_key: Optional[str] = Field(
        default=None, alias="GOOGLE_SERVICE_ACCOUNT_PRIVATE_KEY"
    )
    sheets_timeout_seconds: float = Field(default=30.0, alias="SHEETS_TIMEOUT_SECONDS")

    new_business_sheet_name: str = Field(default="New Business", alias="NEW_BUSINESS_SHEET_NAME")
    new_business_sheet_range: str = Field(default="A:AZ", alias="NEW_BUSINESS_SHEET_RANGE")
    roster_sheet_name: str = Field(default="Roster", alias="ROSTER_SHEET_NAME")
    roster_sheet_range: str = Field(default="A:Z", alias="ROSTER_SHEET_RANGE")
    dpr_sheet_name: str = Field(default="DPR", alias="DPR_SHEET_NAME")
    dpr_sheet_range: str = Field(default="A:Z", alias="DPR_SHEET_RANGE")

    reporting_timezone: str = Field(default="Asia/Manila", alias="REPORTING_TIMEZONE")
    mdrt_target_premium: float = Field(default=3_499_200.0, alias="MDRT_TARGET_PREMIUM")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")


@lru_cache
def get_settings() -> Settings:
    return Settings()


def get_cors_origins() -> list[str]:
    settings = get_settings()
    return [origin.strip() for origin in settings.cors_allow_origins.split(",") if origin.strip()]
