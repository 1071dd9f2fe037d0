from __future__ import annotations

from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

load_dotenv()


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # required by `smiles-bot bot` only
    telegram_token: Optional[str] = Field(None, alias="TOKEN")

    smiles_api_key: str = Field(
        "aJqPU7xNHl9qN3NVZnPaJ208aPo2Bh2p2ZV844tw", alias="SMILES_API_KEY"
    )
    flight_search_host: str = Field(
        "api-air-flightsearch-green.smiles.com.br",
        alias="SMILES_FLIGHT_SEARCH_HOST",
    )
    boarding_tax_host: str = Field(
        "api-airlines-boarding-tax-green.smiles.com.br",
        alias="SMILES_BOARDING_TAX_HOST",
    )
    region: str = Field("ARGENTINA", alias="SMILES_REGION")
    site_url: str = Field("https://www.smiles.com.ar", alias="SMILES_SITE_URL")
    user_agent: str = Field("Mozilla/5.0", alias="SMILES_USER_AGENT")

    request_timeout_s: float = Field(15.0, alias="REQUEST_TIMEOUT_S")
    search_timeout_s: float = Field(30.0, alias="SEARCH_TIMEOUT_S")
    max_workers: int = Field(20, alias="MAX_WORKERS")
    log_file: str = Field("smiles_bot.log", alias="LOG_FILE")
    response_file: Optional[str] = Field(None, alias="SMILES_RESPONSE_FILE")

    @field_validator("telegram_token")
    @classmethod
    def _token_non_empty(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            raise ValueError("TOKEN must be a non-empty string")
        return v

    @field_validator("request_timeout_s", "search_timeout_s")
    @classmethod
    def _timeout_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("timeouts must be greater than 0")
        return v

    @field_validator("max_workers")
    @classmethod
    def _workers_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("MAX_WORKERS must be greater than 0")
        return v

    @field_validator("site_url")
    @classmethod
    def _strip_slash(cls, v: str) -> str:
        return v.rstrip("/")


@lru_cache()
def get_settings() -> Settings:
    """Return application settings loaded from the environment."""
    return Settings()  # type: ignore[call-arg]


__all__ = ["Settings", "get_settings"]
