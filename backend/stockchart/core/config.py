# backend/stockchart/core/config.py
from __future__ import annotations
from pathlib import Path
from typing import Annotated, List, Optional
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict
from pydantic import field_validator

# Resolves to <repo-root>/backend/.env
ENV_FILE = Path(__file__).resolve().parents[2] / ".env"

_PROVIDERS = ("yahoo", "finnhub", "yfinance")
_GRANULARITIES = ("hourly", "daily", "weekly")


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(ENV_FILE),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    ENV: str = "development"
    API_PREFIX: str = "/api"
    CORS_ORIGINS: Annotated[List[str], NoDecode] = ["*"]   # comma separated in env
    LOG_LEVEL: str = "INFO"
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    RELOAD: bool = False

    # Upstream providers
    FINNHUB_API_KEY: Optional[str] = None
    FINNHUB_BASE_URL: str = "https://finnhub.io/api/v1"
    YAHOO_CHART_URL: str = "https://query1.finance.yahoo.com/v8/finance/chart"
    QUICKCHART_URL: str = "https://quickchart.io/chart"
    HISTORY_PROVIDER: str = "yahoo"             # yahoo | finnhub | yfinance
    HTTP_TIMEOUT_SECONDS: float = 10.0
    HTTP_USER_AGENT: str = "Mozilla/5.0 (compatible; stockchart/1.0)"

    # Pipeline
    MAX_SYMBOLS: int = 5
    SAMPLE_BUDGET: int = 50
    PAD_FACTOR: float = 0.1                     # single-series y-axis padding
    SIX_MONTH_DAYS: int = 180
    ONE_MONTH_GRANULARITY: str = "daily"        # set to "hourly" for intraday 1M

    # Rendering
    CHART_WIDTH: int = 800
    CHART_HEIGHT: int = 400
    CHART_PIXEL_RATIO: float = 2.0
    CHART_BACKGROUND: str = "white"
    CHART_FORMAT: str = "png"

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def _parse_cors(cls, v):
        if isinstance(v, list):
            return v
        raw = str(v or "").strip() or "*"
        return [o.strip() for o in str(raw).split(",") if o.strip()]

    @field_validator("RELOAD", mode="before")
    @classmethod
    def _parse_reload_bool(cls, v):
        if isinstance(v, bool):
            return v
        return str(v).lower() in ("1", "true", "yes", "on")

    @field_validator("HISTORY_PROVIDER")
    @classmethod
    def _validate_provider(cls, v):
        v = str(v).strip().lower()
        if v not in _PROVIDERS:
            raise ValueError(f"HISTORY_PROVIDER must be one of {', '.join(_PROVIDERS)}")
        return v

    @field_validator("ONE_MONTH_GRANULARITY")
    @classmethod
    def _validate_granularity(cls, v):
        v = str(v).strip().lower()
        if v not in _GRANULARITIES:
            raise ValueError(f"ONE_MONTH_GRANULARITY must be one of {', '.join(_GRANULARITIES)}")
        return v

    @field_validator("MAX_SYMBOLS", "SAMPLE_BUDGET", "SIX_MONTH_DAYS")
    @classmethod
    def _validate_positive(cls, v):
        if v < 1:
            raise ValueError("must be a positive integer")
        return v

    @field_validator("PAD_FACTOR")
    @classmethod
    def _validate_pad_factor(cls, v):
        if not 0.0 <= v <= 1.0:
            raise ValueError("PAD_FACTOR must be between 0.0 and 1.0")
        return v

    @field_validator("HTTP_TIMEOUT_SECONDS")
    @classmethod
    def _validate_timeout(cls, v):
        if v <= 0:
            raise ValueError("HTTP_TIMEOUT_SECONDS must be greater than 0")
        return v


settings = Settings()
