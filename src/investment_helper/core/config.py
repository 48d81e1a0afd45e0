from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_env: Literal["dev", "prod", "test"] = "dev"
    log_level: str = "INFO"
    database_url: str = "sqlite:///data/investment.db"
    database_path: str | None = None

    gemini_api_key: str | None = None
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta/openai/"
    gemini_model: str = "gemini-2.5-pro-preview-06-05"
    openai_api_key: str | None = None
    openai_base_url: str = "https://api.openai.com/v1"
    openai_model: str = "gpt-4.1-nano"

    llm_timeout_seconds: float = Field(default=30.0, ge=1.0, le=300.0)
    llm_max_retries: int = Field(default=3, ge=0, le=10)
    llm_temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    llm_max_tokens: int = Field(default=3000, ge=100, le=32000)
    llm_min_output_chars: int = Field(default=100, ge=0, le=10000)

    rss_timeout_seconds: float = Field(default=10.0, ge=1.0, le=120.0)
    rss_items_per_feed: int = Field(default=15, ge=1, le=200)
    rss_feed_delay_seconds: float = Field(default=0.5, ge=0.0, le=60.0)
    news_content_max_chars: int = Field(default=2000, ge=100, le=100000)
    report_news_batch_size: int = Field(default=25, ge=1, le=500)

    scheduler_enabled: bool = True
    scheduler_timezone: str = "Asia/Seoul"
    enable_midday_report: bool = False
    enable_weekly_report: bool = False
    enable_periodic_news_collection: bool = False
    notification_webhook_url: str | None = None

    @property
    def resolved_database_url(self) -> str:
        if self.database_path:
            return f"sqlite:///{self.database_path}"
        return self.database_url


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
