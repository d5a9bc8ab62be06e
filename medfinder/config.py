from __future__ import annotations

from pydantic import ConfigDict, Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    api_key: str = Field("test-api-key", alias="API_KEY")

    database_url: str = Field("sqlite:////tmp/medfinder.db", alias="DATABASE_URL")
    db_create_all: bool = Field(False, alias="DB_CREATE_ALL")

    redis_url: str = Field("redis://localhost:6379", alias="REDIS_URL")
    trusted_proxies: list[str] = Field(
        default_factory=lambda: ["127.0.0.1", "testclient"]
    )
    rate_limit_ip_per_min: int = Field(60, alias="RATE_LIMIT_IP_PER_MIN")
    rate_limit_identity_per_min: int = Field(
        120, alias="RATE_LIMIT_IDENTITY_PER_MIN"
    )

    session_cookie_name: str = Field("medfinder_sid", alias="SESSION_COOKIE_NAME")

    anon_weekly_chat_limit: int = Field(4, alias="ANON_WEEKLY_CHAT_LIMIT")
    quota_timezone: str = Field(
        "UTC",
        alias="QUOTA_TIMEZONE",
        description="IANA zone whose Sunday midnight starts a quota week",
    )

    bot_reply_delay_min: float = Field(1.0, alias="BOT_REPLY_DELAY_MIN")
    bot_reply_delay_max: float = Field(1.5, alias="BOT_REPLY_DELAY_MAX")

    medicine_result_limit: int = Field(10, alias="MEDICINE_RESULT_LIMIT")
    pharmacy_result_limit: int = Field(20, alias="PHARMACY_RESULT_LIMIT")
    chat_history_limit: int = Field(50, alias="CHAT_HISTORY_LIMIT")
    search_history_limit: int = Field(20, alias="SEARCH_HISTORY_LIMIT")

    log_level: str = Field("INFO", alias="LOG_LEVEL")

    model_config = ConfigDict(
        extra="ignore",
        env_file=".env",
        case_sensitive=False,
    )
