from functools import lru_cache
from datetime import datetime
from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    environment: str = Field("development", alias="ENVIRONMENT")
    log_level: str = Field("INFO", alias="LOG_LEVEL")

    # Relational store: accounts, integrations, customer records, staging rows
    database_url: str = Field("sqlite:///./customer_sync.db", alias="DATABASE_URL")
    # Analytical sink for message status events (append-only, merge on key)
    analytics_database_url: str = Field("sqlite:///./customer_sync_analytics.db", alias="ANALYTICS_DATABASE_URL")
    redis_url: str = Field("redis://localhost:6379/0", alias="REDIS_URL")

    # Schema discovery
    schema_batch_size: int = Field(500, alias="SCHEMA_BATCH_SIZE")
    schema_excluded_fields: str = Field("_id,__v,audiences,ownerId", alias="SCHEMA_EXCLUDED_FIELDS")  # comma list

    # Provider event ingestion
    ingest_batch_size: int = Field(500, alias="INGEST_BATCH_SIZE")
    event_epoch_floor: datetime = Field(datetime(2000, 10, 10), alias="EVENT_EPOCH_FLOOR")
    mailgun_api_base: str = Field("https://api.mailgun.net/v3", alias="MAILGUN_API_BASE")
    mailgun_page_limit: int = Field(300, alias="MAILGUN_PAGE_LIMIT")
    mailgun_max_pages: int = Field(10000, alias="MAILGUN_MAX_PAGES")
    mailgun_timeout_seconds: int = Field(30, alias="MAILGUN_TIMEOUT_SECONDS")

    # Warehouse sync
    warehouse_row_cap: int = Field(10_000_000, alias="WAREHOUSE_ROW_CAP")
    warehouse_chunk_size: int = Field(1000, alias="WAREHOUSE_CHUNK_SIZE")
    integration_dispatch_batch: int = Field(500, alias="INTEGRATION_DISPATCH_BATCH")

    class Config:
        env_file = ".env"
        case_sensitive = False
        extra = "allow"


@lru_cache
def get_settings() -> Settings:
    return Settings()


def reset_settings():
    """Clear cached settings (useful in tests when env vars change)."""
    get_settings.cache_clear()


def parse_excluded_fields(raw: str | None) -> frozenset[str]:
    return frozenset(f.strip() for f in raw.split(",") if f.strip()) if raw else frozenset()
