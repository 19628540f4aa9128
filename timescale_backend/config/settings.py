"""
Ingestion settings
Loads from environment variables with INGEST_ prefix (or .env file)
"""

from datetime import datetime, timezone
from functools import lru_cache

from pydantic_settings import BaseSettings


class IngestionSettings(BaseSettings):
    """CSV ingestion limits"""

    # Row count bounds (inclusive)
    min_rows: int = 1
    max_rows: int = 10000

    # Earliest accepted timestamp
    min_allowed_date: datetime = datetime(2000, 1, 1, tzinfo=timezone.utc)

    # Rows per executemany batch when persisting values
    insert_batch_size: int = 1000

    class Config:
        env_file = ".env"
        env_prefix = "INGEST_"
        case_sensitive = False
        extra = "ignore"  # Ignore extra fields in .env file


@lru_cache()
def get_ingestion_settings() -> IngestionSettings:
    """Get cached settings instance"""
    return IngestionSettings()
