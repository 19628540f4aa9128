from .settings import IngestionSettings, get_ingestion_settings

__all__ = ["IngestionSettings", "get_ingestion_settings"]
