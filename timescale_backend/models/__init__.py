"""
Data Models Package
Domain entities for time-series ingestion.
"""

from .timeseries import AggregateStats, CsvRow, IngestionStage, IngestionSummary

__all__ = [
    "AggregateStats",
    "CsvRow",
    "IngestionStage",
    "IngestionSummary",
]
