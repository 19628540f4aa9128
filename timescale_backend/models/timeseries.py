"""
Time-series validation models for CSV ingestion.
Typed rows produced by the parser and the aggregate computed over them.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class IngestionStage(str, Enum):
    """Stages of a single ingestion run."""

    START = "start"
    REPLACED = "replaced"
    VALIDATED = "validated"
    AGGREGATED = "aggregated"
    COMMITTED = "committed"
    FAILED = "failed"


class CsvRow(BaseModel):
    """
    One parsed CSV line: timestamp, execution time and value.

    Range rules (non-negative numbers, date window) are enforced by the
    validator over the whole file, not here, so that the first violation
    can be reported with its line number.
    """

    model_config = ConfigDict(frozen=True)

    timestamp: datetime
    execution_time: float
    value: float
    file_name: str
    line_number: int = Field(..., ge=2, description="1-based line in the source file")

    @field_validator("timestamp")
    @classmethod
    def ensure_utc(cls, v: datetime) -> datetime:
        """Normalize timestamps to UTC-aware datetimes."""
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v.astimezone(timezone.utc)


class AggregateStats(BaseModel):
    """
    Aggregate statistics for one file.
    This is the computed summary ready for the results table.
    """

    file_name: str
    delta_seconds: float = Field(..., ge=0.0)
    min_timestamp: datetime
    avg_execution_time: float
    avg_value: float
    median_value: float
    max_value: float
    min_value: float
    row_count: int = Field(..., ge=1)

    def to_orm_kwargs(self) -> dict:
        """Column values for the Result ORM model."""
        return {
            "file_name": self.file_name,
            "delta_time": self.delta_seconds,
            "min_date": self.min_timestamp,
            "avg_execution_time": self.avg_execution_time,
            "avg_value": self.avg_value,
            "median_value": self.median_value,
            "max_value": self.max_value,
            "min_value": self.min_value,
        }


class IngestionSummary(BaseModel):
    """Outcome of a committed ingestion."""

    result_id: int
    file_name: str
    row_count: int
    replaced_existing: bool = False
    created_at: Optional[datetime] = None
    stats: AggregateStats
