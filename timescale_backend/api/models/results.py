"""
Result Models
Pydantic models for the data endpoints.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field

from ...models.timeseries import IngestionSummary


class ResultFilter(BaseModel):
    """
    Filters for listing results.

    All bounds are inclusive; unset fields are ignored.
    """

    file_name: Optional[str] = Field(None, description="Substring of the file name")
    min_date_from: Optional[datetime] = Field(None, description="Earliest min_date")
    min_date_to: Optional[datetime] = Field(None, description="Latest min_date")
    avg_value_from: Optional[float] = Field(None, description="Lower bound for avg_value")
    avg_value_to: Optional[float] = Field(None, description="Upper bound for avg_value")
    avg_execution_time_from: Optional[float] = Field(
        None, description="Lower bound for avg_execution_time"
    )
    avg_execution_time_to: Optional[float] = Field(
        None, description="Upper bound for avg_execution_time"
    )


class ResultResponse(BaseModel):
    """Aggregate statistics for one ingested file."""

    model_config = ConfigDict(from_attributes=True)

    id: int = Field(..., description="Result ID")
    file_name: str = Field(..., description="Ingested file name")
    delta_time: float = Field(..., description="max(date) - min(date) in seconds")
    min_date: datetime = Field(..., description="Earliest row timestamp (UTC)")
    avg_execution_time: float = Field(..., description="Mean execution time")
    avg_value: float = Field(..., description="Mean value")
    median_value: float = Field(..., description="Median value")
    max_value: float = Field(..., description="Maximum value")
    min_value: float = Field(..., description="Minimum value")
    created_at: datetime = Field(..., description="When the file was ingested (UTC)")


class ValueResponse(BaseModel):
    """A single stored CSV row."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    date: datetime
    execution_time: float
    value: float
    file_name: str


class UploadResponse(BaseModel):
    """Response for a successful upload."""

    message: str
    result: IngestionSummary

    class Config:
        json_schema_extra = {
            "example": {
                "message": "File 'run-42.csv' processed and saved",
                "result": {
                    "result_id": 1,
                    "file_name": "run-42.csv",
                    "row_count": 3,
                    "replaced_existing": False,
                    "created_at": "2024-01-16T08:00:00Z",
                    "stats": {
                        "file_name": "run-42.csv",
                        "delta_seconds": 60.0,
                        "min_timestamp": "2024-01-15T10:30:00Z",
                        "avg_execution_time": 2.0,
                        "avg_value": 200.0,
                        "median_value": 200.0,
                        "max_value": 300.0,
                        "min_value": 100.0,
                        "row_count": 3,
                    },
                },
            }
        }
