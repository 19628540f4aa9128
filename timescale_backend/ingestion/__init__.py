"""
Data Ingestion Package
Handles CSV parsing, validation, aggregation and transactional persistence.
"""

from .aggregator import compute_aggregate
from .coordinator import CsvIngestionService
from .csv_parser import TimeSeriesCsvParser
from .errors import (
    IngestionCancelled,
    IngestionError,
    InvariantViolation,
    ParseError,
    StorageError,
    ValidationError,
)
from .locks import FileNameLockRegistry
from .store import ResultStore
from .validator import RowValidator

__all__ = [
    "CsvIngestionService",
    "TimeSeriesCsvParser",
    "RowValidator",
    "compute_aggregate",
    "ResultStore",
    "FileNameLockRegistry",
    "IngestionError",
    "ParseError",
    "ValidationError",
    "IngestionCancelled",
    "StorageError",
    "InvariantViolation",
]
