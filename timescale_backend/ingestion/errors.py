"""
Ingestion Errors
Exception hierarchy raised by the CSV ingestion pipeline.

Client input defects (ParseError, ValidationError) derive from ValueError so
the API maps them to 400 responses. StorageError and InvariantViolation are
operational failures and map to 500.
"""

from typing import Any, Optional


class IngestionError(Exception):
    """Base exception for ingestion pipeline errors."""

    def __init__(self, message: str, line_number: Optional[int] = None):
        self.message = message
        self.line_number = line_number
        super().__init__(self.message)

    def to_details(self) -> dict:
        """Serializable details for API error bodies."""
        details = {}
        if self.line_number is not None:
            details["line"] = self.line_number
        return details


class ParseError(IngestionError, ValueError):
    """Raised when a CSV line cannot be parsed into a row."""

    def __init__(
        self,
        line_number: int,
        message: str,
        field: Optional[str] = None,
        value: Any = None,
    ):
        self.field = field
        self.value = value
        super().__init__(f"Line {line_number}: {message}", line_number=line_number)

    def to_details(self) -> dict:
        details = super().to_details()
        if self.field is not None:
            details["field"] = self.field
        if self.value is not None:
            details["value"] = str(self.value)
        return details


class ValidationError(IngestionError, ValueError):
    """Raised when parsed rows violate a row-level or file-level rule."""

    def __init__(
        self,
        message: str,
        rule: str,
        line_number: Optional[int] = None,
        value: Any = None,
    ):
        self.rule = rule
        self.value = value
        if line_number is not None:
            message = f"Line {line_number}: {message}"
        super().__init__(message, line_number=line_number)

    def to_details(self) -> dict:
        details = super().to_details()
        details["rule"] = self.rule
        if self.value is not None:
            details["value"] = str(self.value)
        return details


class IngestionCancelled(IngestionError):
    """Raised when the caller cancels an ingestion while it is parsing."""

    def __init__(self, line_number: int):
        super().__init__(f"Ingestion cancelled at line {line_number}", line_number=line_number)


class StorageError(IngestionError):
    """Raised when the persistence transaction fails."""

    def __init__(self, message: str = "Failed to persist ingestion results"):
        super().__init__(message)


class InvariantViolation(IngestionError, RuntimeError):
    """Raised when a pipeline stage is invoked with input upstream should have rejected."""
