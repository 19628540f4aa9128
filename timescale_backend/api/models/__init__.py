"""
API Models
Pydantic models for request/response validation.
"""

from .results import ResultFilter, ResultResponse, UploadResponse, ValueResponse

__all__ = [
    "ResultFilter",
    "ResultResponse",
    "UploadResponse",
    "ValueResponse",
]
