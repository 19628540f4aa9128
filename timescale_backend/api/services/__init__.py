"""
API Services
Service layer for the API endpoints.
"""

from .result_service import ResultQueryService

__all__ = ["ResultQueryService"]
