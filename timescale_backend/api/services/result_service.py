"""
Result Query Service
Read-side queries over stored results and values.
"""

import logging
from typing import List

from sqlalchemy.orm import Session

from ...db.models import Result, Value
from ..models.results import ResultFilter

logger = logging.getLogger(__name__)

LAST_VALUES_LIMIT = 10


class ResultQueryService:
    """Composes filters for the results and values endpoints."""

    def __init__(self, db: Session):
        self.db = db

    def list_results(self, filters: ResultFilter) -> List[Result]:
        """
        List results matching all given filters, newest first.

        Args:
            filters: Optional bounds; unset fields are ignored

        Returns:
            Matching results ordered by created_at descending
        """
        query = self.db.query(Result)

        if filters.file_name and filters.file_name.strip():
            query = query.filter(Result.file_name.contains(filters.file_name, autoescape=True))

        if filters.min_date_from is not None:
            query = query.filter(Result.min_date >= filters.min_date_from)
        if filters.min_date_to is not None:
            query = query.filter(Result.min_date <= filters.min_date_to)

        if filters.avg_value_from is not None:
            query = query.filter(Result.avg_value >= filters.avg_value_from)
        if filters.avg_value_to is not None:
            query = query.filter(Result.avg_value <= filters.avg_value_to)

        if filters.avg_execution_time_from is not None:
            query = query.filter(Result.avg_execution_time >= filters.avg_execution_time_from)
        if filters.avg_execution_time_to is not None:
            query = query.filter(Result.avg_execution_time <= filters.avg_execution_time_to)

        results = query.order_by(Result.created_at.desc(), Result.id.desc()).all()
        logger.debug(f"Listed {len(results)} results")
        return results

    def last_values(self, file_name: str, limit: int = LAST_VALUES_LIMIT) -> List[Value]:
        """Most recent values for a file, ordered by timestamp descending."""
        return (
            self.db.query(Value)
            .filter(Value.file_name == file_name)
            .order_by(Value.date.desc(), Value.id.desc())
            .limit(limit)
            .all()
        )
