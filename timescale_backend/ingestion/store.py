"""
Result Store
Transactional persistence for results and their values.

One ResultStore wraps one Session, and everything done through it between
two commit()/rollback() calls is a single unit of work.
"""

import hashlib
import logging
from typing import List, Optional, Sequence

from sqlalchemy import insert, text
from sqlalchemy.orm import Session

from ..db.models import Result, Value
from ..models.timeseries import AggregateStats, CsvRow

logger = logging.getLogger(__name__)


def advisory_lock_key(file_name: str) -> int:
    """Stable signed 63-bit key for pg_advisory_xact_lock."""
    digest = hashlib.sha256(file_name.encode("utf-8")).digest()
    return int.from_bytes(digest[:8], "big") & 0x7FFFFFFFFFFFFFFF


class ResultStore:
    """Unit of work over results and values."""

    def __init__(self, session: Session, batch_size: int = 1000):
        self.session = session
        self.batch_size = batch_size

    @property
    def dialect_name(self) -> str:
        return self.session.get_bind().dialect.name

    def lock_file_name(self, file_name: str) -> None:
        """
        Take a transaction-scoped lock on file_name.

        Only PostgreSQL supports advisory locks; other dialects rely on the
        in-process lock and the unique index on results.file_name.
        """
        if self.dialect_name != "postgresql":
            return
        self.session.execute(
            text("SELECT pg_advisory_xact_lock(:key)"),
            {"key": advisory_lock_key(file_name)},
        )

    def find_by_file_name(self, file_name: str) -> Optional[Result]:
        """Get the live result for a file name, locked for update where supported."""
        return (
            self.session.query(Result)
            .filter(Result.file_name == file_name)
            .with_for_update()
            .first()
        )

    def delete_cascade(self, result: Result) -> int:
        """
        Delete a result and all of its values.

        Returns:
            Number of values deleted
        """
        deleted = (
            self.session.query(Value)
            .filter(Value.result_id == result.id)
            .delete(synchronize_session=False)
        )
        self.session.delete(result)
        self.session.flush()
        return deleted

    def insert_aggregate(self, stats: AggregateStats) -> Result:
        """Insert a result row and flush so its id is assigned."""
        result = Result(**stats.to_orm_kwargs())
        self.session.add(result)
        self.session.flush()
        return result

    def insert_rows(self, rows: Sequence[CsvRow], result_id: int) -> int:
        """
        Insert values for a result in executemany batches.

        Returns:
            Number of values inserted
        """
        inserted = 0
        for start in range(0, len(rows), self.batch_size):
            batch: List[dict] = [
                {
                    "date": row.timestamp,
                    "execution_time": row.execution_time,
                    "value": row.value,
                    "file_name": row.file_name,
                    "result_id": result_id,
                }
                for row in rows[start:start + self.batch_size]
            ]
            self.session.execute(insert(Value), batch)
            inserted += len(batch)
        return inserted

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()
