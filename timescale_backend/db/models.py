"""
SQLAlchemy ORM Models
Database table definitions using SQLAlchemy ORM.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import (
    Column, String, Integer, Float, DateTime, ForeignKey, Index
)
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.types import TypeDecorator

Base = declarative_base()


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UTCDateTime(TypeDecorator):
    """
    Timezone-aware UTC datetime stored as a naive UTC timestamp.

    Aware values are converted to UTC on the way in; naive values are taken
    to be UTC already. Values always come back UTC-aware, on every dialect.
    """

    impl = DateTime
    cache_ok = True

    def process_bind_param(self, value: Optional[datetime], dialect) -> Optional[datetime]:
        if value is None:
            return None
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc).replace(tzinfo=None)
        return value

    def process_result_value(self, value: Optional[datetime], dialect) -> Optional[datetime]:
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


class Result(Base):
    """
    Result model.

    One aggregate summary per ingested file name. Replaced as a whole,
    together with its values, when the same file name is ingested again.
    """
    __tablename__ = 'results'

    id = Column(Integer, primary_key=True, autoincrement=True)
    file_name = Column(String(255), nullable=False,
                       comment='Uploaded file name (unique key)')

    # Aggregate statistics
    delta_time = Column(Float, nullable=False,
                        comment='max(date) - min(date) in seconds')
    min_date = Column(UTCDateTime, nullable=False,
                      comment='Earliest row timestamp')
    avg_execution_time = Column(Float, nullable=False)
    avg_value = Column(Float, nullable=False)
    median_value = Column(Float, nullable=False)
    max_value = Column(Float, nullable=False)
    min_value = Column(Float, nullable=False)

    # Timestamps
    created_at = Column(UTCDateTime, nullable=False, default=utcnow)

    # Relationships
    values = relationship("Value", back_populates="result",
                          cascade="all, delete-orphan", passive_deletes=True)

    __table_args__ = (
        Index('idx_results_file_name', 'file_name', unique=True),
        Index('idx_results_min_date', 'min_date'),
    )

    def __repr__(self):
        return f"<Result(id={self.id}, file_name={self.file_name})>"


class Value(Base):
    """
    Value model.

    A single validated CSV row owned by a Result.
    """
    __tablename__ = 'values'

    id = Column(Integer, primary_key=True, autoincrement=True)
    date = Column(UTCDateTime, nullable=False, comment='Row timestamp (UTC)')
    execution_time = Column(Float, nullable=False)
    value = Column(Float, nullable=False)
    file_name = Column(String(255), nullable=False)
    result_id = Column(Integer, ForeignKey('results.id', ondelete='CASCADE'),
                       nullable=False, index=True)

    # Relationships
    result = relationship("Result", back_populates="values")

    __table_args__ = (
        Index('idx_values_file_name', 'file_name'),
        Index('idx_values_date', 'date'),
    )

    def __repr__(self):
        return f"<Value(id={self.id}, file_name={self.file_name}, date={self.date})>"
