"""
Row validation for parsed CSV files.
"""

import logging
from datetime import datetime, timezone
from typing import Callable, Optional, Sequence

from ..config.settings import IngestionSettings, get_ingestion_settings
from ..models.timeseries import CsvRow
from .errors import ValidationError

logger = logging.getLogger(__name__)

MIN_ALLOWED_DATE = datetime(2000, 1, 1, tzinfo=timezone.utc)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class RowValidator:
    """
    Enforces file-level and per-row rules.

    Fails fast: the first violation, in file order, is raised and later rows
    are not inspected.
    """

    def __init__(
        self,
        min_rows: int = 1,
        max_rows: int = 10000,
        min_allowed_date: datetime = MIN_ALLOWED_DATE,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """
        Args:
            min_rows: Minimum number of data rows (inclusive)
            max_rows: Maximum number of data rows (inclusive)
            min_allowed_date: Earliest accepted timestamp
            clock: Returns the current UTC time; sampled once per validate() call
        """
        self.min_rows = min_rows
        self.max_rows = max_rows
        self.min_allowed_date = _as_utc(min_allowed_date)
        self.clock = clock or _utcnow

    @classmethod
    def from_settings(
        cls,
        settings: Optional[IngestionSettings] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> "RowValidator":
        settings = settings or get_ingestion_settings()
        return cls(
            min_rows=settings.min_rows,
            max_rows=settings.max_rows,
            min_allowed_date=settings.min_allowed_date,
            clock=clock,
        )

    def validate(self, rows: Sequence[CsvRow]) -> None:
        """
        Validate the full row set.

        Raises:
            ValidationError: On the first violated rule
        """
        count = len(rows)
        if count < self.min_rows or count > self.max_rows:
            raise ValidationError(
                f"Row count must be between {self.min_rows} and {self.max_rows}, got {count}",
                rule="row_count",
                value=count,
            )

        now = _as_utc(self.clock())
        floor = self.min_allowed_date

        for index, row in enumerate(rows):
            # +2: header line and 1-based numbering
            row_number = index + 2

            if row.timestamp > now:
                raise ValidationError(
                    f"timestamp {row.timestamp.isoformat()} must not be later than now",
                    rule="timestamp_not_in_future",
                    line_number=row_number,
                    value=row.timestamp.isoformat(),
                )

            if row.timestamp < floor:
                raise ValidationError(
                    f"timestamp {row.timestamp.isoformat()} must not be earlier than "
                    f"{floor:%Y-%m-%d}",
                    rule="timestamp_not_before_floor",
                    line_number=row_number,
                    value=row.timestamp.isoformat(),
                )

            if row.execution_time < 0:
                raise ValidationError(
                    f"execution_time must not be less than 0, got {row.execution_time}",
                    rule="execution_time_non_negative",
                    line_number=row_number,
                    value=row.execution_time,
                )

            if row.value < 0:
                raise ValidationError(
                    f"value must not be less than 0, got {row.value}",
                    rule="value_non_negative",
                    line_number=row_number,
                    value=row.value,
                )

        logger.debug(f"Validated {count} rows")
