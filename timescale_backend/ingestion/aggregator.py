"""
Aggregate statistics over a validated row set.
"""

import logging
from typing import Sequence

import numpy as np

from ..models.timeseries import AggregateStats, CsvRow
from .errors import InvariantViolation

logger = logging.getLogger(__name__)


def median_of_sorted(values: np.ndarray) -> float:
    """
    Median of an ascending array.

    Even length: mean of the two central elements. Odd length: the central one.
    """
    n = len(values)
    middle = n // 2
    if n % 2 == 0:
        return float((values[middle - 1] + values[middle]) / 2.0)
    return float(values[middle])


def compute_aggregate(rows: Sequence[CsvRow], file_name: str) -> AggregateStats:
    """
    Reduce rows to a single aggregate.

    Args:
        rows: Non-empty, already validated rows
        file_name: File the rows came from

    Returns:
        Aggregate statistics

    Raises:
        InvariantViolation: If rows is empty (validation must run first)
    """
    if not rows:
        raise InvariantViolation(f"Cannot compute aggregate for {file_name}: no rows")

    timestamps = [row.timestamp for row in rows]
    execution_times = np.fromiter((row.execution_time for row in rows), dtype=np.float64, count=len(rows))
    values = np.sort(np.fromiter((row.value for row in rows), dtype=np.float64, count=len(rows)))

    min_timestamp = min(timestamps)
    max_timestamp = max(timestamps)

    stats = AggregateStats(
        file_name=file_name,
        delta_seconds=(max_timestamp - min_timestamp).total_seconds(),
        min_timestamp=min_timestamp,
        avg_execution_time=float(execution_times.mean()),
        avg_value=float(values.mean()),
        median_value=median_of_sorted(values),
        max_value=float(values[-1]),
        min_value=float(values[0]),
        row_count=len(rows),
    )

    logger.debug(
        f"Aggregate for {file_name}: rows={stats.row_count}, "
        f"delta={stats.delta_seconds:.3f}s, median={stats.median_value}"
    )
    return stats
