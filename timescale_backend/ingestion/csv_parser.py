"""
CSV Parser
Turns semicolon-delimited time-series CSV bytes into typed rows.

Wire format:
    Date;ExecutionTime;Value
    2024-01-15T10-30-45.1234Z;1.5;100.25

The header line is required but its content is ignored. Blank lines are
skipped. The first malformed line aborts parsing with a ParseError that
carries the 1-based line number (header = line 1).
"""

import io
import logging
import math
import re
from typing import BinaryIO, Iterator, List, Optional, Protocol, Union

from ..models.timeseries import CsvRow
from .dates import ACCEPTED_FORMATS, parse_timestamp
from .errors import IngestionCancelled, ParseError

logger = logging.getLogger(__name__)

DELIMITER = ";"
EXPECTED_FIELDS = 3

# Invariant-culture decimal: optional sign, digits with optional fraction, optional exponent
_NUMBER_RE = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?$")


class CancellationToken(Protocol):
    """Anything exposing is_set(), e.g. threading.Event."""

    def is_set(self) -> bool:
        ...


def _iter_lines(source: Union[bytes, BinaryIO]) -> Iterator[bytes]:
    """Yield raw lines split on b"\\n", without consuming the whole stream first."""
    if isinstance(source, (bytes, bytearray, memoryview)):
        source = io.BytesIO(bytes(source))
    for raw in source:
        yield raw


def _decode(raw: bytes, line_number: int) -> str:
    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError:
        raise ParseError(line_number, "line is not valid UTF-8")
    return text.rstrip("\r\n")


def parse_number(text: str, field: str, line_number: int) -> float:
    """
    Parse a culture-invariant floating point field.

    Args:
        text: Stripped field text
        field: Field name for diagnostics
        line_number: 1-based source line

    Returns:
        Parsed finite float
    """
    if not _NUMBER_RE.match(text):
        raise ParseError(line_number, f"invalid {field} '{text}'", field=field, value=text)

    number = float(text)
    if not math.isfinite(number):
        raise ParseError(line_number, f"{field} '{text}' is out of range", field=field, value=text)
    return number


class TimeSeriesCsvParser:
    """
    Parser for time-series CSV uploads.

    Produces rows in file order. Stateless, so one instance can be shared.
    """

    def parse(
        self,
        source: Union[bytes, BinaryIO],
        file_name: str,
        cancellation: Optional[CancellationToken] = None,
    ) -> List[CsvRow]:
        """
        Parse a CSV byte stream.

        Args:
            source: Readable binary stream or raw bytes
            file_name: Name stamped on every row
            cancellation: Optional token checked before each line

        Returns:
            Parsed rows; empty when the stream has no header or no data lines
        """
        rows: List[CsvRow] = []
        lines = _iter_lines(source)

        header = next(lines, None)
        if header is None:
            logger.info(f"{file_name}: empty stream, no header line")
            return rows

        # Header content is ignored; a UTF-8 byte-order mark decodes harmlessly
        _decode(header, 1)

        line_number = 1
        for raw in lines:
            line_number += 1

            if cancellation is not None and cancellation.is_set():
                logger.info(f"{file_name}: ingestion cancelled at line {line_number}")
                raise IngestionCancelled(line_number)

            line = _decode(raw, line_number)
            if not line.strip():
                continue

            rows.append(self._parse_line(line, line_number, file_name))

        logger.debug(f"{file_name}: parsed {len(rows)} rows from {line_number} lines")
        return rows

    def _parse_line(self, line: str, line_number: int, file_name: str) -> CsvRow:
        """Parse a single non-blank data line."""
        parts = line.split(DELIMITER)
        if len(parts) != EXPECTED_FIELDS:
            raise ParseError(
                line_number,
                f"invalid number of fields. Expected {EXPECTED_FIELDS}, got {len(parts)}",
                field="fields",
                value=len(parts),
            )

        date_text, execution_text, value_text = (part.strip() for part in parts)

        timestamp = parse_timestamp(date_text)
        if timestamp is None:
            raise ParseError(
                line_number,
                f"invalid date format '{date_text}'. Expected: {ACCEPTED_FORMATS}",
                field="timestamp",
                value=date_text,
            )

        return CsvRow(
            timestamp=timestamp,
            execution_time=parse_number(execution_text, "execution_time", line_number),
            value=parse_number(value_text, "value", line_number),
            file_name=file_name,
            line_number=line_number,
        )
