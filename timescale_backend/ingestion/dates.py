"""
Timestamp parsing for CSV rows.

Strategies are tried in order and the first one that succeeds wins.
"""

import logging
from datetime import datetime, timezone
from typing import Callable, List, Optional, Tuple

import pandas as pd

logger = logging.getLogger(__name__)

HYPHEN_TIME_FORMAT = "%Y-%m-%dT%H-%M-%S.%fZ"
COLON_TIME_FORMAT = "%Y-%m-%dT%H:%M:%S.%fZ"

# Human-readable forms for error messages
ACCEPTED_FORMATS = "yyyy-MM-ddTHH-mm-ss.ffffZ or yyyy-MM-ddTHH:mm:ss.ffffZ"

# strptime's %f takes at most 6 digits
_MAX_FRACTION_DIGITS = 6


def _truncate_fraction(text: str) -> str:
    """Drop fractional-second digits beyond microsecond precision."""
    if not text.endswith("Z") or "." not in text:
        return text
    head, _, fraction = text[:-1].rpartition(".")
    if len(fraction) <= _MAX_FRACTION_DIGITS or not fraction.isdigit():
        return text
    return f"{head}.{fraction[:_MAX_FRACTION_DIGITS]}Z"


def _exact(fmt: str) -> Callable[[str], datetime]:
    def parse(text: str) -> datetime:
        return datetime.strptime(_truncate_fraction(text), fmt).replace(tzinfo=timezone.utc)

    return parse


def _iso8601(text: str) -> datetime:
    """Generic ISO-8601 parse; naive values are taken as UTC."""
    # pandas also understands relative words such as "now" and "today"
    if not text[:4].isdigit():
        raise ValueError(f"Not an ISO-8601 timestamp: {text!r}")
    ts = pd.to_datetime(text)
    if pd.isna(ts):
        raise ValueError(f"Not a timestamp: {text!r}")
    if ts.tzinfo is None:
        ts = ts.tz_localize("UTC")
    else:
        ts = ts.tz_convert("UTC")
    return ts.floor("us").to_pydatetime()


TIMESTAMP_STRATEGIES: List[Tuple[str, Callable[[str], datetime]]] = [
    ("hyphenated-time", _exact(HYPHEN_TIME_FORMAT)),
    ("colon-time", _exact(COLON_TIME_FORMAT)),
    ("iso-8601", _iso8601),
]


def parse_timestamp(text: str) -> Optional[datetime]:
    """
    Parse a CSV timestamp into a UTC-aware datetime.

    Args:
        text: Stripped timestamp literal

    Returns:
        Parsed datetime, or None if no strategy accepts the literal
    """
    if not text:
        return None

    for name, parser in TIMESTAMP_STRATEGIES:
        try:
            parsed = parser(text)
        except (ValueError, OverflowError):
            continue
        if name == "iso-8601":
            logger.debug(f"Timestamp {text!r} accepted by generic ISO-8601 fallback")
        return parsed

    logger.debug(f"No timestamp strategy accepted {text!r}")
    return None
