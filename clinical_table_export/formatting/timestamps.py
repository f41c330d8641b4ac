"""
Timestamp Rendering

Epoch-millisecond timestamps are rendered in UTC in one of three forms:

    date_from_timestamp        → 2020-01-01
    iso8601_timestamp          → 2020-01-01T13:45:00Z
    short_date_from_timestamp  → 01/01/2020

The timeline layout also needs a per-row random time of day appended to the
calendar date (random_time_of_day).

Author: Shubham Singh
Date: December 2025
"""

import random
from datetime import date, datetime, timedelta, timezone
from typing import Optional

from clinical_table_export.core.constants import (
    DATE_FORMAT,
    ISO8601_FORMAT,
    SHORT_DATE_FORMAT,
    TIME_OF_DAY_FORMAT,
)

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_SECONDS_PER_DAY = 24 * 60 * 60


def to_datetime(timestamp: int) -> datetime:
    """Convert epoch milliseconds to an aware UTC datetime."""
    return _EPOCH + timedelta(milliseconds=timestamp)


def to_date(timestamp: int) -> date:
    """Calendar date (UTC) of an epoch-millisecond timestamp."""
    return to_datetime(timestamp).date()


def date_from_timestamp(timestamp: int) -> str:
    return to_datetime(timestamp).strftime(DATE_FORMAT)


def iso8601_timestamp(timestamp: int) -> str:
    return to_datetime(timestamp).strftime(ISO8601_FORMAT)


def short_date_from_timestamp(timestamp: int) -> str:
    return to_datetime(timestamp).strftime(SHORT_DATE_FORMAT)


def optional_date(timestamp: Optional[int]) -> str:
    """Date of a stop time, "" when the stop time is not set."""
    return date_from_timestamp(timestamp) if timestamp else ""


def optional_iso8601(timestamp: Optional[int]) -> str:
    """ISO-8601 form of a stop time, "" when the stop time is not set."""
    return iso8601_timestamp(timestamp) if timestamp else ""


def random_time_of_day(date_text: str, rng: random.Random) -> str:
    """
    Append a random time of day to a rendered calendar date.

    The timeline consumer rejects rows with identical timestamps, so every
    row gets its own draw. The value carries no clinical meaning.

    Args:
        date_text: Rendered date, e.g. "2020-01-01"
        rng: Random source (process-seeded by default)

    Returns:
        "2020-01-01 07:31:09"
    """
    offset = timedelta(seconds=rng.randrange(_SECONDS_PER_DAY))
    time_of_day = (datetime.min + offset).strftime(TIME_OF_DAY_FORMAT)
    return f"{date_text} {time_of_day}"
