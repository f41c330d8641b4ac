"""
Derived Fields - Computed Columns

Pure helpers for the columns that are computed rather than copied:

    dispense_count  → number of fills across a prescription's active time
    total_cost      → unit cost × dispenses, truncated to cents
    duration_fields → end date + whole-day duration for timeline rows

Author: Shubham Singh
Date: December 2025
"""

from decimal import ROUND_DOWN, Decimal
from typing import Optional, Tuple

from clinical_table_export.core.constants import (
    DEFAULT_DISPENSE_INTERVAL,
    ONGOING_DURATION,
    TIME_UNIT_MILLIS,
)
from clinical_table_export.core.models import Medication
from clinical_table_export.formatting.timestamps import short_date_from_timestamp, to_date

_CENTS = Decimal("0.01")


# =============================================================================
# STAGE 1: TIME CONVERSION
# =============================================================================


def convert_time(unit: str, quantity: int) -> int:
    """
    Convert a quantity of a time unit to milliseconds.

    Args:
        unit: One of years, months, weeks, days, hours, minutes, seconds
        quantity: Number of units

    Raises:
        ValueError: If the unit is not recognized
    """
    try:
        return TIME_UNIT_MILLIS[unit.lower()] * quantity
    except KeyError:
        raise ValueError(f"Unknown time unit: '{unit}'. Valid units: {list(TIME_UNIT_MILLIS)}")


# =============================================================================
# STAGE 2: MEDICATION COSTS
# =============================================================================


def dispense_count(medication: Medication, as_of: int) -> int:
    """
    Number of times a prescription was filled.

    Algorithm:
        1. Explicit "refills" in the prescription details wins
        2. Else active duration ÷ prescription "duration", floored
        3. Else active duration ÷ one 30-day month, floored
        4. Clamp to at least 1, the initial fill always happened

    The active duration runs from start to stop, or to ``as_of`` when the
    medication was never stopped.

    Args:
        medication: The medication entry
        as_of: Export time (epoch ms), used for unstopped medications

    Returns:
        Dispense count, never below 1
    """
    details = medication.prescription_details or {}
    stop = medication.stop if medication.has_stop else as_of
    active_millis = stop - medication.start

    if "refills" in details:
        dispenses = int(details["refills"])
    elif "duration" in details:
        duration = details["duration"]
        interval = convert_time(str(duration["unit"]), int(duration["quantity"]))
        dispenses = active_millis // interval
    else:
        interval = convert_time(*DEFAULT_DISPENSE_INTERVAL)
        dispenses = active_millis // interval

    return max(1, dispenses)


def total_cost(unit_cost: Decimal, dispenses: int) -> Decimal:
    """Unit cost × dispenses, truncated (not rounded) to two decimals."""
    return (Decimal(str(unit_cost)) * dispenses).quantize(_CENTS, rounding=ROUND_DOWN)


# =============================================================================
# STAGE 3: DURATIONS
# =============================================================================


def duration_fields(start: int, stop: Optional[int]) -> Tuple[str, str]:
    """
    End date and duration columns of a timeline row.

    The duration counts whole calendar days between the rendered start and
    end dates, so time of day never shifts it. Stop before start is not
    validated and yields zero or a negative count.

    Returns:
        (end_date, duration). Without a stop: ("", "999").

    Example:
        >>> duration_fields(1577836800000, 1578700800000)
        ('01/11/2020', '10')
    """
    if not stop:
        return "", ONGOING_DURATION

    days = (to_date(stop) - to_date(start)).days
    return short_date_from_timestamp(stop), str(days)
