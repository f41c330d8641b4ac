"""
Observation Value Rendering

VALUE and TYPE columns of observation rows. Booleans are checked before
numbers since bool is an int subclass.

Author: Shubham Singh
Date: December 2025
"""

from decimal import ROUND_HALF_UP, Decimal

from clinical_table_export.core.models import Code, Observation
from clinical_table_export.formatting.sanitizer import clean

_CENTS = Decimal("0.01")

NUMERIC_TYPE = "numeric"
TEXT_TYPE = "text"


def observation_value(observation: Observation) -> str:
    """
    Render an observation value.

    Code → display, float → one decimal place, anything else → str().
    """
    value = observation.value
    if value is None:
        return ""
    if isinstance(value, Code):
        return clean(value.display)
    if isinstance(value, bool):
        return clean(str(value).lower())
    if isinstance(value, float):
        return f"{value:.1f}"
    return clean(str(value))


def observation_type(observation: Observation) -> str:
    """Return "numeric" for numeric values and "text" otherwise."""
    value = observation.value
    if value is None:
        return ""
    if isinstance(value, bool):
        return TEXT_TYPE
    if isinstance(value, (int, float, Decimal)):
        return NUMERIC_TYPE
    return TEXT_TYPE


def money(amount) -> str:
    """Render a cost with two decimals, half cents rounded up."""
    return f"{Decimal(str(amount)).quantize(_CENTS, rounding=ROUND_HALF_UP):.2f}"
