"""
Formatting Layer - Field Rendering Helpers

Submodules:
    sanitizer.py  → clean(): strip delimiters and line breaks from free text
    address.py    → split_address(): street line heuristic
    timestamps.py → epoch-ms date rendering and random time of day
    values.py     → observation VALUE / TYPE and cost rendering

Dependency Rule:
    This layer depends on: core
    This layer is used by: projection

Author: Shubham Singh
Date: December 2025
"""

from clinical_table_export.formatting.sanitizer import clean
from clinical_table_export.formatting.address import split_address, split_street_line
from clinical_table_export.formatting.timestamps import (
    date_from_timestamp,
    iso8601_timestamp,
    short_date_from_timestamp,
    random_time_of_day,
)
from clinical_table_export.formatting.values import observation_value, observation_type, money

__all__ = [
    "clean",
    "split_address",
    "split_street_line",
    "date_from_timestamp",
    "iso8601_timestamp",
    "short_date_from_timestamp",
    "random_time_of_day",
    "observation_value",
    "observation_type",
    "money",
]
