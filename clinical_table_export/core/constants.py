"""
Constants for Clinical Table Export

This module defines constant values used throughout the table export engine.

Constant Categories:
    Person attribute keys      → Keys read from Person.attributes
    OBSERVATION ALLOW-LISTS    → LOINC codes routed to vitals / SDOH tables
    Sentinels                  → Literal values with special meaning in rows
    Date formats               → strftime patterns per rendering
    TIME_UNIT_MILLIS           → Prescription duration unit conversions

Author: Shubham Singh
Date: December 2025
"""

from typing import Dict, FrozenSet, Tuple


# =============================================================================
# STAGE 1: PERSON ATTRIBUTE KEYS
# =============================================================================
# Keys of the Person.attributes mapping supplied by the record generator.

PERSON_ID = "id"
BIRTHDATE = "birthdate"
IDENTIFIER_SSN = "identifier_ssn"
IDENTIFIER_DRIVERS = "identifier_drivers"
IDENTIFIER_PASSPORT = "identifier_passport"
NAME_PREFIX = "name_prefix"
FIRST_NAME = "first_name"
LAST_NAME = "last_name"
NAME_SUFFIX = "name_suffix"
MAIDEN_NAME = "name_maiden"
MARITAL_STATUS = "marital_status"
RACE = "race"
ETHNICITY = "ethnicity"
GENDER = "gender"
BIRTHPLACE = "birthplace"
ADDRESS = "address"
CITY = "city"
STATE = "state"
ZIP = "zip"

# Demographic attributes written between DEATHDATE and the address columns,
# in column order. Missing attributes render as empty fields.
DEMOGRAPHIC_ATTRIBUTES: Tuple[str, ...] = (
    IDENTIFIER_SSN,
    IDENTIFIER_DRIVERS,
    IDENTIFIER_PASSPORT,
    NAME_PREFIX,
    FIRST_NAME,
    LAST_NAME,
    NAME_SUFFIX,
    MAIDEN_NAME,
    MARITAL_STATUS,
    RACE,
    ETHNICITY,
    GENDER,
    BIRTHPLACE,
)


# =============================================================================
# STAGE 2: OBSERVATION ALLOW-LISTS
# =============================================================================
# Exact-match LOINC code sets. The two sets are disjoint.

# Height, weight, BMI, diastolic BP, systolic BP, oral temperature
VITAL_SIGN_CODES: FrozenSet[str] = frozenset(
    {
        "8302-2",
        "29463-7",
        "39156-5",
        "8462-4",
        "8480-6",
        "8331-1",
    }
)

SOCIAL_DETERMINANT_CODES: FrozenSet[str] = frozenset(
    {
        "69453-9",
        "76690-7",
        "55277-8",
        "28245-9",
        "71802-3",
        "63513-6",
        "46240-8",
        "72106-8",
    }
)


# =============================================================================
# STAGE 3: SENTINELS
# =============================================================================

# Duration column value for entries that have no stop time (ongoing).
ONGOING_DURATION = "999"

# Country column of a decomposed address. Addresses are assumed to be US.
DEFAULT_COUNTRY = "US"

# Placeholder written to STREETADDRESS1 when the street line does not match
# a supported token count. Downstream loaders grep for this literal text.
ADDRESS_PLACEHOLDER_TEMPLATE = " address contained{count} elements"

# Upper bound on nested observation depth followed by the walker.
DEFAULT_MAX_OBSERVATION_DEPTH = 16


# =============================================================================
# STAGE 4: DATE FORMATS
# =============================================================================

DATE_FORMAT = "%Y-%m-%d"
SHORT_DATE_FORMAT = "%m/%d/%Y"
ISO8601_FORMAT = "%Y-%m-%dT%H:%M:%SZ"
TIME_OF_DAY_FORMAT = "%H:%M:%S"


# =============================================================================
# STAGE 5: TIME UNIT CONVERSIONS
# =============================================================================
# Milliseconds per unit for prescription duration metadata.

_MILLIS_PER_DAY = 24 * 60 * 60 * 1000

TIME_UNIT_MILLIS: Dict[str, int] = {
    "years": 365 * _MILLIS_PER_DAY,
    "months": 30 * _MILLIS_PER_DAY,
    "weeks": 7 * _MILLIS_PER_DAY,
    "days": _MILLIS_PER_DAY,
    "hours": 60 * 60 * 1000,
    "minutes": 60 * 1000,
    "seconds": 1000,
}

# Assumed fill cadence when a prescription has neither refills nor duration.
DEFAULT_DISPENSE_INTERVAL = ("months", 1)


# =============================================================================
# STAGE 6: LOGGING CONFIGURATION
# =============================================================================

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level>"
)
