"""
Enumerations for Clinical Table Export

Enumeration Categories:
    OutputVariant → Which of the two literal table layouts is written
    TableName     → Logical tables a projected row can be addressed to

Author: Shubham Singh
Date: December 2025
"""

from enum import Enum


# =============================================================================
# STAGE 1: OUTPUT VARIANT ENUMERATION
# =============================================================================


class OutputVariant(str, Enum):
    """
    Output schema variants.

    What it does:
        Names the two mutually exclusive table layouts. The variant is
        resolved once at startup and never changes for the process.

    Variants:
        RELATIONAL: Default relational layout (foreign keys, costs, ISO dates)
        TIMELINE:   Denormalized per-patient timeline layout (MRN on every row,
                    randomized timestamps, durations, vitals/SDOH subsets)
    """

    RELATIONAL = "relational"
    TIMELINE = "timeline"

    @classmethod
    def from_flag(cls, timeline_output: bool) -> "OutputVariant":
        """Map the boolean timeline flag to a variant."""
        return cls.TIMELINE if timeline_output else cls.RELATIONAL


# =============================================================================
# STAGE 2: TABLE NAME ENUMERATION
# =============================================================================
# The logical name is stable across variants; file names are not.


class TableName(str, Enum):
    """Logical output tables."""

    PATIENTS = "patients"
    ENCOUNTERS = "encounters"
    CONDITIONS = "conditions"
    ALLERGIES = "allergies"
    OBSERVATIONS = "observations"
    PROCEDURES = "procedures"
    MEDICATIONS = "medications"
    IMMUNIZATIONS = "immunizations"
    CAREPLANS = "careplans"
    IMAGING_STUDIES = "imaging_studies"
    VITALS = "vitals"
    SOCIAL_DETERMINANTS = "social_determinants"
