"""
Domain Models for Clinical Table Export

This module defines the record graph consumed by the exporter and the Row
produced by it. The record graph is populated upstream by the patient
simulation and treated as read-only here.

Model Hierarchy:
    Person
    └── HealthRecord
        └── Encounter
            ├── Entry           (conditions, allergies, immunizations)
            ├── Observation     (may nest child observations)
            ├── Procedure
            ├── Medication
            ├── CarePlan
            └── ImagingStudy
                └── ImagingSeries
                    └── ImagingInstance

    Row → One projected output line addressed to a table

Timestamps are epoch milliseconds. A stop of None (or 0) means "not yet set".

Usage:
    from clinical_table_export.core.models import Code, Entry

    condition = Entry(
        start=1577836800000,
        codes=[Code("44054006", "Diabetes")],
    )

Author: Shubham Singh
Date: December 2025
"""

import os
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple, Union

from clinical_table_export.core.enums import TableName


# =============================================================================
# STAGE 1: CODE MODEL
# =============================================================================


@dataclass(frozen=True)
class Code:
    """
    A single clinical classification code.

    Attributes:
        code: Code value (SNOMED, LOINC, RxNorm, CVX, DICOM...)
        display: Human-readable description
        system: Optional coding system URI or name
    """

    code: str
    display: str = ""
    system: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Code":
        """Create from dictionary (JSON deserialization)."""
        return cls(
            code=str(data["code"]),
            display=data.get("display", ""),
            system=data.get("system"),
        )


def _codes_from(data: Dict[str, Any], key: str = "codes") -> List[Code]:
    return [Code.from_dict(item) for item in data.get(key) or []]


def _cost_from(data: Dict[str, Any]) -> Decimal:
    return Decimal(str(data.get("cost", "0")))


# =============================================================================
# STAGE 2: CLINICAL ENTRIES
# =============================================================================
# Conditions, allergies and immunizations share the plain Entry shape.


@dataclass
class Entry:
    """
    A dated clinical entry with one or more codes.

    What it does:
        Holds the shape shared by conditions, allergies and immunizations
        and is the base of every other clinical entry kind.

    Attributes:
        start: Start time (epoch ms)
        stop: Stop time (epoch ms), None or 0 when not yet set
        codes: Classification codes, the first one is the primary code
        cost: Unit cost of the entry
    """

    start: int
    stop: Optional[int] = None
    codes: List[Code] = field(default_factory=list)
    cost: Decimal = Decimal("0")

    @property
    def has_stop(self) -> bool:
        """True when a stop time has been recorded."""
        return bool(self.stop)

    @property
    def primary_code(self) -> Code:
        """
        First code of the entry.

        Raises:
            IndexError: If the entry carries no codes
        """
        return self.codes[0]

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Entry":
        """Create from dictionary (JSON deserialization)."""
        return cls(
            start=int(data["start"]),
            stop=data.get("stop"),
            codes=_codes_from(data),
            cost=_cost_from(data),
        )


ObservationValue = Union[None, bool, int, float, str, Code]


@dataclass
class Observation(Entry):
    """
    A measured or recorded observation.

    An observation without a value is a panel: its children are exported
    in its place and it produces no row of its own.

    Attributes:
        value: Measured value (number, text, boolean or Code), None for panels
        unit: Unit of the value
        observations: Child observations of a panel
    """

    value: ObservationValue = None
    unit: Optional[str] = None
    observations: List["Observation"] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Observation":
        """Create from dictionary (JSON deserialization)."""
        value = data.get("value")
        if isinstance(value, dict):
            value = Code.from_dict(value)
        return cls(
            start=int(data["start"]),
            stop=data.get("stop"),
            codes=_codes_from(data),
            cost=_cost_from(data),
            value=value,
            unit=data.get("unit"),
            observations=[cls.from_dict(child) for child in data.get("observations") or []],
        )


@dataclass
class Procedure(Entry):
    """
    An entry with optional reason codes.

    Attributes:
        reasons: Reason codes, the first one is exported
    """

    reasons: List[Code] = field(default_factory=list)

    @property
    def primary_reason(self) -> Optional[Code]:
        """First reason code, None when no reason was recorded."""
        return self.reasons[0] if self.reasons else None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Procedure":
        """Create from dictionary (JSON deserialization)."""
        return cls(
            start=int(data["start"]),
            stop=data.get("stop"),
            codes=_codes_from(data),
            cost=_cost_from(data),
            reasons=_codes_from(data, "reasons"),
        )


@dataclass
class CarePlan(Procedure):
    """A care plan. Same shape as a procedure."""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CarePlan":
        """Create from dictionary (JSON deserialization)."""
        return cls(
            start=int(data["start"]),
            stop=data.get("stop"),
            codes=_codes_from(data),
            cost=_cost_from(data),
            reasons=_codes_from(data, "reasons"),
        )


@dataclass
class Medication(Procedure):
    """
    A prescribed medication.

    Attributes:
        prescription_details: Prescription metadata. Recognized keys:
            "refills" (int) and "duration" ({"quantity": int, "unit": str})
    """

    prescription_details: Optional[Dict[str, Any]] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Medication":
        """Create from dictionary (JSON deserialization)."""
        return cls(
            start=int(data["start"]),
            stop=data.get("stop"),
            codes=_codes_from(data),
            cost=_cost_from(data),
            reasons=_codes_from(data, "reasons"),
            prescription_details=data.get("prescription_details"),
        )


# =============================================================================
# STAGE 3: IMAGING STUDIES
# =============================================================================


@dataclass
class ImagingInstance:
    """A single image instance and its SOP class."""

    sop_class: Code

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ImagingInstance":
        return cls(sop_class=Code.from_dict(data["sop_class"]))


@dataclass
class ImagingSeries:
    """A series of instances sharing body site and modality."""

    body_site: Code
    modality: Code
    instances: List[ImagingInstance] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ImagingSeries":
        return cls(
            body_site=Code.from_dict(data["body_site"]),
            modality=Code.from_dict(data["modality"]),
            instances=[ImagingInstance.from_dict(i) for i in data.get("instances") or []],
        )


@dataclass
class ImagingStudy:
    """
    An imaging study. Only the first series and its first instance are
    exported.
    """

    start: int
    series: List[ImagingSeries] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ImagingStudy":
        return cls(
            start=int(data["start"]),
            series=[ImagingSeries.from_dict(s) for s in data.get("series") or []],
        )


# =============================================================================
# STAGE 4: ENCOUNTER, HEALTH RECORD, PERSON
# =============================================================================


@dataclass
class Encounter(Entry):
    """
    A clinical encounter and everything recorded during it.

    Attributes:
        type: Encounter class (e.g. "AMBULATORY"), rendered lower-case
        reason: Optional reason code
        conditions .. imaging_studies: Entries in stored order
    """

    type: Optional[str] = None
    reason: Optional[Code] = None
    conditions: List[Entry] = field(default_factory=list)
    allergies: List[Entry] = field(default_factory=list)
    observations: List[Observation] = field(default_factory=list)
    procedures: List[Procedure] = field(default_factory=list)
    medications: List[Medication] = field(default_factory=list)
    immunizations: List[Entry] = field(default_factory=list)
    careplans: List[CarePlan] = field(default_factory=list)
    imaging_studies: List[ImagingStudy] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Encounter":
        """Create from dictionary (JSON deserialization)."""
        reason = data.get("reason")
        return cls(
            start=int(data["start"]),
            stop=data.get("stop"),
            codes=_codes_from(data),
            cost=_cost_from(data),
            type=data.get("type"),
            reason=Code.from_dict(reason) if reason else None,
            conditions=[Entry.from_dict(d) for d in data.get("conditions") or []],
            allergies=[Entry.from_dict(d) for d in data.get("allergies") or []],
            observations=[Observation.from_dict(d) for d in data.get("observations") or []],
            procedures=[Procedure.from_dict(d) for d in data.get("procedures") or []],
            medications=[Medication.from_dict(d) for d in data.get("medications") or []],
            immunizations=[Entry.from_dict(d) for d in data.get("immunizations") or []],
            careplans=[CarePlan.from_dict(d) for d in data.get("careplans") or []],
            imaging_studies=[ImagingStudy.from_dict(d) for d in data.get("imaging_studies") or []],
        )


@dataclass
class HealthRecord:
    """Ordered encounters plus the time of death, if any."""

    encounters: List[Encounter] = field(default_factory=list)
    death: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HealthRecord":
        return cls(
            encounters=[Encounter.from_dict(e) for e in data.get("encounters") or []],
            death=data.get("death"),
        )


@dataclass
class Person:
    """
    A simulated patient.

    Attributes:
        attributes: Demographics keyed by the constants in core.constants
        record: The patient's health record
    """

    attributes: Dict[str, Any]
    record: HealthRecord = field(default_factory=HealthRecord)

    def alive(self, time: int) -> bool:
        """True unless the record holds a death at or before ``time``."""
        return self.record.death is None or self.record.death > time

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Person":
        """Create from dictionary (JSON deserialization)."""
        return cls(
            attributes=dict(data.get("attributes") or {}),
            record=HealthRecord.from_dict(data.get("record") or {}),
        )


# =============================================================================
# STAGE 5: OUTPUT ROW
# =============================================================================


@dataclass(frozen=True)
class Row:
    """
    One projected output line.

    Attributes:
        table: Logical table the row belongs to
        fields: Ordered, already-sanitized field values
    """

    table: TableName
    fields: Tuple[str, ...]

    def to_line(self, delimiter: str = ",", newline: str = os.linesep) -> str:
        """Render the row as one delimited line with its terminator."""
        return delimiter.join(self.fields) + newline
