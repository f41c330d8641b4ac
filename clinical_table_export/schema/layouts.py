"""
Table Layouts - Literal Column Contracts per Output Variant

Both layouts are written out in full; neither is derived from the other.
A layout maps each logical table to its file name and header columns.

    RELATIONAL  → 10 tables, patient address optionally decomposed
    TIMELINE    → 12 tables, adds vitals and social-determinant subsets

Author: Shubham Singh
Date: December 2025
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterator, Mapping, Tuple

from clinical_table_export.core.enums import OutputVariant, TableName
from clinical_table_export.core.exceptions import UnknownTableError


# =============================================================================
# STAGE 1: LAYOUT MODELS
# =============================================================================


@dataclass(frozen=True)
class TableLayout:
    """
    One table's file name and header.

    Attributes:
        table: Logical table name
        file_name: File written inside the output directory
        columns: Header column names in order
    """

    table: TableName
    file_name: str
    columns: Tuple[str, ...]

    @property
    def field_count(self) -> int:
        return len(self.columns)

    @property
    def header(self) -> str:
        """Header line without terminator."""
        return ",".join(self.columns)


@dataclass(frozen=True)
class SchemaLayout:
    """
    The complete set of tables for one variant.

    Attributes:
        variant: Output variant this layout belongs to
        parse_address: Whether patient addresses are decomposed
        tables: Read-only mapping of table name to layout
    """

    variant: OutputVariant
    parse_address: bool
    tables: Mapping[TableName, TableLayout]

    def table(self, name: TableName) -> TableLayout:
        """
        Look up one table.

        Raises:
            UnknownTableError: If the layout does not define the table
        """
        try:
            return self.tables[name]
        except KeyError:
            raise UnknownTableError(getattr(name, "value", str(name)), self.variant.value)

    def __iter__(self) -> Iterator[TableLayout]:
        return iter(self.tables.values())

    def __len__(self) -> int:
        return len(self.tables)


def _columns(header: str) -> Tuple[str, ...]:
    return tuple(header.split(","))


def _freeze(*layouts: TableLayout) -> Mapping[TableName, TableLayout]:
    return MappingProxyType({layout.table: layout for layout in layouts})


# =============================================================================
# STAGE 2: SHARED HEADERS
# =============================================================================

_PERSON_COLUMNS = (
    "ID,BIRTHDATE,DEATHDATE,SSN,DRIVERS,PASSPORT,"
    "PREFIX,FIRST,LAST,SUFFIX,MAIDEN,MARITAL,RACE,ETHNICITY,GENDER,BIRTHPLACE"
)

_IMAGING_STUDIES = TableLayout(
    TableName.IMAGING_STUDIES,
    "imaging_studies.csv",
    _columns(
        "ID,DATE,PATIENT,ENCOUNTER,BODYSITE_CODE,BODYSITE_DESCRIPTION,"
        "MODALITY_CODE,MODALITY_DESCRIPTION,SOP_CODE,SOP_DESCRIPTION"
    ),
)

_ALLERGIES = TableLayout(
    TableName.ALLERGIES,
    "allergies.csv",
    _columns("START,STOP,PATIENT,ENCOUNTER,CODE,DESCRIPTION"),
)


# =============================================================================
# STAGE 3: RELATIONAL LAYOUT
# =============================================================================


def relational_layout(parse_address: bool = False) -> SchemaLayout:
    """Default relational layout (10 tables)."""
    if parse_address:
        patient_columns = _PERSON_COLUMNS + ",STREETADDRESS1,STREETADDRESS2,CITY,STATE,ZIP,COUNTRY"
    else:
        patient_columns = _PERSON_COLUMNS + ",ADDRESS,CITY,STATE,ZIP"

    return SchemaLayout(
        variant=OutputVariant.RELATIONAL,
        parse_address=parse_address,
        tables=_freeze(
            TableLayout(TableName.PATIENTS, "patients.csv", _columns(patient_columns)),
            _ALLERGIES,
            TableLayout(
                TableName.MEDICATIONS,
                "medications.csv",
                _columns(
                    "START,STOP,PATIENT,ENCOUNTER,CODE,DESCRIPTION,COST,DISPENSES,TOTALCOST,"
                    "REASONCODE,REASONDESCRIPTION"
                ),
            ),
            TableLayout(
                TableName.CONDITIONS,
                "conditions.csv",
                _columns("START,STOP,PATIENT,ENCOUNTER,CODE,DESCRIPTION"),
            ),
            TableLayout(
                TableName.CAREPLANS,
                "careplans.csv",
                _columns(
                    "ID,START,STOP,PATIENT,ENCOUNTER,CODE,DESCRIPTION,REASONCODE,REASONDESCRIPTION"
                ),
            ),
            TableLayout(
                TableName.OBSERVATIONS,
                "observations.csv",
                _columns("DATE,PATIENT,ENCOUNTER,CODE,DESCRIPTION,VALUE,UNITS,TYPE"),
            ),
            TableLayout(
                TableName.PROCEDURES,
                "procedures.csv",
                _columns("DATE,PATIENT,ENCOUNTER,CODE,DESCRIPTION,COST,REASONCODE,REASONDESCRIPTION"),
            ),
            TableLayout(
                TableName.IMMUNIZATIONS,
                "immunizations.csv",
                _columns("DATE,PATIENT,ENCOUNTER,CODE,DESCRIPTION,COST"),
            ),
            TableLayout(
                TableName.ENCOUNTERS,
                "encounters.csv",
                _columns(
                    "ID,START,STOP,PATIENT,ENCOUNTERCLASS,CODE,DESCRIPTION,COST,"
                    "REASONCODE,REASONDESCRIPTION"
                ),
            ),
            _IMAGING_STUDIES,
        ),
    )


# =============================================================================
# STAGE 4: TIMELINE LAYOUT
# =============================================================================


def timeline_layout() -> SchemaLayout:
    """Denormalized timeline layout (12 tables). Addresses are always decomposed."""
    return SchemaLayout(
        variant=OutputVariant.TIMELINE,
        parse_address=True,
        tables=_freeze(
            TableLayout(
                TableName.PATIENTS,
                "patients.csv",
                _columns(_PERSON_COLUMNS + ",STREETADDRESS1,STREETADDRESS2,CITY,STATE,POSTAL,COUNTRY"),
            ),
            _ALLERGIES,
            TableLayout(
                TableName.MEDICATIONS,
                "medication.csv",
                _columns(
                    "MRN,Timestamp,EncounterID,StartDate,EndDate,MedicationDuration,"
                    "RXNormCode,RXNormDescription,MedicationReasonCode,MedicationReason"
                ),
            ),
            TableLayout(
                TableName.CONDITIONS,
                "condition.csv",
                _columns(
                    "MRN,Timestamp,EncounterID,StartDate,EndDate,ConditionDuration,"
                    "ConditionCode,ConditionDescription"
                ),
            ),
            TableLayout(
                TableName.CAREPLANS,
                "careplan.csv",
                _columns(
                    "MRN,Timestamp,CarePlanID,EncounterID,StartDate,EndDate,CarePlanDuration,"
                    "CarePlanCode,CarePlanDescription,CarePlanReasonCode,CarePlanReason"
                ),
            ),
            TableLayout(
                TableName.OBSERVATIONS,
                "lab-observation.csv",
                _columns(
                    "MRN,Timestamp,LabDate,LOINCCode,LOINCDescription,LabValue,LabUnits,EncounterID"
                ),
            ),
            TableLayout(
                TableName.PROCEDURES,
                "procedure.csv",
                _columns(
                    "MRN,Timestamp,ProcedureDate,ProcedureCode,ProcedureDescription,"
                    "ProcedureReasonCode,ProcedureReason,EncounterID"
                ),
            ),
            TableLayout(
                TableName.IMMUNIZATIONS,
                "immunization.csv",
                _columns("MRN,Timestamp,ImmunizationDate,CVXCode,CVXDescription,EncounterID"),
            ),
            TableLayout(
                TableName.ENCOUNTERS,
                "encounter.csv",
                _columns(
                    "MRN,Timestamp,EncounterID,EncounterDate,EncounterCode,EncounterType,"
                    "EncounterReasonCode,EncounterReason"
                ),
            ),
            TableLayout(
                TableName.VITALS,
                "vital-observation.csv",
                _columns(
                    "MRN,Timestamp,VitalDate,LOINCCode,LOINCDescription,VitalValue,VitalUnits,EncounterID"
                ),
            ),
            TableLayout(
                TableName.SOCIAL_DETERMINANTS,
                "social-determinant.csv",
                _columns("MRN,Timestamp,SDDate,LOINCCode,LOINCDescription,SDValue,SDUnits,EncounterID"),
            ),
            _IMAGING_STUDIES,
        ),
    )
