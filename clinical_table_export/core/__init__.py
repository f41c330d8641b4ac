"""
Core Layer - Domain Models, Enums, and Configuration

This layer contains the side-effect-free foundation of the table export
engine.

Submodules:
    models.py     → Record graph (Person, Encounter, Entry...) and Row
    enums.py      → OutputVariant, TableName
    constants.py  → Attribute keys, allow-lists, sentinels, formats
    config.py     → Configuration dataclass
    exceptions.py → Domain-specific exceptions

Dependency Rule:
    This layer depends on NOTHING else in the package.
    All other layers may depend on this layer.

Author: Shubham Singh
Date: December 2025
"""

from clinical_table_export.core.models import (
    Code,
    Entry,
    Observation,
    Procedure,
    Medication,
    CarePlan,
    ImagingInstance,
    ImagingSeries,
    ImagingStudy,
    Encounter,
    HealthRecord,
    Person,
    Row,
)
from clinical_table_export.core.enums import OutputVariant, TableName
from clinical_table_export.core.config import ExportConfiguration
from clinical_table_export.core.exceptions import (
    TableExportError,
    ConfigurationError,
    ExportInitializationError,
    SchemaError,
    UnknownTableError,
    RowShapeError,
    RecordStructureError,
    RecordLoadError,
)

__all__ = [
    # Models
    "Code",
    "Entry",
    "Observation",
    "Procedure",
    "Medication",
    "CarePlan",
    "ImagingInstance",
    "ImagingSeries",
    "ImagingStudy",
    "Encounter",
    "HealthRecord",
    "Person",
    "Row",
    # Enums
    "OutputVariant",
    "TableName",
    # Configuration
    "ExportConfiguration",
    # Exceptions
    "TableExportError",
    "ConfigurationError",
    "ExportInitializationError",
    "SchemaError",
    "UnknownTableError",
    "RowShapeError",
    "RecordStructureError",
    "RecordLoadError",
]
