"""
Clinical Table Export Module

Converts hierarchical simulated patient records into flat, comma-delimited
tables for bulk database import. Two literal table layouts are supported:
the default relational layout and a denormalized per-patient timeline.

Architecture Overview:
    clinical_table_export/
    ├── core/        → Domain models, enums, configuration (Layer 0 - Pure)
    ├── formatting/  → Field sanitizer, address split, dates (Layer 1 - Pure)
    ├── projection/  → Row projection strategies (Layer 2 - Business Logic)
    ├── schema/      → Table layouts and variant selection (Layer 3)
    ├── writers/     → Locked per-table file sinks (Layer 4 - Infrastructure)
    ├── export/      → Record graph traversal (Layer 5 - Business Logic)
    ├── repository/  → JSON record loading (Infrastructure)
    └── pipeline.py  → Main orchestrator (Layer 6 - Public API)

Quick Start:
    from clinical_table_export import TableExportPipeline

    with TableExportPipeline.from_environment() as pipeline:
        pipeline.export_people(people, as_of=1700000000000)

Author: Shubham Singh
Date: December 2025
"""

__version__ = "1.0.0"
__author__ = "Shubham Singh"

# =============================================================================
# PUBLIC API EXPORTS
# =============================================================================

# Main Entry Point
from clinical_table_export.pipeline import TableExportPipeline

# Core Models
from clinical_table_export.core.models import (
    Code,
    Entry,
    Observation,
    Procedure,
    Medication,
    CarePlan,
    ImagingStudy,
    Encounter,
    HealthRecord,
    Person,
    Row,
)

# Enums
from clinical_table_export.core.enums import OutputVariant, TableName

# Configuration
from clinical_table_export.core.config import ExportConfiguration

# Building blocks
from clinical_table_export.schema import SchemaSelector, SchemaSelection
from clinical_table_export.writers import TableWriterSet
from clinical_table_export.export import RecordWalker
from clinical_table_export.repository import FileBasedRecordRepository

__all__ = [
    # Main Entry Point (use this!)
    "TableExportPipeline",
    # Core Models
    "Code",
    "Entry",
    "Observation",
    "Procedure",
    "Medication",
    "CarePlan",
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
    # Building blocks
    "SchemaSelector",
    "SchemaSelection",
    "TableWriterSet",
    "RecordWalker",
    "FileBasedRecordRepository",
]
