"""
Repository Layer - Patient Record Access

Submodules:
    record_repository.py → Repository protocol + JSON file implementation

Dependency Rule:
    This layer depends on: core (models, exceptions)
    This layer is used by: the command-line entry point

Author: Shubham Singh
Date: December 2025
"""

from clinical_table_export.repository.record_repository import (
    RecordRepository,
    FileBasedRecordRepository,
)

__all__ = [
    "RecordRepository",
    "FileBasedRecordRepository",
]
