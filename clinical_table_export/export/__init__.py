"""
Export Layer - Record Graph Traversal

Submodules:
    record_walker.py → Fixed-order traversal of one patient's record

Dependency Rule:
    This layer depends on: core, schema, writers
    This layer is used by: pipeline

Author: Shubham Singh
Date: December 2025
"""

from clinical_table_export.export.record_walker import RecordWalker

__all__ = ["RecordWalker"]
