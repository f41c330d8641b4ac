"""
Writers Layer - Table File Output

Submodules:
    table_writer.py → Per-table locked sinks and the writer set

Dependency Rule:
    This layer depends on: core, schema
    This layer is used by: export, pipeline

Author: Shubham Singh
Date: December 2025
"""

from clinical_table_export.writers.table_writer import TableSink, TableWriterSet

__all__ = [
    "TableSink",
    "TableWriterSet",
]
