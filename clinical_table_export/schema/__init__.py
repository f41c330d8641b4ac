"""
Schema Layer - Table Layouts and Variant Selection

Submodules:
    layouts.py  → Literal file names and headers of both variants
    selector.py → Resolves the variant flags into layout + strategy

Dependency Rule:
    This layer depends on: core, projection
    This layer is used by: writers, export, pipeline

Author: Shubham Singh
Date: December 2025
"""

from clinical_table_export.schema.layouts import (
    TableLayout,
    SchemaLayout,
    relational_layout,
    timeline_layout,
)
from clinical_table_export.schema.selector import SchemaSelection, SchemaSelector

__all__ = [
    "TableLayout",
    "SchemaLayout",
    "relational_layout",
    "timeline_layout",
    "SchemaSelection",
    "SchemaSelector",
]
