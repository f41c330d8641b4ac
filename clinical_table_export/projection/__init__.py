"""
Projection Layer - Record Entities to Table Rows

Submodules:
    strategies.py     → One projection strategy per output variant
    derived_fields.py → Dispense counts, total cost, durations
    observations.py   → Panel flattening with a depth limit

Dependency Rule:
    This layer depends on: core, formatting
    This layer is used by: schema, export

Author: Shubham Singh
Date: December 2025
"""

from clinical_table_export.projection.strategies import (
    ProjectionStrategy,
    RelationalProjectionStrategy,
    TimelineProjectionStrategy,
    PROJECTION_REGISTRY,
    get_projection_strategy,
)
from clinical_table_export.projection.derived_fields import (
    convert_time,
    dispense_count,
    total_cost,
    duration_fields,
)
from clinical_table_export.projection.observations import iter_valued_observations

__all__ = [
    "ProjectionStrategy",
    "RelationalProjectionStrategy",
    "TimelineProjectionStrategy",
    "PROJECTION_REGISTRY",
    "get_projection_strategy",
    "convert_time",
    "dispense_count",
    "total_cost",
    "duration_fields",
    "iter_valued_observations",
]
