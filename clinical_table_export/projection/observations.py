"""
Observation Traversal

Panels (observations without a value) are replaced by their children,
recursively. Only observations carrying a value are ever projected.

Author: Shubham Singh
Date: December 2025
"""

from typing import Iterator, List, Tuple

from clinical_table_export.core.exceptions import RecordStructureError
from clinical_table_export.core.models import Observation


def iter_valued_observations(observation: Observation, max_depth: int) -> Iterator[Observation]:
    """
    Yield the observation itself, or the valued descendants of a panel,
    depth-first in stored order.

    A panel without children yields nothing.

    Args:
        observation: Root observation
        max_depth: Deepest nesting level followed (root is level 1)

    Raises:
        RecordStructureError: If nesting exceeds ``max_depth``
    """
    stack: List[Tuple[Observation, int]] = [(observation, 1)]

    while stack:
        current, depth = stack.pop()
        if depth > max_depth:
            raise RecordStructureError(
                "Observation nesting exceeds depth limit",
                context={"max_depth": max_depth},
            )

        if current.value is not None:
            yield current
            continue

        for child in reversed(current.observations or []):
            stack.append((child, depth + 1))
