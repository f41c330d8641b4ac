"""
Schema Selector - Resolve the Output Variant Once

The two configuration flags pick one layout and its matching projection
strategy. The pair is resolved at startup and never changes afterwards.

    timeline_output=False → relational layout (parse_address honored)
    timeline_output=True  → timeline layout (parse_address ignored, always split)

Pipeline Position:
    Config → [Schema Selector] → Record Walker → Projection → Table Writers
             ^^^^^^^^^^^^^^^^^
             You are here

Author: Shubham Singh
Date: December 2025
"""

import random
from dataclasses import dataclass
from typing import Optional

from loguru import logger

from clinical_table_export.core.config import ExportConfiguration
from clinical_table_export.core.constants import DEFAULT_MAX_OBSERVATION_DEPTH
from clinical_table_export.core.enums import OutputVariant
from clinical_table_export.projection.strategies import ProjectionStrategy, get_projection_strategy
from clinical_table_export.schema.layouts import SchemaLayout, relational_layout, timeline_layout


@dataclass(frozen=True)
class SchemaSelection:
    """
    The layout and projection strategy selected for this process.

    Attributes:
        layout: Table files and headers to write
        strategy: Row projection matching the layout
    """

    layout: SchemaLayout
    strategy: ProjectionStrategy

    @property
    def variant(self) -> OutputVariant:
        return self.layout.variant


class SchemaSelector:
    """
    Maps the two schema flags to a SchemaSelection.

    Example:
        >>> selection = SchemaSelector.select(timeline_output=True, parse_address=False)
        >>> len(selection.layout)
        12
    """

    @staticmethod
    def select(
        timeline_output: bool,
        parse_address: bool,
        rng: Optional[random.Random] = None,
        max_observation_depth: int = DEFAULT_MAX_OBSERVATION_DEPTH,
    ) -> SchemaSelection:
        """
        Resolve the layout and strategy.

        Args:
            timeline_output: Select the timeline layout
            parse_address: Decompose the street line (relational only)
            rng: Random source for timeline timestamps
            max_observation_depth: Observation nesting limit

        Returns:
            The selection for this process
        """
        variant = OutputVariant.from_flag(timeline_output)

        if variant is OutputVariant.TIMELINE:
            layout = timeline_layout()
        else:
            layout = relational_layout(parse_address=parse_address)

        strategy = get_projection_strategy(
            variant,
            parse_address=layout.parse_address,
            rng=rng,
            max_observation_depth=max_observation_depth,
        )

        logger.debug(
            f"Schema selected | Variant: {variant.value} | "
            f"Tables: {len(layout)} | Parse address: {layout.parse_address}"
        )
        return SchemaSelection(layout=layout, strategy=strategy)

    @classmethod
    def from_config(
        cls, config: ExportConfiguration, rng: Optional[random.Random] = None
    ) -> SchemaSelection:
        """Resolve the selection from an ExportConfiguration."""
        return cls.select(
            timeline_output=config.timeline_output,
            parse_address=config.parse_address,
            rng=rng,
            max_observation_depth=config.max_observation_depth,
        )
