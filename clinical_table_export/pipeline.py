"""
Clinical Table Export Pipeline - Main Orchestrator

This is the PUBLIC API entry point for the table export engine. It owns the
output context of one export run: the schema selection, the open table
files, and the record walker that writes into them.

Architecture Diagram:
    ┌─────────────────────────────────────────────────────────────────────┐
    │                        TableExportPipeline                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                     │
    │   ┌───────────┐    ┌───────────┐    ┌───────────┐    ┌───────────┐  │
    │   │  Schema   │ →  │  Writers  │ →  │  Walker   │ →  │ Projection│  │
    │   └───────────┘    └───────────┘    └───────────┘    └───────────┘  │
    │                                                                     │
    └─────────────────────────────────────────────────────────────────────┘

Usage:
    from clinical_table_export import TableExportPipeline

    with TableExportPipeline.from_environment() as pipeline:
        pipeline.export_people(people, as_of=1700000000000)

Author: Shubham Singh
Date: December 2025
"""

import random
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Iterable, List, Optional

from loguru import logger

from clinical_table_export.core.config import ExportConfiguration
from clinical_table_export.core.exceptions import ConfigurationError
from clinical_table_export.core.models import Person
from clinical_table_export.export.record_walker import RecordWalker
from clinical_table_export.schema.selector import SchemaSelection, SchemaSelector
from clinical_table_export.writers.table_writer import TableWriterSet


# =============================================================================
# STAGE 1: PIPELINE CLASS
# =============================================================================


class TableExportPipeline:
    """
    Main orchestrator for table export.

    What it does:
        Resolves the schema once, opens every table file, and exports
        patients one at a time or concurrently through a worker pool.

    How it works:
        STAGE 1: Validate configuration, select schema, open writers
        STAGE 2: On export_people():
            2.1 Submit each patient to the thread pool
            2.2 Count successes and failures
            2.3 Abort on the first failure unless skip_failed_patients is set
        STAGE 3: close() flushes and closes every table file

    Example:
        >>> config = ExportConfiguration(output_directory="out/csv", max_workers=4)
        >>> with TableExportPipeline(config) as pipeline:
        ...     pipeline.export_people(people, as_of=1700000000000)
    """

    def __init__(
        self,
        config: ExportConfiguration,
        writers: Optional[TableWriterSet] = None,
        rng: Optional[random.Random] = None,
    ):
        """
        Initialize pipeline with configuration and optional overrides.

        Args:
            config: Export configuration
            writers: Optional writer set override (for testing)
            rng: Optional random source for timeline timestamps (for testing)

        Raises:
            ConfigurationError: If the configuration is invalid or the writer
                set was opened for a different variant
            ExportInitializationError: If the table files cannot be opened
        """
        # =====================================================================
        # STAGE 1.1: VALIDATE AND STORE CONFIGURATION
        # =====================================================================
        config.validate()
        self._config = config

        # =====================================================================
        # STAGE 1.2: SELECT SCHEMA
        # =====================================================================
        self._selection = SchemaSelector.from_config(config, rng=rng)

        # =====================================================================
        # STAGE 1.3: OPEN WRITERS
        # =====================================================================
        if writers is not None:
            if writers.layout.variant is not self._selection.variant:
                raise ConfigurationError(
                    "Writer set layout does not match configured variant",
                    context={
                        "writers": writers.layout.variant.value,
                        "configured": self._selection.variant.value,
                    },
                )
            self._writers = writers
        else:
            self._writers = TableWriterSet.open(config.output_directory, self._selection.layout)

        self._walker = RecordWalker(self._selection, self._writers)

        # =====================================================================
        # STAGE 1.4: TRACKING STATE
        # =====================================================================
        self._counter_lock = threading.Lock()
        self._patients_exported = 0
        self._patients_failed = 0

        logger.info(
            f"TableExportPipeline initialized | "
            f"Variant: {self._selection.variant.value} | "
            f"Workers: {config.max_workers}"
        )

    # =========================================================================
    # STAGE 2: EXPORT API
    # =========================================================================

    def export(self, person: Person, as_of: int) -> str:
        """
        Export a single patient.

        Args:
            person: Patient to export
            as_of: Export time (epoch ms)

        Returns:
            The patient ID
        """
        person_id = self._walker.export(person, as_of)
        with self._counter_lock:
            self._patients_exported += 1
        return person_id

    def export_people(self, people: Iterable[Person], as_of: int) -> List[str]:
        """
        Export many patients through a pool of ``max_workers`` threads.

        Rows of different patients may interleave within a table, but each
        line is always written whole.

        Args:
            people: Patients to export
            as_of: Export time (epoch ms)

        Returns:
            IDs of the patients exported successfully, in completion order

        Raises:
            Exception: The first patient failure, unless skip_failed_patients
        """
        people = list(people)
        logger.info(f"Exporting {len(people)} patients | Workers: {self._config.max_workers}")

        exported: List[str] = []
        with ThreadPoolExecutor(max_workers=self._config.max_workers) as executor:
            futures = {
                executor.submit(self.export, person, as_of): index
                for index, person in enumerate(people)
            }

            for future in as_completed(futures):
                index = futures[future]
                try:
                    exported.append(future.result())
                except Exception as e:
                    with self._counter_lock:
                        self._patients_failed += 1
                    logger.error(f"Failed to export patient {index + 1}/{len(people)}: {e}")

                    if not self._config.skip_failed_patients:
                        for pending in futures:
                            pending.cancel()
                        raise

        logger.info(
            f"Export complete | "
            f"Exported: {len(exported)}/{len(people)} | "
            f"Failed: {self._patients_failed}"
        )
        return exported

    # =========================================================================
    # STAGE 3: LIFECYCLE
    # =========================================================================

    def close(self) -> None:
        """Flush and close every table file."""
        self._writers.close()

    def __enter__(self) -> "TableExportPipeline":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # =========================================================================
    # STAGE 4: FACTORY METHODS
    # =========================================================================

    @classmethod
    def from_environment(
        cls, env_file: Optional[str] = None, rng: Optional[random.Random] = None
    ) -> "TableExportPipeline":
        """
        Create pipeline from environment configuration.

        Args:
            env_file: Path to .env file (optional)
            rng: Optional random source for timeline timestamps

        Raises:
            ConfigurationError: If settings are invalid
            ExportInitializationError: If the table files cannot be opened
        """
        config = ExportConfiguration.from_environment(env_file=env_file, validate_on_load=True)
        return cls(config, rng=rng)

    # =========================================================================
    # STAGE 5: PROPERTIES AND METRICS
    # =========================================================================

    @property
    def config(self) -> ExportConfiguration:
        """Access to export configuration."""
        return self._config

    @property
    def selection(self) -> SchemaSelection:
        """Schema selected for this run."""
        return self._selection

    @property
    def writers(self) -> TableWriterSet:
        return self._writers

    @property
    def patients_exported(self) -> int:
        """Total patients exported."""
        return self._patients_exported

    @property
    def patients_failed(self) -> int:
        """Patients whose export raised."""
        return self._patients_failed
