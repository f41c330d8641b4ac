"""
Configuration for Clinical Table Export

This module defines the configuration dataclass used to initialize the table
export engine. Configuration is:
    1. Loaded from environment variables (with .env support)
    2. Validated at startup to fail fast on misconfiguration
    3. Read once; the schema selection derived from it never changes

Configuration Hierarchy:
    ExportConfiguration (main config)
    ├── Schema Settings (timeline output, address parsing)
    ├── Output Settings (output directory)
    └── Execution Settings (workers, observation depth, failure policy)

Usage:
    from clinical_table_export.core.config import ExportConfiguration

    # Load from environment
    config = ExportConfiguration.from_environment()

    # Or configure programmatically
    config = ExportConfiguration(timeline_output=True, output_directory="out/csv")

Author: Shubham Singh
Date: December 2025
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from clinical_table_export.core.constants import DEFAULT_MAX_OBSERVATION_DEPTH
from clinical_table_export.core.enums import OutputVariant
from clinical_table_export.core.exceptions import ConfigurationError


# =============================================================================
# STAGE 1: DEFAULT VALUES
# =============================================================================


class ConfigDefaults:
    """Default configuration values."""

    DEFAULT_OUTPUT_DIR = "output/csv"
    DEFAULT_MAX_WORKERS = 1
    DEFAULT_MAX_OBSERVATION_DEPTH = DEFAULT_MAX_OBSERVATION_DEPTH

    ENV_PREFIX = "TABLE_EXPORT_"


def _env_flag(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


# =============================================================================
# STAGE 2: CONFIGURATION DATACLASS
# =============================================================================


@dataclass(frozen=True)
class ExportConfiguration:
    """
    Configuration for the table export engine.

    What it does:
        Encapsulates the two schema flags plus the settings of the
        surrounding pipeline. Frozen so the schema cannot change after
        startup.

    When to use:
        - At pipeline initialization
        - When creating test fixtures with custom config

    Example:
        >>> config = ExportConfiguration(timeline_output=True)
        >>> config.variant
        <OutputVariant.TIMELINE: 'timeline'>
    """

    # -------------------------------------------------------------------------
    # 2.1 Schema Configuration
    # -------------------------------------------------------------------------
    timeline_output: bool = False
    """Write the denormalized timeline layout instead of the relational one."""

    parse_address: bool = False
    """Split the street line into two columns (relational layout only)."""

    # -------------------------------------------------------------------------
    # 2.2 Output Configuration
    # -------------------------------------------------------------------------
    output_directory: str = ConfigDefaults.DEFAULT_OUTPUT_DIR
    """Directory receiving the table files."""

    # -------------------------------------------------------------------------
    # 2.3 Execution Configuration
    # -------------------------------------------------------------------------
    max_workers: int = ConfigDefaults.DEFAULT_MAX_WORKERS
    """Number of patients exported concurrently by the pipeline."""

    max_observation_depth: int = ConfigDefaults.DEFAULT_MAX_OBSERVATION_DEPTH
    """Deepest observation nesting the walker follows."""

    skip_failed_patients: bool = False
    """Log and continue when one patient's export fails instead of aborting."""

    @property
    def variant(self) -> OutputVariant:
        """Output variant selected by ``timeline_output``."""
        return OutputVariant.from_flag(self.timeline_output)

    # -------------------------------------------------------------------------
    # 2.4 Validation Methods
    # -------------------------------------------------------------------------

    def validate(self) -> None:
        """
        Validate configuration parameters.

        Raises:
            ConfigurationError: If configuration is invalid
        """
        if not self.output_directory:
            raise ConfigurationError(
                "Output directory must not be empty",
                context={"setting": "TABLE_EXPORT_OUTPUT_DIRECTORY"},
            )

        if self.max_workers < 1:
            raise ConfigurationError(
                f"Worker count must be positive, got {self.max_workers}",
                context={"setting": "TABLE_EXPORT_MAX_WORKERS", "value": self.max_workers},
            )

        if self.max_observation_depth < 1:
            raise ConfigurationError(
                f"Observation depth limit must be positive, got {self.max_observation_depth}",
                context={
                    "setting": "TABLE_EXPORT_MAX_OBSERVATION_DEPTH",
                    "value": self.max_observation_depth,
                },
            )

    # -------------------------------------------------------------------------
    # 2.5 Factory Methods
    # -------------------------------------------------------------------------

    @classmethod
    def from_environment(
        cls, env_file: Optional[str] = None, validate_on_load: bool = True
    ) -> "ExportConfiguration":
        """
        Load configuration from environment variables.

        STAGE 1: Load .env file (if specified or found)
        STAGE 2: Read environment variables
        STAGE 3: Validate configuration (optional)

        Args:
            env_file: Path to .env file (optional, auto-detected if not provided)
            validate_on_load: Whether to validate after loading

        Returns:
            Configured ExportConfiguration instance

        Raises:
            ConfigurationError: If settings are missing or invalid
        """
        # STAGE 1: Load .env file
        if env_file:
            load_dotenv(env_file)
        else:
            env_path = Path.cwd() / ".env"
            if env_path.exists():
                load_dotenv(env_path)

        # STAGE 2: Read environment variables
        prefix = ConfigDefaults.ENV_PREFIX
        try:
            config = cls(
                timeline_output=_env_flag(f"{prefix}TIMELINE_OUTPUT"),
                parse_address=_env_flag(f"{prefix}PARSE_ADDRESS"),
                output_directory=os.getenv(
                    f"{prefix}OUTPUT_DIRECTORY", ConfigDefaults.DEFAULT_OUTPUT_DIR
                ),
                max_workers=int(
                    os.getenv(f"{prefix}MAX_WORKERS", ConfigDefaults.DEFAULT_MAX_WORKERS)
                ),
                max_observation_depth=int(
                    os.getenv(
                        f"{prefix}MAX_OBSERVATION_DEPTH",
                        ConfigDefaults.DEFAULT_MAX_OBSERVATION_DEPTH,
                    )
                ),
                skip_failed_patients=_env_flag(f"{prefix}SKIP_FAILED_PATIENTS"),
            )
        except ValueError as e:
            raise ConfigurationError(
                "Numeric setting is not an integer", context={"error": str(e)}
            ) from e

        # STAGE 3: Validate
        if validate_on_load:
            config.validate()

        return config

    def to_dict(self) -> dict:
        """Convert configuration to dictionary (for logging/debugging)."""
        return {
            "variant": self.variant.value,
            "parse_address": self.parse_address,
            "output_directory": self.output_directory,
            "max_workers": self.max_workers,
            "max_observation_depth": self.max_observation_depth,
            "skip_failed_patients": self.skip_failed_patients,
        }
