"""
Patient Table Export CLI

Command-line interface for exporting patient record graphs (JSON) into flat,
comma-delimited tables. Settings come from the environment (``.env``
supported) and are overridden by the flags given here.

Usage:
    python export_patient_tables.py --input records/ --output-dir output/csv
    python export_patient_tables.py --input records/ --output-dir out --timeline --workers 4

Author: Shubham Singh
Date: December 2025
"""

import argparse
import dataclasses
import sys
import time

from loguru import logger

from clinical_table_export.core.config import ExportConfiguration
from clinical_table_export.core.constants import LOG_FORMAT
from clinical_table_export.core.exceptions import (
    ConfigurationError,
    ExportInitializationError,
    RecordLoadError,
    TableExportError,
)
from clinical_table_export.pipeline import TableExportPipeline
from clinical_table_export.repository import FileBasedRecordRepository


def create_argument_parser() -> argparse.ArgumentParser:
    """
    Create and configure the command-line argument parser.

    Step 1: Create ArgumentParser with description
    Step 2: Add input and output-dir arguments
    Step 3: Add schema flags
    Step 4: Add as-of and workers arguments
    Step 5: Return configured parser

    Returns:
        ArgumentParser: Configured argument parser

    Example:
        >>> parser = create_argument_parser()
        >>> args = parser.parse_args(['--input', 'records/', '--timeline'])
    """
    # Step 1: Create ArgumentParser with description
    parser = argparse.ArgumentParser(
        description="Export patient record graphs into flat relational tables",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  Relational tables (default layout):
    python export_patient_tables.py --input records/ --output-dir output/csv

  Relational tables with split street address:
    python export_patient_tables.py --input records/ --parse-address

  Timeline tables, four patients at a time:
    python export_patient_tables.py --input records/ --timeline --workers 4

Environment:
  TABLE_EXPORT_TIMELINE_OUTPUT, TABLE_EXPORT_PARSE_ADDRESS,
  TABLE_EXPORT_OUTPUT_DIRECTORY, TABLE_EXPORT_MAX_WORKERS,
  TABLE_EXPORT_MAX_OBSERVATION_DEPTH, TABLE_EXPORT_SKIP_FAILED_PATIENTS
        """,
    )

    # Step 2: Add input and output-dir arguments
    parser.add_argument(
        "--input",
        required=True,
        help="JSON record file, or a directory of JSON record files",
    )
    parser.add_argument(
        "--output-dir",
        default=None,
        help="Directory receiving the table files (default: from environment)",
    )

    # Step 3: Add schema flags
    parser.add_argument(
        "--timeline",
        action="store_true",
        help="Write the per-patient timeline layout instead of the relational one",
    )
    parser.add_argument(
        "--parse-address",
        action="store_true",
        help="Split the street line into two columns (relational layout)",
    )

    # Step 4: Add as-of and workers arguments
    parser.add_argument(
        "--as-of",
        type=int,
        default=None,
        help="Export time in epoch milliseconds (default: now)",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Patients exported concurrently (default: from environment)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Log level (default: INFO)",
    )

    # Step 5: Return configured parser
    return parser


def build_configuration(args: argparse.Namespace) -> ExportConfiguration:
    """
    Load configuration from the environment and apply CLI overrides.

    Raises:
        ConfigurationError: If the resulting configuration is invalid
    """
    configuration = ExportConfiguration.from_environment(validate_on_load=False)

    overrides = {}
    if args.timeline:
        overrides["timeline_output"] = True
    if args.parse_address:
        overrides["parse_address"] = True
    if args.output_dir:
        overrides["output_directory"] = args.output_dir
    if args.workers is not None:
        overrides["max_workers"] = args.workers

    configuration = dataclasses.replace(configuration, **overrides)
    configuration.validate()
    return configuration


def main() -> None:
    """
    Main function to run the table export CLI.

    Step 1: Parse command-line arguments
    Step 2: Configure logging
    Step 3: Build configuration
    Step 4: Load patient records
    Step 5: Export every patient
    Step 6: Display completion summary

    Raises:
        SystemExit: If a critical error occurs
    """
    # Step 1: Parse command-line arguments
    parser = create_argument_parser()
    args = parser.parse_args()

    # Step 2: Configure logging
    logger.remove()
    logger.add(sys.stderr, level=args.log_level.upper(), format=LOG_FORMAT)

    try:
        # Step 3: Build configuration
        configuration = build_configuration(args)
        logger.info(f"Configuration: {configuration.to_dict()}")

        # Step 4: Load patient records
        repository = FileBasedRecordRepository(args.input)
        people = repository.load_people()

        as_of = args.as_of if args.as_of is not None else int(time.time() * 1000)

        # Step 5: Export every patient
        with TableExportPipeline(configuration) as pipeline:
            exported = pipeline.export_people(people, as_of)
            failed = pipeline.patients_failed

        # Step 6: Display completion summary
        print()
        print("=" * 80)
        print("EXPORT COMPLETE")
        print("=" * 80)
        print(f"Variant: {configuration.variant.value}")
        print(f"Patients exported: {len(exported)}/{len(people)}")
        if failed:
            print(f"Patients failed: {failed}")
        print(f"Output directory: {configuration.output_directory}")
        print()

    except ConfigurationError as error:
        logger.error(f"Invalid configuration: {error}")
        sys.exit(1)

    except RecordLoadError as error:
        logger.error(f"Cannot load records: {error}")
        sys.exit(1)

    except ExportInitializationError as error:
        logger.error(f"Cannot open output: {error}")
        sys.exit(1)

    except (TableExportError, OSError) as error:
        logger.error(f"Export failed: {error}")
        logger.exception("Full traceback:")
        sys.exit(1)


if __name__ == "__main__":
    main()
