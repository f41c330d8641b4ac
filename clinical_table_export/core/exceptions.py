"""
Domain Exceptions for Clinical Table Export

This module defines all custom exceptions used throughout the table export
engine. Well-defined exceptions enable:
    1. Clear error categorization for debugging
    2. Specific catch blocks for different failure modes
    3. Rich error context for troubleshooting

Exception Hierarchy:
    TableExportError (base)
    ├── ConfigurationError          → Invalid configuration
    ├── ExportInitializationError   → Output directory / table file cannot be opened
    ├── SchemaError                 → Row does not fit the selected layout
    │   ├── UnknownTableError
    │   └── RowShapeError
    ├── RecordStructureError        → Malformed record graph
    └── RecordLoadError             → Record file cannot be loaded

Plain I/O failures during an export (disk full, permission revoked) are NOT
wrapped: the OSError reaches the caller of RecordWalker.export() unchanged.

Usage:
    from clinical_table_export.core.exceptions import ExportInitializationError

    try:
        writers = TableWriterSet.open(output_dir, layout)
    except ExportInitializationError as e:
        logger.error(f"Cannot open table files: {e.context}")

Author: Shubham Singh
Date: December 2025
"""

from typing import Optional


# =============================================================================
# STAGE 1: BASE EXCEPTION
# =============================================================================
# All domain exceptions inherit from this base class.


class TableExportError(Exception):
    """
    Base exception for all table export errors.

    What it does:
        Provides a common base class for all domain-specific exceptions,
        enabling catch-all handling while preserving specific error types.

    Attributes:
        message: Human-readable error description
        context: Dictionary of additional context for debugging
    """

    def __init__(self, message: str, context: Optional[dict] = None):
        """
        Initialize with message and optional context.

        Args:
            message: Human-readable error description
            context: Additional debugging context (table, path, counts)
        """
        self.message = message
        self.context = context or {}
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format message with context for display."""
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} [{context_str}]"
        return self.message


# =============================================================================
# STAGE 2: CONFIGURATION ERRORS
# =============================================================================


class ConfigurationError(TableExportError):
    """
    Error in export configuration.

    When raised:
        - Non-positive worker count
        - Non-positive observation depth limit
        - Empty output directory
    """

    pass


# =============================================================================
# STAGE 3: INITIALIZATION ERRORS
# =============================================================================
# The export cannot run on a partial table set, so these are fatal.


class ExportInitializationError(TableExportError):
    """
    Output directory or a table file could not be opened.

    What it does:
        Wraps the underlying OSError raised while creating the output
        directory or opening one of the table files. Raised before any
        patient is exported.

    Attributes:
        path: The directory or file that failed
        original_error: The wrapped OSError
    """

    def __init__(self, path: str, original_error: Optional[Exception] = None):
        self.path = path
        self.original_error = original_error
        super().__init__(
            f"Unable to initialize table output at {path}",
            context={
                "path": path,
                "original_error": str(original_error) if original_error else None,
            },
        )


# =============================================================================
# STAGE 4: SCHEMA ERRORS
# =============================================================================
# A projected row that does not fit its table is a programming error.


class SchemaError(TableExportError):
    """Base exception for rows that do not fit the selected layout."""

    pass


class UnknownTableError(SchemaError):
    """
    Row addressed to a table that the selected layout does not define.

    When raised:
        - Writing a vitals row while the relational layout is selected
    """

    def __init__(self, table: str, variant: str):
        self.table = table
        self.variant = variant
        super().__init__(
            f"Table '{table}' is not part of the {variant} layout",
            context={"table": table, "variant": variant},
        )


class RowShapeError(SchemaError):
    """
    Row field count differs from the table header.

    Attributes:
        table: Table the row was addressed to
        expected: Header field count
        actual: Row field count
    """

    def __init__(self, table: str, expected: int, actual: int):
        self.table = table
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Row for '{table}' has {actual} fields, header has {expected}",
            context={"table": table, "expected": expected, "actual": actual},
        )


# =============================================================================
# STAGE 5: RECORD ERRORS
# =============================================================================


class RecordStructureError(TableExportError):
    """
    Record graph is malformed in a way the walker refuses to follow.

    When raised:
        - Observation nesting deeper than the configured limit
    """

    pass


class RecordLoadError(TableExportError):
    """
    Error loading a patient record file.

    When raised:
        - File not found
        - Invalid JSON format
        - Permission denied

    Attributes:
        file_path: Path to the record file
        reason: Why loading failed
    """

    def __init__(self, file_path: str, reason: str):
        self.file_path = file_path
        self.reason = reason
        super().__init__(
            f"Failed to load records from {file_path}: {reason}",
            context={"file_path": file_path, "reason": reason},
        )
