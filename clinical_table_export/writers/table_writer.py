"""
Table Writers - One Append-Only Sink per Table

This module owns the open table files of one export. Each file gets its own
lock, so concurrent exports never interleave within a line while rows for
different tables can be written in parallel.

Lifecycle:
    open()  → create the output directory, open every file, write headers
    write() → check the row against the header, append one line
    flush() → push buffered lines of every table to the OS
    close() → flush and close every file

Pipeline Position:
    Config → Schema Selector → Record Walker → Projection → [Table Writers]
                                                             ^^^^^^^^^^^^^^^
                                                             You are here

Usage:
    from clinical_table_export.writers import TableWriterSet

    with TableWriterSet.open("output/csv", layout) as writers:
        writers.write(row)

Author: Shubham Singh
Date: December 2025
"""

import os
import threading
from pathlib import Path
from typing import Dict, List, Mapping, TextIO, Union

from loguru import logger

from clinical_table_export.core.enums import TableName
from clinical_table_export.core.exceptions import (
    ExportInitializationError,
    RowShapeError,
)
from clinical_table_export.core.models import Row
from clinical_table_export.schema.layouts import SchemaLayout, TableLayout


# =============================================================================
# STAGE 1: SINGLE TABLE SINK
# =============================================================================


class TableSink:
    """
    A text stream plus the lock guarding it.

    Every write is one complete line taken under the lock. Streams the
    sink does not own are flushed but left open on close.
    """

    def __init__(self, layout: TableLayout, stream: TextIO, owns_stream: bool = True):
        self.layout = layout
        self._stream = stream
        self._owns_stream = owns_stream
        self._lock = threading.Lock()

    def write_line(self, line: str) -> None:
        with self._lock:
            self._stream.write(line)

    def flush(self) -> None:
        with self._lock:
            self._stream.flush()

    def close(self) -> None:
        with self._lock:
            if self._stream.closed:
                return
            self._stream.flush()
            if self._owns_stream:
                self._stream.close()


# =============================================================================
# STAGE 2: TABLE WRITER SET
# =============================================================================


class TableWriterSet:
    """
    All table sinks of one selected layout.

    What it does:
        Routes each projected Row to the file of its table after checking
        that its field count matches the header.

    When to use:
        - Through TableWriterSet.open() for file output
        - Through TableWriterSet.from_streams() for in-memory tests

    Raises on write:
        UnknownTableError: Row addressed to a table outside the layout
        RowShapeError: Row field count differs from the header
        OSError: Underlying write failure, not wrapped
    """

    def __init__(self, layout: SchemaLayout, sinks: Dict[TableName, TableSink]):
        self._layout = layout
        self._sinks = sinks
        self._closed = False

    # -------------------------------------------------------------------------
    # 2.1 Factory Methods
    # -------------------------------------------------------------------------

    @classmethod
    def open(cls, output_directory: Union[str, Path], layout: SchemaLayout) -> "TableWriterSet":
        """
        Create the output directory and open every table file of the layout.

        Existing files are truncated. Each file starts with its header line.

        Args:
            output_directory: Directory receiving the table files
            layout: Selected layout

        Returns:
            Writer set with every file open

        Raises:
            ExportInitializationError: If the directory or any file cannot be
                opened. Files opened before the failure are closed again.
        """
        directory = Path(output_directory)
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ExportInitializationError(str(directory), e) from e

        sinks: Dict[TableName, TableSink] = {}
        for table_layout in layout:
            path = directory / table_layout.file_name
            stream = None
            try:
                stream = open(path, "w", encoding="utf-8", newline="")
                stream.write(table_layout.header + os.linesep)
            except OSError as e:
                if stream is not None:
                    stream.close()
                for sink in sinks.values():
                    sink.close()
                raise ExportInitializationError(str(path), e) from e
            sinks[table_layout.table] = TableSink(table_layout, stream)

        logger.info(
            f"Opened {len(sinks)} table files | "
            f"Variant: {layout.variant.value} | Directory: {directory}"
        )
        return cls(layout, sinks)

    @classmethod
    def from_streams(
        cls, layout: SchemaLayout, streams: Mapping[TableName, TextIO]
    ) -> "TableWriterSet":
        """
        Wrap caller-provided streams, one per table of the layout. The
        streams stay open after close().

        Raises:
            KeyError: If a table of the layout has no stream
        """
        sinks: Dict[TableName, TableSink] = {}
        for table_layout in layout:
            stream = streams[table_layout.table]
            stream.write(table_layout.header + os.linesep)
            sinks[table_layout.table] = TableSink(table_layout, stream, owns_stream=False)
        return cls(layout, sinks)

    # -------------------------------------------------------------------------
    # 2.2 Writing
    # -------------------------------------------------------------------------

    def write(self, row: Row) -> None:
        """Append one row to its table."""
        table_layout = self._layout.table(row.table)
        if len(row.fields) != table_layout.field_count:
            raise RowShapeError(row.table.value, table_layout.field_count, len(row.fields))
        self._sinks[row.table].write_line(row.to_line())

    def write_all(self, rows: List[Row]) -> None:
        for row in rows:
            self.write(row)

    def flush(self) -> None:
        """Flush every table."""
        for sink in self._sinks.values():
            sink.flush()

    def close(self) -> None:
        """Flush and close every table. Safe to call twice."""
        if self._closed:
            return
        self._closed = True
        for sink in self._sinks.values():
            sink.close()
        logger.debug(f"Closed {len(self._sinks)} table files")

    # -------------------------------------------------------------------------
    # 2.3 Context Manager and Properties
    # -------------------------------------------------------------------------

    def __enter__(self) -> "TableWriterSet":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @property
    def layout(self) -> SchemaLayout:
        return self._layout

    @property
    def closed(self) -> bool:
        return self._closed
