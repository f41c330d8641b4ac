"""Tests for the table writer set."""

import io
import os

import pytest

from clinical_table_export.core.enums import TableName
from clinical_table_export.core.exceptions import (
    ExportInitializationError,
    RowShapeError,
    UnknownTableError,
)
from clinical_table_export.core.models import Row
from clinical_table_export.schema.layouts import relational_layout, timeline_layout
from clinical_table_export.writers import table_writer
from clinical_table_export.writers.table_writer import TableWriterSet

from conftest import memory_writers


class TestOpen:
    def test_writes_one_header_per_file(self, tmp_path):
        layout = timeline_layout()
        with TableWriterSet.open(tmp_path / "csv", layout):
            pass

        files = sorted(path.name for path in (tmp_path / "csv").iterdir())
        assert files == sorted(table.file_name for table in layout)

        content = (tmp_path / "csv" / "encounter.csv").read_bytes().decode("utf-8")
        assert content == layout.table(TableName.ENCOUNTERS).header + os.linesep

    def test_existing_files_are_truncated(self, tmp_path):
        (tmp_path / "conditions.csv").write_text("stale\nrows\n")
        with TableWriterSet.open(tmp_path, relational_layout()):
            pass
        lines = (tmp_path / "conditions.csv").read_text().splitlines()
        assert lines == ["START,STOP,PATIENT,ENCOUNTER,CODE,DESCRIPTION"]

    def test_directory_failure_is_wrapped(self, tmp_path):
        blocker = tmp_path / "not-a-directory"
        blocker.write_text("")
        with pytest.raises(ExportInitializationError) as exc_info:
            TableWriterSet.open(blocker / "csv", relational_layout())
        assert isinstance(exc_info.value.original_error, OSError)

    def test_file_failure_is_wrapped(self, tmp_path):
        (tmp_path / "encounters.csv").mkdir()
        with pytest.raises(ExportInitializationError) as exc_info:
            TableWriterSet.open(tmp_path, relational_layout())
        assert exc_info.value.path.endswith("encounters.csv")


class TestWrite:
    def test_row_is_appended_to_its_table(self):
        writers, streams = memory_writers(relational_layout())
        writers.write(Row(TableName.IMMUNIZATIONS, ("2020-01-01", "p", "e", "140", "Flu", "1.00")))
        lines = streams[TableName.IMMUNIZATIONS].getvalue().splitlines()
        assert lines[1] == "2020-01-01,p,e,140,Flu,1.00"
        assert streams[TableName.CONDITIONS].getvalue().count(os.linesep) == 1

    def test_wrong_field_count_raises(self):
        writers, _ = memory_writers(relational_layout())
        with pytest.raises(RowShapeError) as exc_info:
            writers.write(Row(TableName.IMMUNIZATIONS, ("2020-01-01", "p")))
        assert exc_info.value.expected == 6
        assert exc_info.value.actual == 2

    def test_table_outside_layout_raises(self):
        writers, _ = memory_writers(relational_layout())
        with pytest.raises(UnknownTableError):
            writers.write(Row(TableName.VITALS, tuple("x" * 8)))

    def test_close_leaves_caller_streams_open(self):
        writers, streams = memory_writers(relational_layout())
        writers.close()
        writers.close()
        assert writers.closed
        assert not streams[TableName.PATIENTS].closed

    def test_missing_stream_raises(self):
        with pytest.raises(KeyError):
            TableWriterSet.from_streams(relational_layout(), {TableName.PATIENTS: io.StringIO()})


class _FailingHeaderStream:
    def __init__(self):
        self.closed = False

    def write(self, text):
        raise OSError("disk full")

    def close(self):
        self.closed = True


def test_header_write_failure_closes_the_stream(tmp_path, monkeypatch):
    opened = []

    def failing_open(*args, **kwargs):
        stream = _FailingHeaderStream()
        opened.append(stream)
        return stream

    monkeypatch.setattr(table_writer, "open", failing_open, raising=False)

    with pytest.raises(ExportInitializationError) as exc_info:
        TableWriterSet.open(tmp_path, relational_layout())

    assert len(opened) == 1
    assert opened[0].closed
    assert exc_info.value.path.endswith("patients.csv")
