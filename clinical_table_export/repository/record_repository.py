"""
Record Repository - Load Patient Record Graphs

This module reads Person graphs from plain JSON so a record can be exported
from the command line. A source is either one JSON file or a directory of
``*.json`` files (read in sorted name order). Each file holds a single
person object or a list of them.

Architecture:
    RecordRepository (Protocol)
    └── FileBasedRecordRepository → Loads from local JSON file(s)

Pipeline Position:
    [Repository] → Config → Schema Selector → Record Walker → Table Writers
     ^^^^^^^^^^
     You are here

Usage:
    from clinical_table_export.repository import FileBasedRecordRepository

    repo = FileBasedRecordRepository("records/")
    for person in repo.iter_people():
        ...

Author: Shubham Singh
Date: December 2025
"""

import json
from pathlib import Path
from typing import Any, Iterator, List, Protocol, Union, runtime_checkable

from loguru import logger

from clinical_table_export.core.exceptions import RecordLoadError
from clinical_table_export.core.models import Person


# =============================================================================
# STAGE 1: REPOSITORY PROTOCOL (INTERFACE)
# =============================================================================


@runtime_checkable
class RecordRepository(Protocol):
    """
    Protocol for sources of patient record graphs.

    Required Methods:
        iter_people() → Yield Person objects in source order
        load_people() → All Person objects as a list
    """

    def iter_people(self) -> Iterator[Person]:
        ...

    def load_people(self) -> List[Person]:
        ...


# =============================================================================
# STAGE 2: FILE-BASED REPOSITORY IMPLEMENTATION
# =============================================================================


class FileBasedRecordRepository:
    """
    Record repository backed by JSON on local disk.

    How it works:
        STAGE 2.1: Resolve the source into a list of files
        STAGE 2.2: Parse each file lazily on iteration
        STAGE 2.3: Convert each person object with Person.from_dict

    Example:
        >>> repo = FileBasedRecordRepository("records/patient_001.json")
        >>> people = repo.load_people()
    """

    def __init__(self, source_path: Union[str, Path]):
        """
        Args:
            source_path: A JSON file or a directory of JSON files

        Raises:
            RecordLoadError: If the path does not exist or holds no JSON files
        """
        self._source_path = Path(source_path)

        if not self._source_path.exists():
            raise RecordLoadError(str(self._source_path), "File not found")

        if self._source_path.is_dir():
            self._files = sorted(self._source_path.glob("*.json"))
            if not self._files:
                raise RecordLoadError(str(self._source_path), "Directory holds no .json files")
        else:
            self._files = [self._source_path]

        logger.info(f"FileBasedRecordRepository initialized | Files: {len(self._files)}")

    # =========================================================================
    # STAGE 3: LOADING
    # =========================================================================

    def iter_people(self) -> Iterator[Person]:
        """Yield every person in file order."""
        for path in self._files:
            for data in self._read_file(path):
                try:
                    yield Person.from_dict(data)
                except (KeyError, TypeError, ValueError) as e:
                    raise RecordLoadError(str(path), f"Malformed record: {e!r}") from e

    def load_people(self) -> List[Person]:
        """All people of the source as a list."""
        people = list(self.iter_people())
        logger.info(f"Loaded {len(people):,} patient records from {self._source_path}")
        return people

    def _read_file(self, path: Path) -> List[Any]:
        logger.debug(f"Reading records from: {path}")
        try:
            with open(path, "r", encoding="utf-8") as f:
                raw = json.load(f)
        except json.JSONDecodeError as e:
            raise RecordLoadError(str(path), f"Invalid JSON: {e}")
        except PermissionError:
            raise RecordLoadError(str(path), "Permission denied")
        except OSError as e:
            raise RecordLoadError(str(path), str(e))

        if isinstance(raw, dict):
            return [raw]
        if isinstance(raw, list):
            return raw
        raise RecordLoadError(str(path), "Expected a person object or a list of them")

    # =========================================================================
    # STAGE 4: PROPERTIES
    # =========================================================================

    @property
    def files(self) -> List[Path]:
        """Files this repository reads, in order."""
        return list(self._files)
