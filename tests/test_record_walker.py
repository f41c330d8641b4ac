"""Tests for record traversal and concurrent export."""

import threading

from clinical_table_export.core.enums import TableName
from clinical_table_export.core.models import Code
from clinical_table_export.export.record_walker import RecordWalker
from clinical_table_export.projection.strategies import TimelineProjectionStrategy
from clinical_table_export.schema.layouts import timeline_layout
from clinical_table_export.schema.selector import SchemaSelection

from conftest import AS_OF, make_full_encounter, make_person, memory_writers, parse_table


def _export(selection, person):
    writers, streams = memory_writers(selection.layout)
    person_id = RecordWalker(selection, writers).export(person, AS_OF)
    return person_id, streams


class TestFieldCounts:
    def test_relational_rows_match_headers(self, relational_selection):
        _, streams = _export(relational_selection, make_person())
        for stream in streams.values():
            header, rows = parse_table(stream)
            assert rows
            assert all(len(row) == len(header) for row in rows)

    def test_relational_with_address_rows_match_headers(self, relational_address_selection):
        _, streams = _export(relational_address_selection, make_person(address="1 2 3 4 5 6 7"))
        header, rows = parse_table(streams[TableName.PATIENTS])
        assert len(rows[0]) == len(header)

    def test_timeline_rows_match_headers(self, timeline_selection):
        _, streams = _export(timeline_selection, make_person())
        for stream in streams.values():
            header, rows = parse_table(stream)
            assert rows
            assert all(len(row) == len(header) for row in rows)


class TestTraversal:
    def test_returns_person_id(self, relational_selection):
        person_id, _ = _export(relational_selection, make_person("abc"))
        assert person_id == "abc"

    def test_foreign_keys_link_to_encounter(self, relational_selection):
        _, streams = _export(relational_selection, make_person())
        _, encounters = parse_table(streams[TableName.ENCOUNTERS])
        encounter_id = encounters[0][0]

        for table in (TableName.CONDITIONS, TableName.ALLERGIES, TableName.MEDICATIONS):
            _, rows = parse_table(streams[table])
            assert rows[0][3] == encounter_id

    def test_relational_observation_table_flattens_panel(self, relational_selection):
        _, streams = _export(relational_selection, make_person())
        _, rows = parse_table(streams[TableName.OBSERVATIONS])
        assert [row[3] for row in rows] == ["2339-0", "72166-2", "76690-7", "8480-6", "8462-4"]

    def test_timeline_subsets(self, timeline_selection):
        _, streams = _export(timeline_selection, make_person())
        _, labs = parse_table(streams[TableName.OBSERVATIONS])
        _, vitals = parse_table(streams[TableName.VITALS])
        _, social = parse_table(streams[TableName.SOCIAL_DETERMINANTS])
        assert [row[3] for row in labs] == ["2339-0", "72166-2"]
        assert [row[3] for row in vitals] == ["8480-6", "8462-4"]
        assert [row[3] for row in social] == ["76690-7"]

    def test_encounters_in_stored_order(self, relational_selection):
        first, second = make_full_encounter(), make_full_encounter()
        second.conditions[0].codes = [Code("38341003", "Hypertension")]
        _, streams = _export(relational_selection, make_person(encounters=[first, second]))
        _, rows = parse_table(streams[TableName.CONDITIONS])
        assert [row[4] for row in rows] == ["44054006", "38341003"]

    def test_person_without_encounters_writes_patient_only(self, relational_selection):
        _, streams = _export(relational_selection, make_person(encounters=[]))
        assert len(parse_table(streams[TableName.PATIENTS])[1]) == 1
        assert parse_table(streams[TableName.ENCOUNTERS])[1] == []


class TestConcurrentExport:
    def test_lines_never_interleave(self):
        selection = SchemaSelection(
            layout=timeline_layout(), strategy=TimelineProjectionStrategy()
        )
        writers, streams = memory_writers(selection.layout)
        walker = RecordWalker(selection, writers)

        def worker(thread_index):
            for n in range(25):
                walker.export(make_person(f"p{thread_index}-{n}"), AS_OF)

        threads = [threading.Thread(target=worker, args=(i,)) for i in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        header, patients = parse_table(streams[TableName.PATIENTS])
        assert len(patients) == 200
        assert all(len(row) == len(header) for row in patients)

        for stream in streams.values():
            header, rows = parse_table(stream)
            assert all(len(row) == len(header) for row in rows)

        patient_ids = {row[0] for row in patients}
        assert len(patient_ids) == 200

        _, encounters = parse_table(streams[TableName.ENCOUNTERS])
        assert len(encounters) == 200
        encounter_keys = {(row[0], row[2]) for row in encounters}
        assert {mrn for mrn, _ in encounter_keys} == patient_ids

        for table, stream in streams.items():
            if table in (TableName.PATIENTS, TableName.ENCOUNTERS):
                continue
            header, rows = parse_table(stream)
            person_column = header.index("MRN" if "MRN" in header else "PATIENT")
            encounter_column = header.index("EncounterID" if "EncounterID" in header else "ENCOUNTER")
            for row in rows:
                assert (row[person_column], row[encounter_column]) in encounter_keys
