"""Tests for row projection under both layouts."""

from decimal import Decimal

import pytest

from clinical_table_export.core.enums import TableName
from clinical_table_export.core.exceptions import RecordStructureError
from clinical_table_export.core.models import Code, Observation
from clinical_table_export.projection.strategies import (
    RelationalProjectionStrategy,
    TimelineProjectionStrategy,
)

from conftest import AS_OF, DAY, JAN_1_2020, JAN_11_2020, make_full_encounter, make_person, sequential_ids


def _vitals_panel():
    return Observation(
        start=JAN_1_2020,
        codes=[Code("55284-4", "Vital signs panel")],
        observations=[
            Observation(start=JAN_1_2020, codes=[Code("29463-7", "Body Weight")], value=70.0, unit="kg"),
            Observation(start=JAN_1_2020, codes=[Code("empty", "Empty panel")]),
            Observation(start=JAN_1_2020, codes=[Code("2339-0", "Glucose")], value=95, unit="mg/dL"),
        ],
    )


def _nested(depth):
    observation = Observation(start=JAN_1_2020, codes=[Code("8302-2", "Height")], value=170.0)
    for level in range(depth - 1):
        observation = Observation(
            start=JAN_1_2020, codes=[Code(f"panel-{level}", "Panel")], observations=[observation]
        )
    return observation


# =============================================================================
# Patient rows
# =============================================================================


class TestPatientRows:
    def test_relational_patient_without_address_split(self, relational_selection):
        row = relational_selection.strategy.patient(make_person(), AS_OF)
        assert row.table is TableName.PATIENTS
        assert row.fields[0] == "patient-1"
        assert row.fields[2] == ""
        assert row.fields[-4:] == ("100 Main St", "Springfield", "IL", "62704")
        assert "Boston  Massachusetts" in row.fields

    def test_relational_patient_with_address_split(self, relational_address_selection):
        row = relational_address_selection.strategy.patient(make_person(), AS_OF)
        assert row.fields[-6:] == ("100 Main St", "", "Springfield", "IL", "62704", "US")

    def test_timeline_patient_always_splits(self, timeline_selection):
        person = make_person(address="1 2 3 4 5 6 7")
        row = timeline_selection.strategy.patient(person, AS_OF)
        assert row.fields[-6] == " address contained7 elements"
        assert row.fields[-1] == "US"

    def test_death_date_only_when_dead_at_export_time(self, relational_selection):
        strategy = relational_selection.strategy
        person = make_person(death=JAN_11_2020)
        assert strategy.patient(person, JAN_1_2020).fields[2] == ""
        assert strategy.patient(person, AS_OF).fields[2] == "2020-01-11"

    def test_missing_address_attribute_raises(self, relational_selection):
        person = make_person()
        del person.attributes["city"]
        with pytest.raises(KeyError):
            relational_selection.strategy.patient(person, AS_OF)


# =============================================================================
# Encounter-scoped rows
# =============================================================================


class TestRelationalRows:
    def test_encounter_row(self, relational_selection):
        encounter_id, row = relational_selection.strategy.encounter("p", make_full_encounter())
        assert encounter_id == "rel-1"
        assert row.fields == (
            "rel-1",
            "2020-01-01T00:00:00Z",
            "2020-01-01T01:00:00Z",
            "p",
            "ambulatory",
            "185349003",
            "Encounter for check up",
            "129.16",
            "44054006",
            "Diabetes",
        )

    def test_encounter_cost_rounds_half_cent_up(self, relational_selection):
        encounter = make_full_encounter()
        encounter.cost = Decimal("129.165")
        _, row = relational_selection.strategy.encounter("p", encounter)
        assert row.fields[7] == "129.17"

    def test_medication_row_costs(self, relational_selection):
        medication = make_full_encounter().medications[0]
        row = relational_selection.strategy.medication("p", "e", medication, AS_OF)
        assert row.fields == (
            "2020-01-01",
            "2020-03-31",
            "p",
            "e",
            "860975",
            "Metformin 500 MG",
            "10.33",
            "3",
            "30.99",
            "44054006",
            "Diabetes",
        )

    def test_refills_drive_dispenses(self, relational_selection):
        medication = make_full_encounter().medications[0]
        medication.prescription_details = {"refills": 5}
        row = relational_selection.strategy.medication("p", "e", medication, AS_OF)
        assert row.fields[7] == "5"
        assert row.fields[8] == "51.66"

    def test_missing_reason_gives_two_empty_fields(self, relational_selection):
        procedure = make_full_encounter().procedures[0]
        row = relational_selection.strategy.procedure("p", "e", procedure)
        assert row.fields[-3:] == ("516.65", "", "")

    def test_every_valued_observation_goes_to_general_table(self, relational_selection):
        rows = relational_selection.strategy.observations("p", "e", _vitals_panel())
        assert [row.fields[3] for row in rows] == ["29463-7", "2339-0"]
        assert [row.fields[-1] for row in rows] == ["numeric", "numeric"]
        assert relational_selection.strategy.vitals("p", "e", _vitals_panel()) == []

    def test_stop_before_start_does_not_crash(self, relational_selection):
        condition = make_full_encounter().conditions[0]
        condition.stop = condition.start - DAY
        row = relational_selection.strategy.condition("p", "e", condition)
        assert row.fields[1] == "2019-12-31"

    def test_empty_code_list_raises(self, relational_selection):
        condition = make_full_encounter().conditions[0]
        condition.codes = []
        with pytest.raises(IndexError):
            relational_selection.strategy.condition("p", "e", condition)


class TestTimelineRows:
    def test_encounter_row_leads_with_mrn_and_timestamp(self, timeline_selection):
        encounter_id, row = timeline_selection.strategy.encounter("p", make_full_encounter())
        assert row.fields[0] == "p"
        assert row.fields[1].startswith("2020-01-01 ")
        assert row.fields[2] == encounter_id
        assert row.fields[3] == "01/01/2020"

    def test_condition_duration_columns(self, timeline_selection):
        condition = make_full_encounter().conditions[0]
        row = timeline_selection.strategy.condition("p", "e", condition)
        assert row.fields[4:6] == ("", "999")

        condition.stop = JAN_11_2020
        row = timeline_selection.strategy.condition("p", "e", condition)
        assert row.fields[4:6] == ("01/11/2020", "10")

    def test_medication_has_no_cost_columns(self, timeline_selection):
        medication = make_full_encounter().medications[0]
        row = timeline_selection.strategy.medication("p", "e", medication, AS_OF)
        assert row.fields[3:8] == ("01/01/2020", "03/31/2020", "90", "860975", "Metformin 500 MG")
        assert "10.33" not in row.fields

    def test_panel_children_are_routed_by_code(self, timeline_selection):
        strategy = timeline_selection.strategy
        panel = _vitals_panel()

        general = strategy.observations("p", "e", panel)
        vitals = strategy.vitals("p", "e", panel)
        social = strategy.social_determinants("p", "e", panel)

        assert [row.fields[3] for row in general] == ["2339-0"]
        assert [row.fields[3] for row in vitals] == ["29463-7"]
        assert vitals[0].table is TableName.VITALS
        assert vitals[0].fields[5:] == ("70.0", "kg", "e")
        assert social == []

    def test_social_determinant_excluded_from_general_table(self, timeline_selection):
        strategy = timeline_selection.strategy
        observation = make_full_encounter().observations[2]
        assert strategy.observations("p", "e", observation) == []
        rows = strategy.social_determinants("p", "e", observation)
        assert rows[0].table is TableName.SOCIAL_DETERMINANTS
        assert rows[0].fields[5] == "Heterosexual"

    def test_careplan_row(self, timeline_selection):
        careplan = make_full_encounter().careplans[0]
        careplan_id, row = timeline_selection.strategy.careplan("p", "e", careplan)
        assert row.fields[2:4] == (careplan_id, "e")
        assert row.fields[5:7] == ("", "999")

    def test_timestamps_differ_per_row(self, timeline_selection):
        strategy = timeline_selection.strategy
        immunization = make_full_encounter().immunizations[0]
        stamps = {strategy.immunization("p", "e", immunization).fields[1] for _ in range(20)}
        assert len(stamps) > 1


class TestObservationDepth:
    def test_depth_within_limit(self):
        strategy = TimelineProjectionStrategy(max_observation_depth=3)
        assert len(strategy.vitals("p", "e", _nested(3))) == 1

    def test_depth_beyond_limit_raises(self):
        strategy = RelationalProjectionStrategy(max_observation_depth=3)
        with pytest.raises(RecordStructureError):
            strategy.observations("p", "e", _nested(4))


class TestImagingStudy:
    @pytest.mark.parametrize("strategy_class", [RelationalProjectionStrategy, TimelineProjectionStrategy])
    def test_first_series_and_instance(self, strategy_class):
        strategy = strategy_class(id_factory=sequential_ids("study"))
        study = make_full_encounter().imaging_studies[0]
        study_id, row = strategy.imaging_study("p", "e", study)
        assert study_id == "study-1"
        assert row.fields == (
            "study-1",
            "2020-01-01",
            "p",
            "e",
            "51185008",
            "Thoracic structure",
            "CR",
            "Computed Radiography",
            "1.2.840.10008.5.1.4.1.1.1",
            "CR Image Storage",
        )
