"""Tests for dispense counts, total cost, and durations."""

from decimal import Decimal

import pytest

from clinical_table_export.core.models import Code, Medication
from clinical_table_export.projection.derived_fields import (
    convert_time,
    dispense_count,
    duration_fields,
    total_cost,
)

from conftest import DAY, JAN_1_2020, JAN_11_2020


def _medication(stop=None, details=None, cost="10.00"):
    return Medication(
        start=JAN_1_2020,
        stop=stop,
        codes=[Code("860975", "Metformin")],
        cost=Decimal(cost),
        prescription_details=details,
    )


class TestDispenseCount:
    @pytest.mark.parametrize("refills, expected", [(0, 1), (1, 1), (3, 3), (12, 12)])
    def test_refills_win_and_clamp_to_one(self, refills, expected):
        medication = _medication(stop=JAN_1_2020 + 400 * DAY, details={"refills": refills})
        assert dispense_count(medication, as_of=JAN_1_2020) == expected

    def test_duration_metadata_divides_active_time(self):
        details = {"duration": {"quantity": 1, "unit": "weeks"}}
        medication = _medication(stop=JAN_1_2020 + 15 * DAY, details=details)
        assert dispense_count(medication, as_of=0) == 2

    def test_defaults_to_thirty_day_month(self):
        medication = _medication(stop=JAN_1_2020 + 95 * DAY)
        assert dispense_count(medication, as_of=0) == 3

    def test_unstopped_medication_runs_to_as_of(self):
        medication = _medication(stop=None)
        assert dispense_count(medication, as_of=JAN_1_2020 + 61 * DAY) == 2

    def test_stop_before_start_still_dispenses_once(self):
        medication = _medication(stop=JAN_1_2020 - 10 * DAY)
        assert dispense_count(medication, as_of=0) == 1


class TestTotalCost:
    def test_total_is_truncated_not_rounded(self):
        assert total_cost(Decimal("10.333"), 3) == Decimal("30.99")

    def test_total_of_whole_cents(self):
        assert total_cost(Decimal("2.50"), 4) == Decimal("10.00")


class TestDurationFields:
    def test_ten_day_duration(self):
        assert duration_fields(JAN_1_2020, JAN_11_2020) == ("01/11/2020", "10")

    def test_no_stop_is_ongoing(self):
        assert duration_fields(JAN_1_2020, None) == ("", "999")

    def test_same_day_is_zero(self):
        assert duration_fields(JAN_1_2020, JAN_1_2020 + 5 * 60 * 60 * 1000) == ("01/01/2020", "0")

    def test_stop_before_start_is_negative(self):
        assert duration_fields(JAN_11_2020, JAN_1_2020) == ("01/01/2020", "-10")


class TestConvertTime:
    def test_known_units(self):
        assert convert_time("days", 2) == 2 * DAY
        assert convert_time("Months", 1) == 30 * DAY

    def test_unknown_unit(self):
        with pytest.raises(ValueError):
            convert_time("fortnights", 1)
