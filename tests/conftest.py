"""Shared fixtures for the table export tests."""

import io
import itertools
import random
from decimal import Decimal

import pytest

from clinical_table_export.core import constants
from clinical_table_export.core.models import (
    CarePlan,
    Code,
    Encounter,
    Entry,
    HealthRecord,
    ImagingInstance,
    ImagingSeries,
    ImagingStudy,
    Medication,
    Observation,
    Person,
    Procedure,
)
from clinical_table_export.projection.strategies import (
    RelationalProjectionStrategy,
    TimelineProjectionStrategy,
)
from clinical_table_export.schema.layouts import relational_layout, timeline_layout
from clinical_table_export.schema.selector import SchemaSelection
from clinical_table_export.writers.table_writer import TableWriterSet

DAY = 24 * 60 * 60 * 1000
JAN_1_2020 = 1577836800000
JAN_11_2020 = JAN_1_2020 + 10 * DAY
AS_OF = JAN_1_2020 + 365 * DAY


def sequential_ids(prefix: str = "id"):
    counter = itertools.count(1)
    return lambda: f"{prefix}-{next(counter)}"


def make_attributes(person_id: str = "patient-1", address: str = "100 Main St") -> dict:
    return {
        constants.PERSON_ID: person_id,
        constants.BIRTHDATE: JAN_1_2020 - 40 * 365 * DAY,
        constants.IDENTIFIER_SSN: "999-12-3456",
        constants.IDENTIFIER_DRIVERS: "S99912345",
        constants.FIRST_NAME: "Ada",
        constants.LAST_NAME: "Lovelace",
        constants.MARITAL_STATUS: "M",
        constants.RACE: "white",
        constants.ETHNICITY: "nonhispanic",
        constants.GENDER: "F",
        constants.BIRTHPLACE: "Boston, Massachusetts",
        constants.ADDRESS: address,
        constants.CITY: "Springfield",
        constants.STATE: "IL",
        constants.ZIP: "62704",
    }


def make_full_encounter() -> Encounter:
    """One encounter carrying every entry kind, including nested observations."""
    panel = Observation(
        start=JAN_1_2020,
        codes=[Code("85354-9", "Blood pressure panel")],
        observations=[
            Observation(
                start=JAN_1_2020,
                codes=[Code("8480-6", "Systolic Blood Pressure")],
                value=120.0,
                unit="mm[Hg]",
            ),
            Observation(
                start=JAN_1_2020,
                codes=[Code("8462-4", "Diastolic Blood Pressure")],
                value=80.0,
                unit="mm[Hg]",
            ),
        ],
    )
    return Encounter(
        start=JAN_1_2020,
        stop=JAN_1_2020 + 60 * 60 * 1000,
        codes=[Code("185349003", "Encounter for check up")],
        cost=Decimal("129.16"),
        type="AMBULATORY",
        reason=Code("44054006", "Diabetes"),
        conditions=[Entry(start=JAN_1_2020, codes=[Code("44054006", "Diabetes")])],
        allergies=[Entry(start=JAN_1_2020, codes=[Code("300916003", "Latex allergy")])],
        observations=[
            Observation(
                start=JAN_1_2020,
                codes=[Code("2339-0", "Glucose")],
                value=95,
                unit="mg/dL",
            ),
            Observation(
                start=JAN_1_2020,
                codes=[Code("72166-2", "Tobacco smoking status")],
                value=Code("266919005", "Never smoker"),
            ),
            Observation(
                start=JAN_1_2020,
                codes=[Code("76690-7", "Sexual orientation")],
                value="Heterosexual",
            ),
            panel,
        ],
        procedures=[
            Procedure(
                start=JAN_1_2020,
                codes=[Code("430193006", "Medication reconciliation")],
                cost=Decimal("516.65"),
            )
        ],
        medications=[
            Medication(
                start=JAN_1_2020,
                stop=JAN_1_2020 + 90 * DAY,
                codes=[Code("860975", "Metformin 500 MG")],
                cost=Decimal("10.333"),
                reasons=[Code("44054006", "Diabetes")],
            )
        ],
        immunizations=[
            Entry(start=JAN_1_2020, codes=[Code("140", "Influenza, seasonal")], cost=Decimal("140.52"))
        ],
        careplans=[
            CarePlan(
                start=JAN_1_2020,
                codes=[Code("698360004", "Diabetes self management plan")],
                reasons=[Code("44054006", "Diabetes")],
            )
        ],
        imaging_studies=[
            ImagingStudy(
                start=JAN_1_2020,
                series=[
                    ImagingSeries(
                        body_site=Code("51185008", "Thoracic structure"),
                        modality=Code("CR", "Computed Radiography"),
                        instances=[
                            ImagingInstance(Code("1.2.840.10008.5.1.4.1.1.1", "CR Image Storage"))
                        ],
                    )
                ],
            )
        ],
    )


def make_person(person_id: str = "patient-1", address: str = "100 Main St", death=None, encounters=None):
    if encounters is None:
        encounters = [make_full_encounter()]
    return Person(
        attributes=make_attributes(person_id, address),
        record=HealthRecord(encounters=encounters, death=death),
    )


def parse_table(stream: io.StringIO):
    """Header columns and data rows of an in-memory table."""
    lines = stream.getvalue().splitlines()
    return lines[0].split(","), [line.split(",") for line in lines[1:]]


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def person():
    return make_person()


@pytest.fixture
def relational_selection(rng):
    return SchemaSelection(
        layout=relational_layout(),
        strategy=RelationalProjectionStrategy(rng=rng, id_factory=sequential_ids("rel")),
    )


@pytest.fixture
def relational_address_selection(rng):
    return SchemaSelection(
        layout=relational_layout(parse_address=True),
        strategy=RelationalProjectionStrategy(
            parse_address=True, rng=rng, id_factory=sequential_ids("rel")
        ),
    )


@pytest.fixture
def timeline_selection(rng):
    return SchemaSelection(
        layout=timeline_layout(),
        strategy=TimelineProjectionStrategy(rng=rng, id_factory=sequential_ids("tl")),
    )


def memory_writers(layout):
    """Writer set over StringIO streams, plus the streams keyed by table."""
    streams = {table_layout.table: io.StringIO() for table_layout in layout}
    return TableWriterSet.from_streams(layout, streams), streams
