"""
Projection Strategies - One Row Layout per Output Variant

This module implements the Strategy Pattern for row projection. Each
strategy holds one variant's complete column contract for every entity kind,
so the record walker never branches on the variant.

Strategy Hierarchy:
    ProjectionStrategy (Abstract)
    ├── RelationalProjectionStrategy → Variant A (relational tables)
    └── TimelineProjectionStrategy   → Variant B (per-patient timeline)

Projection is pure with respect to output: every method returns Row objects
and never writes. The only state a strategy holds is its random source and
ID factory.

Pipeline Position:
    Config → Schema Selector → Record Walker → [Projection] → Table Writers
                                               ^^^^^^^^^^^^
                                               You are here

Author: Shubham Singh
Date: December 2025
"""

import random
import uuid
from abc import ABC, abstractmethod
from typing import Callable, Dict, Iterable, List, Optional, Tuple, Type

from clinical_table_export.core import constants
from clinical_table_export.core.constants import SOCIAL_DETERMINANT_CODES, VITAL_SIGN_CODES
from clinical_table_export.core.enums import OutputVariant, TableName
from clinical_table_export.core.models import (
    CarePlan,
    Code,
    Encounter,
    Entry,
    ImagingStudy,
    Medication,
    Observation,
    Person,
    Procedure,
    Row,
)
from clinical_table_export.formatting.address import split_address
from clinical_table_export.formatting.sanitizer import clean
from clinical_table_export.formatting.timestamps import (
    date_from_timestamp,
    iso8601_timestamp,
    optional_date,
    optional_iso8601,
    random_time_of_day,
    short_date_from_timestamp,
)
from clinical_table_export.formatting.values import money, observation_type, observation_value
from clinical_table_export.projection.derived_fields import (
    dispense_count,
    duration_fields,
    total_cost,
)
from clinical_table_export.projection.observations import iter_valued_observations


def _new_id() -> str:
    return str(uuid.uuid4())


def _code_fields(code: Code) -> List[str]:
    return [clean(code.code), clean(code.display)]


def _reason_fields(reason: Optional[Code]) -> List[str]:
    """Reason code and description, two empty fields when absent."""
    if reason is None:
        return ["", ""]
    return _code_fields(reason)


# =============================================================================
# STAGE 1: ABSTRACT BASE STRATEGY
# =============================================================================


class ProjectionStrategy(ABC):
    """
    Abstract base class for row projection strategies.

    What it does:
        Defines one projection method per entity kind. The walker calls
        them in a fixed order and hands the returned rows to the writers.

    Template Method Pattern:
        Observation routing (panels → children, allow-list filtering) is
        shared here; subclasses implement ``_observation_row`` and decide
        which observations reach each table.

    Args:
        rng: Random source for timeline timestamps (process-seeded by default)
        id_factory: Callable minting encounter / care plan / study IDs
        max_observation_depth: Deepest observation nesting followed
    """

    variant: OutputVariant
    splits_observation_subsets: bool = False

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        id_factory: Callable[[], str] = _new_id,
        max_observation_depth: int = constants.DEFAULT_MAX_OBSERVATION_DEPTH,
    ):
        self._rng = rng or random.Random()
        self._new_id = id_factory
        self._max_observation_depth = max_observation_depth

    # -------------------------------------------------------------------------
    # 1.1 Entity projections
    # -------------------------------------------------------------------------

    @abstractmethod
    def patient(self, person: Person, as_of: int) -> Row:
        """Project the patient row."""
        ...

    @abstractmethod
    def encounter(self, person_id: str, encounter: Encounter) -> Tuple[str, Row]:
        """Project an encounter. Returns the minted encounter ID and the row."""
        ...

    @abstractmethod
    def condition(self, person_id: str, encounter_id: str, condition: Entry) -> Row:
        ...

    def allergy(self, person_id: str, encounter_id: str, allergy: Entry) -> Row:
        """Both variants share the relational allergy layout."""
        return Row(
            TableName.ALLERGIES,
            (
                date_from_timestamp(allergy.start),
                optional_date(allergy.stop),
                person_id,
                encounter_id,
                *_code_fields(allergy.primary_code),
            ),
        )

    @abstractmethod
    def procedure(self, person_id: str, encounter_id: str, procedure: Procedure) -> Row:
        ...

    @abstractmethod
    def medication(
        self, person_id: str, encounter_id: str, medication: Medication, as_of: int
    ) -> Row:
        ...

    @abstractmethod
    def immunization(self, person_id: str, encounter_id: str, immunization: Entry) -> Row:
        ...

    @abstractmethod
    def careplan(self, person_id: str, encounter_id: str, careplan: CarePlan) -> Tuple[str, Row]:
        """Project a care plan. Returns the minted care plan ID and the row."""
        ...

    def imaging_study(
        self, person_id: str, encounter_id: str, study: ImagingStudy
    ) -> Tuple[str, Row]:
        """
        Project an imaging study from its first series and first instance.
        Both variants share this layout.

        Raises:
            IndexError: If the study has no series or the series no instance
        """
        study_id = self._new_id()
        series = study.series[0]
        instance = series.instances[0]
        row = Row(
            TableName.IMAGING_STUDIES,
            (
                study_id,
                date_from_timestamp(study.start),
                person_id,
                encounter_id,
                *_code_fields(series.body_site),
                *_code_fields(series.modality),
                *_code_fields(instance.sop_class),
            ),
        )
        return study_id, row

    # -------------------------------------------------------------------------
    # 1.2 Observation routing
    # -------------------------------------------------------------------------

    def observations(
        self, person_id: str, encounter_id: str, observation: Observation
    ) -> List[Row]:
        """Rows for the general observation table (zero or more)."""
        return self._route(
            person_id, encounter_id, observation, TableName.OBSERVATIONS, self._is_general
        )

    def vitals(self, person_id: str, encounter_id: str, observation: Observation) -> List[Row]:
        """Rows for the vitals subset. Empty unless the variant splits subsets."""
        return []

    def social_determinants(
        self, person_id: str, encounter_id: str, observation: Observation
    ) -> List[Row]:
        """Rows for the social-determinant subset. Empty unless the variant splits subsets."""
        return []

    def _route(
        self,
        person_id: str,
        encounter_id: str,
        observation: Observation,
        table: TableName,
        accepts: Callable[[Observation], bool],
    ) -> List[Row]:
        return [
            self._observation_row(table, person_id, encounter_id, valued)
            for valued in iter_valued_observations(observation, self._max_observation_depth)
            if accepts(valued)
        ]

    def _is_general(self, observation: Observation) -> bool:
        return True

    @abstractmethod
    def _observation_row(
        self, table: TableName, person_id: str, encounter_id: str, observation: Observation
    ) -> Row:
        ...

    # -------------------------------------------------------------------------
    # 1.3 Shared patient columns
    # -------------------------------------------------------------------------

    def _person_fields(self, person: Person, as_of: int) -> Tuple[str, List[str]]:
        """Person ID plus the ID..BIRTHPLACE columns shared by both layouts."""
        attributes = person.attributes
        person_id = str(attributes[constants.PERSON_ID])

        death_date = ""
        if not person.alive(as_of):
            death_date = date_from_timestamp(person.record.death)

        fields = [
            person_id,
            date_from_timestamp(int(attributes[constants.BIRTHDATE])),
            death_date,
        ]
        fields.extend(
            clean(attributes.get(attribute, "")) for attribute in constants.DEMOGRAPHIC_ATTRIBUTES
        )
        return person_id, fields

    @staticmethod
    def _decomposed_address(person: Person) -> List[str]:
        attributes = person.attributes
        return split_address(
            attributes[constants.ADDRESS],
            attributes[constants.CITY],
            attributes[constants.STATE],
            attributes[constants.ZIP],
        )


# =============================================================================
# STAGE 2: RELATIONAL STRATEGY (VARIANT A)
# =============================================================================


class RelationalProjectionStrategy(ProjectionStrategy):
    """
    Default relational layout.

    Rows carry foreign keys (PATIENT, ENCOUNTER), ISO dates, and cost
    columns. Medications carry unit cost, dispense count and total cost.
    Every valued observation goes to the one observation table.

    Args:
        parse_address: Split the street line into STREETADDRESS1/2 + COUNTRY
    """

    variant = OutputVariant.RELATIONAL

    def __init__(self, parse_address: bool = False, **kwargs):
        super().__init__(**kwargs)
        self._parse_address = parse_address

    def patient(self, person: Person, as_of: int) -> Row:
        _, fields = self._person_fields(person, as_of)

        if self._parse_address:
            fields.extend(self._decomposed_address(person))
        else:
            attributes = person.attributes
            fields.extend(
                clean(attributes[key])
                for key in (constants.ADDRESS, constants.CITY, constants.STATE, constants.ZIP)
            )

        return Row(TableName.PATIENTS, tuple(fields))

    def encounter(self, person_id: str, encounter: Encounter) -> Tuple[str, Row]:
        encounter_id = self._new_id()
        row = Row(
            TableName.ENCOUNTERS,
            (
                encounter_id,
                iso8601_timestamp(encounter.start),
                optional_iso8601(encounter.stop),
                person_id,
                clean(encounter.type.lower()) if encounter.type else "",
                *_code_fields(encounter.primary_code),
                money(encounter.cost),
                *_reason_fields(encounter.reason),
            ),
        )
        return encounter_id, row

    def condition(self, person_id: str, encounter_id: str, condition: Entry) -> Row:
        return Row(
            TableName.CONDITIONS,
            (
                date_from_timestamp(condition.start),
                optional_date(condition.stop),
                person_id,
                encounter_id,
                *_code_fields(condition.primary_code),
            ),
        )

    def procedure(self, person_id: str, encounter_id: str, procedure: Procedure) -> Row:
        return Row(
            TableName.PROCEDURES,
            (
                date_from_timestamp(procedure.start),
                person_id,
                encounter_id,
                *_code_fields(procedure.primary_code),
                money(procedure.cost),
                *_reason_fields(procedure.primary_reason),
            ),
        )

    def medication(
        self, person_id: str, encounter_id: str, medication: Medication, as_of: int
    ) -> Row:
        dispenses = dispense_count(medication, as_of)
        return Row(
            TableName.MEDICATIONS,
            (
                date_from_timestamp(medication.start),
                optional_date(medication.stop),
                person_id,
                encounter_id,
                *_code_fields(medication.primary_code),
                money(medication.cost),
                str(dispenses),
                money(total_cost(medication.cost, dispenses)),
                *_reason_fields(medication.primary_reason),
            ),
        )

    def immunization(self, person_id: str, encounter_id: str, immunization: Entry) -> Row:
        return Row(
            TableName.IMMUNIZATIONS,
            (
                date_from_timestamp(immunization.start),
                person_id,
                encounter_id,
                *_code_fields(immunization.primary_code),
                money(immunization.cost),
            ),
        )

    def careplan(self, person_id: str, encounter_id: str, careplan: CarePlan) -> Tuple[str, Row]:
        careplan_id = self._new_id()
        row = Row(
            TableName.CAREPLANS,
            (
                careplan_id,
                date_from_timestamp(careplan.start),
                optional_date(careplan.stop),
                person_id,
                encounter_id,
                *_code_fields(careplan.primary_code),
                *_reason_fields(careplan.primary_reason),
            ),
        )
        return careplan_id, row

    def _observation_row(
        self, table: TableName, person_id: str, encounter_id: str, observation: Observation
    ) -> Row:
        return Row(
            table,
            (
                date_from_timestamp(observation.start),
                person_id,
                encounter_id,
                *_code_fields(observation.primary_code),
                observation_value(observation),
                clean(observation.unit),
                observation_type(observation),
            ),
        )


# =============================================================================
# STAGE 3: TIMELINE STRATEGY (VARIANT B)
# =============================================================================


class TimelineProjectionStrategy(ProjectionStrategy):
    """
    Denormalized per-patient timeline layout.

    Every row starts with the patient MRN and a Timestamp made of the
    record's date plus a random time of day. Conditions, medications and
    care plans carry StartDate / EndDate / Duration. Vitals and
    social-determinant observations go to their own tables and are
    excluded from the lab-observation table. Addresses are always
    decomposed and no cost columns are written.
    """

    variant = OutputVariant.TIMELINE
    splits_observation_subsets = True

    def _timestamp(self, timestamp: int) -> str:
        return random_time_of_day(date_from_timestamp(timestamp), self._rng)

    def patient(self, person: Person, as_of: int) -> Row:
        _, fields = self._person_fields(person, as_of)
        fields.extend(self._decomposed_address(person))
        return Row(TableName.PATIENTS, tuple(fields))

    def encounter(self, person_id: str, encounter: Encounter) -> Tuple[str, Row]:
        encounter_id = self._new_id()
        row = Row(
            TableName.ENCOUNTERS,
            (
                person_id,
                self._timestamp(encounter.start),
                encounter_id,
                short_date_from_timestamp(encounter.start),
                *_code_fields(encounter.primary_code),
                *_reason_fields(encounter.reason),
            ),
        )
        return encounter_id, row

    def condition(self, person_id: str, encounter_id: str, condition: Entry) -> Row:
        end_date, duration = duration_fields(condition.start, condition.stop)
        return Row(
            TableName.CONDITIONS,
            (
                person_id,
                self._timestamp(condition.start),
                encounter_id,
                short_date_from_timestamp(condition.start),
                end_date,
                duration,
                *_code_fields(condition.primary_code),
            ),
        )

    def procedure(self, person_id: str, encounter_id: str, procedure: Procedure) -> Row:
        return Row(
            TableName.PROCEDURES,
            (
                person_id,
                self._timestamp(procedure.start),
                short_date_from_timestamp(procedure.start),
                *_code_fields(procedure.primary_code),
                *_reason_fields(procedure.primary_reason),
                encounter_id,
            ),
        )

    def medication(
        self, person_id: str, encounter_id: str, medication: Medication, as_of: int
    ) -> Row:
        end_date, duration = duration_fields(medication.start, medication.stop)
        return Row(
            TableName.MEDICATIONS,
            (
                person_id,
                self._timestamp(medication.start),
                encounter_id,
                short_date_from_timestamp(medication.start),
                end_date,
                duration,
                *_code_fields(medication.primary_code),
                *_reason_fields(medication.primary_reason),
            ),
        )

    def immunization(self, person_id: str, encounter_id: str, immunization: Entry) -> Row:
        return Row(
            TableName.IMMUNIZATIONS,
            (
                person_id,
                self._timestamp(immunization.start),
                short_date_from_timestamp(immunization.start),
                *_code_fields(immunization.primary_code),
                encounter_id,
            ),
        )

    def careplan(self, person_id: str, encounter_id: str, careplan: CarePlan) -> Tuple[str, Row]:
        careplan_id = self._new_id()
        end_date, duration = duration_fields(careplan.start, careplan.stop)
        row = Row(
            TableName.CAREPLANS,
            (
                person_id,
                self._timestamp(careplan.start),
                careplan_id,
                encounter_id,
                short_date_from_timestamp(careplan.start),
                end_date,
                duration,
                *_code_fields(careplan.primary_code),
                *_reason_fields(careplan.primary_reason),
            ),
        )
        return careplan_id, row

    # -------------------------------------------------------------------------
    # 3.1 Observation subsets
    # -------------------------------------------------------------------------

    def vitals(self, person_id: str, encounter_id: str, observation: Observation) -> List[Row]:
        return self._route(
            person_id, encounter_id, observation, TableName.VITALS, _in_codes(VITAL_SIGN_CODES)
        )

    def social_determinants(
        self, person_id: str, encounter_id: str, observation: Observation
    ) -> List[Row]:
        return self._route(
            person_id,
            encounter_id,
            observation,
            TableName.SOCIAL_DETERMINANTS,
            _in_codes(SOCIAL_DETERMINANT_CODES),
        )

    def _is_general(self, observation: Observation) -> bool:
        code = observation.primary_code.code
        return code not in VITAL_SIGN_CODES and code not in SOCIAL_DETERMINANT_CODES

    def _observation_row(
        self, table: TableName, person_id: str, encounter_id: str, observation: Observation
    ) -> Row:
        return Row(
            table,
            (
                person_id,
                self._timestamp(observation.start),
                short_date_from_timestamp(observation.start),
                *_code_fields(observation.primary_code),
                observation_value(observation),
                clean(observation.unit),
                encounter_id,
            ),
        )


def _in_codes(codes: Iterable[str]) -> Callable[[Observation], bool]:
    allowed = frozenset(codes)
    return lambda observation: observation.primary_code.code in allowed


# =============================================================================
# STAGE 4: STRATEGY REGISTRY
# =============================================================================

PROJECTION_REGISTRY: Dict[OutputVariant, Type[ProjectionStrategy]] = {
    OutputVariant.RELATIONAL: RelationalProjectionStrategy,
    OutputVariant.TIMELINE: TimelineProjectionStrategy,
}


def get_projection_strategy(
    variant: OutputVariant, parse_address: bool = False, **kwargs
) -> ProjectionStrategy:
    """
    Factory function to get a projection strategy by variant.

    Args:
        variant: Output variant
        parse_address: Address decomposition flag (ignored by the timeline
            strategy, which always decomposes)
        **kwargs: rng, id_factory, max_observation_depth

    Raises:
        ValueError: If the variant has no registered strategy
    """
    strategy_class = PROJECTION_REGISTRY.get(variant)
    if strategy_class is None:
        raise ValueError(f"Unknown output variant: {variant}")

    if strategy_class is RelationalProjectionStrategy:
        return strategy_class(parse_address=parse_address, **kwargs)
    return strategy_class(**kwargs)
