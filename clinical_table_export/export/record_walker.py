"""
Record Walker - Traverse One Patient's Record Graph

The walker visits a person's record in a fixed order, asks the selected
projection strategy for rows, and hands each row to the writer set as soon
as it is produced. All tables are flushed once after the patient is done.

Traversal Order (per patient):
    1. Patient row
    2. For each encounter, in stored order:
        2.1 Encounter row (mints the encounter ID)
        2.2 Conditions
        2.3 Allergies
        2.4 Observations (general table)
        2.5 Procedures
        2.6 Medications
        2.7 Immunizations
        2.8 Care plans
        2.9 Vitals and social determinants (timeline layout only)
        2.10 Imaging studies
    3. Flush every table

Pipeline Position:
    Config → Schema Selector → [Record Walker] → Projection → Table Writers
                               ^^^^^^^^^^^^^^^
                               You are here

Author: Shubham Singh
Date: December 2025
"""

from loguru import logger

from clinical_table_export.core.models import Encounter, Person
from clinical_table_export.schema.selector import SchemaSelection
from clinical_table_export.writers.table_writer import TableWriterSet


class RecordWalker:
    """
    Exports one patient at a time through a shared writer set.

    What it does:
        Drives the projection strategy over the record graph and writes
        the resulting rows. Holds no per-patient state, so one walker can
        export many patients from many threads.

    Error Handling:
        OSError from the writers, IndexError / KeyError from malformed
        records and RecordStructureError all propagate to the caller.
        Rows written before the failure stay written.

    Example:
        >>> walker = RecordWalker(selection, writers)
        >>> person_id = walker.export(person, as_of=1700000000000)
    """

    def __init__(self, selection: SchemaSelection, writers: TableWriterSet):
        self._selection = selection
        self._strategy = selection.strategy
        self._writers = writers

    def export(self, person: Person, as_of: int) -> str:
        """
        Write every row of one patient.

        Args:
            person: Patient to export
            as_of: Export time (epoch ms), used for death date and dispenses

        Returns:
            The patient ID
        """
        patient_row = self._strategy.patient(person, as_of)
        person_id = patient_row.fields[0]
        self._writers.write(patient_row)

        for encounter in person.record.encounters:
            self._export_encounter(person_id, encounter, as_of)

        self._writers.flush()

        logger.debug(
            f"Exported patient {person_id} | "
            f"Encounters: {len(person.record.encounters)} | "
            f"Variant: {self._selection.variant.value}"
        )
        return person_id

    def _export_encounter(self, person_id: str, encounter: Encounter, as_of: int) -> None:
        strategy = self._strategy
        write = self._writers.write
        write_all = self._writers.write_all

        encounter_id, encounter_row = strategy.encounter(person_id, encounter)
        write(encounter_row)

        for condition in encounter.conditions:
            write(strategy.condition(person_id, encounter_id, condition))

        for allergy in encounter.allergies:
            write(strategy.allergy(person_id, encounter_id, allergy))

        for observation in encounter.observations:
            write_all(strategy.observations(person_id, encounter_id, observation))

        for procedure in encounter.procedures:
            write(strategy.procedure(person_id, encounter_id, procedure))

        for medication in encounter.medications:
            write(strategy.medication(person_id, encounter_id, medication, as_of))

        for immunization in encounter.immunizations:
            write(strategy.immunization(person_id, encounter_id, immunization))

        for careplan in encounter.careplans:
            _, careplan_row = strategy.careplan(person_id, encounter_id, careplan)
            write(careplan_row)

        if strategy.splits_observation_subsets:
            for observation in encounter.observations:
                write_all(strategy.vitals(person_id, encounter_id, observation))
            for observation in encounter.observations:
                write_all(strategy.social_determinants(person_id, encounter_id, observation))

        for study in encounter.imaging_studies:
            _, study_row = strategy.imaging_study(person_id, encounter_id, study)
            write(study_row)
