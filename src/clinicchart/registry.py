"""In-memory clinic registry.

Clinic owns the rooms, staff, and patients of one clinic together with two
assignment maps:

- room number -> patients currently in that room (mirrors Room.patients)
- patient -> clinical staff assigned to that patient

Every room change goes through _place()/_unplace() so the map, the Room's
own list, and Patient.assigned_room always agree.

Error handling follows three categories:
- malformed input files raise FormatError (see clinicchart.sources)
- precondition violations (None arguments, unknown patient/staff/room,
  out-of-range numbers) raise ValueError
- business-rule rejections (occupied room, duplicate patient, deactivated
  staff, ...) return a falsy Result and change nothing
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from clinicchart.models import (
    ActivationStatus,
    JobTitle,
    Patient,
    Room,
    Staff,
    TemperatureUnit,
    VisitRecord,
    VisitStatus,
)
from clinicchart.sources.base import FormatError
from clinicchart.sources.clinic_file import ClinicData, parse_clinic_file

logger = logging.getLogger(__name__)

DEFAULT_CLINIC_NAME = "Default Clinic Name"
INTAKE_ROOM_NUMBER = 1


class Outcome(Enum):
    OK = "ok"
    DUPLICATE_PATIENT = "duplicate_patient"
    PATIENT_NOT_FOUND = "patient_not_found"
    ALREADY_IN_ROOM = "already_in_room"
    ROOM_OCCUPIED = "room_occupied"
    NOT_IN_ROOM = "not_in_room"
    APPROVER_NOT_PHYSICIAN = "approver_not_physician"
    STAFF_DEACTIVATED = "staff_deactivated"
    ALREADY_ASSIGNED = "already_assigned"
    ALREADY_DEACTIVATED = "already_deactivated"
    DUPLICATE_STAFF = "duplicate_staff"


@dataclass(frozen=True)
class Result:
    """Outcome of a registry operation that can be rejected by a business rule.

    Truthy only when the operation succeeded. `patient` carries the patient
    the operation resolved to, when there is one.
    """

    outcome: Outcome
    message: str = ""
    patient: Patient | None = None

    def __bool__(self) -> bool:
        return self.outcome is Outcome.OK

    @property
    def ok(self) -> bool:
        return self.outcome is Outcome.OK


def _ok(message: str, patient: Patient | None = None) -> Result:
    logger.info(message)
    return Result(Outcome.OK, message, patient)


def _reject(outcome: Outcome, message: str, patient: Patient | None = None) -> Result:
    logger.warning(message)
    return Result(outcome, message, patient)


class Clinic:
    """Registry of one clinic's rooms, staff, patients, and assignments."""

    def __init__(self, name: str = DEFAULT_CLINIC_NAME, dedupe_staff_assignments: bool = True):
        if name is None or not name.strip():
            raise ValueError("Clinic name cannot be null or empty.")
        self._name = name
        self.dedupe_staff_assignments = dedupe_staff_assignments
        self._rooms: list[Room] = []
        self._staff: list[Staff] = []
        self._patients: list[Patient] = []
        self._room_assignments: dict[int, list[Patient]] = {}
        self._staff_assignments: dict[Patient, list[Staff]] = {}
        self._deactivated: list[Staff] = []

    # ------------------------------------------------------------------
    # Construction / loading
    # ------------------------------------------------------------------

    @classmethod
    def from_data(cls, data: ClinicData, dedupe_staff_assignments: bool = True) -> Clinic:
        clinic = cls(data.name, dedupe_staff_assignments=dedupe_staff_assignments)
        clinic.load_data(data)
        return clinic

    @classmethod
    def from_file(cls, locator: str, dedupe_staff_assignments: bool = True) -> Clinic:
        """Build a clinic from a data file. Raises FormatError on bad content."""
        return cls.from_data(
            parse_clinic_file(locator), dedupe_staff_assignments=dedupe_staff_assignments
        )

    def load_data(self, data: ClinicData) -> None:
        """Replace all registry state with a parsed clinic.

        Patients in `data` are expected to be seated already (the parser
        does this); the assignment map is rebuilt from their rooms.
        """
        for patient in data.patients:
            room = patient.assigned_room
            if room is None or room not in data.rooms:
                raise FormatError(f"Patient {patient.full_name} is not seated in a loaded room.")

        self._name = data.name
        self._rooms = list(data.rooms)
        self._staff = list(data.staff)
        self._patients = list(data.patients)
        self._room_assignments = {}
        self._staff_assignments = {}
        self._deactivated = []
        for patient in self._patients:
            self._room_assignments.setdefault(patient.assigned_room.room_number, []).append(patient)
        logger.info(
            f"Loaded clinic {self._name!r}: {len(self._rooms)} rooms, "
            f"{len(self._staff)} staff, {len(self._patients)} patients"
        )

    # ------------------------------------------------------------------
    # Accessors (all return copies)
    # ------------------------------------------------------------------

    @property
    def name(self) -> str:
        return self._name

    @property
    def rooms(self) -> list[Room]:
        return list(self._rooms)

    @property
    def staff(self) -> list[Staff]:
        return list(self._staff)

    @property
    def clinical_staff(self) -> list[Staff]:
        return [s for s in self._staff if s.is_clinical]

    @property
    def non_clinical_staff(self) -> list[Staff]:
        return [s for s in self._staff if not s.is_clinical]

    @property
    def patients(self) -> list[Patient]:
        return list(self._patients)

    @property
    def deactivated_staff(self) -> list[Staff]:
        return list(self._deactivated)

    def get_room(self, room_number: int) -> Room:
        if not 1 <= room_number <= len(self._rooms):
            raise ValueError(f"Invalid room number {room_number}.")
        return self._rooms[room_number - 1]

    def get_room_info(self, room: Room) -> str:
        from clinicchart.formatters.text import format_room_info

        if room is None:
            raise ValueError("Room cannot be null.")
        if not any(r is room for r in self._rooms):
            raise ValueError("Room not found in the clinic system.")
        return format_room_info(self, room.room_number)

    def get_room_assignments(self) -> dict[int, list[Patient]]:
        return {number: list(patients) for number, patients in sorted(self._room_assignments.items())}

    def get_patient_staff_assignments(self) -> dict[Patient, list[Staff]]:
        return {patient: list(staff) for patient, staff in self._staff_assignments.items()}

    def get_assigned_clinical_staff(self, patient: Patient) -> list[Staff]:
        return [s for s in self._staff_assignments.get(patient, []) if s.is_clinical]

    def is_tracked(self, patient: Patient) -> bool:
        return any(p is patient for p in self._patients)

    # ------------------------------------------------------------------
    # Patients
    # ------------------------------------------------------------------

    def _find_exact(self, first_name: str, last_name: str, dob: str) -> Patient | None:
        for patient in self._patients:
            if (
                patient.first_name == first_name
                and patient.last_name == last_name
                and patient.date_of_birth == dob
            ):
                return patient
        return None

    def _next_patient_id(self) -> int:
        """One past the highest ID among currently tracked patients."""
        return max((p.patient_id for p in self._patients), default=-1) + 1

    def register_new_patient_visit(
        self,
        first_name: str,
        last_name: str,
        dob: str,
        registered_at: datetime,
        chief_complaint: str,
        body_temperature: float,
        temperature_unit: TemperatureUnit = TemperatureUnit.CELSIUS,
    ) -> Result:
        """Register a first-time patient with one visit and seat them in room 1.

        A patient with the same first name, last name, and DOB is a
        duplicate: nothing is created and no visit is added.

        Room 1 is the intake room. If it is an EXAM or PROCEDURE room that
        already holds a patient, registration is rejected with ROOM_OCCUPIED
        and nothing is created.
        """
        existing = self._find_exact(first_name, last_name, dob)
        if existing is not None:
            return _reject(
                Outcome.DUPLICATE_PATIENT,
                f"A patient named {existing.full_name} with DOB {dob} already exists.",
                existing,
            )
        if not self._rooms:
            raise RuntimeError("No rooms available to assign the patient.")

        record = VisitRecord(
            registered_at,
            chief_complaint,
            body_temperature,
            temperature_unit=temperature_unit,
        )
        patient = Patient(
            first_name,
            last_name,
            patient_id=self._next_patient_id(),
            date_of_birth=dob,
            visit_status=VisitStatus.IN_PROGRESS,
        )
        intake = self._rooms[INTAKE_ROOM_NUMBER - 1]
        if not intake.can_accept(patient):
            return _reject(
                Outcome.ROOM_OCCUPIED,
                f"Intake room {intake.room_number} ({intake.name}) is occupied.",
            )

        patient.add_visit_record(record)
        self._patients.append(patient)
        self._place(patient, intake)
        return _ok(
            f"Registered new patient {patient.full_name} (ID: {patient.patient_id}) "
            f"in room {intake.room_number}",
            patient,
        )

    def register_existing_patient_visit(
        self,
        first_name: str,
        last_name: str,
        dob: str,
        registered_at: datetime,
        chief_complaint: str,
        body_temperature: float,
        temperature_unit: TemperatureUnit = TemperatureUnit.CELSIUS,
    ) -> Result:
        """Append a visit to an existing patient. ID, room, and status are unchanged."""
        patient = self._find_exact(first_name, last_name, dob)
        if patient is None:
            return _reject(
                Outcome.PATIENT_NOT_FOUND,
                f"No existing patient named {first_name} {last_name} with DOB {dob}.",
            )
        patient.add_visit_record(
            VisitRecord(
                registered_at,
                chief_complaint,
                body_temperature,
                temperature_unit=temperature_unit,
            )
        )
        return _ok(f"Added a visit record for {patient.full_name}", patient)

    def search_patient(self, term: str) -> Patient | None:
        """Find a patient by ID (plain ASCII digits) or case-insensitive full name."""
        if term is None or not term.strip():
            return None
        term = term.strip()
        if term.isascii() and term.isdigit():
            patient_id = int(term)
            return next((p for p in self._patients if p.patient_id == patient_id), None)
        wanted = term.casefold()
        return next((p for p in self._patients if p.full_name.casefold() == wanted), None)

    # ------------------------------------------------------------------
    # Rooms
    # ------------------------------------------------------------------

    def _place(self, patient: Patient, room: Room) -> None:
        room._add_patient(patient)
        self._room_assignments.setdefault(room.room_number, []).append(patient)

    def _current_room_number(self, patient: Patient) -> int | None:
        for number, patients in self._room_assignments.items():
            if any(p is patient for p in patients):
                return number
        return None

    def _unplace(self, patient: Patient, room_number: int) -> None:
        patients = self._room_assignments[room_number]
        patients[:] = [p for p in patients if p is not patient]
        room = self._rooms[room_number - 1]
        room._remove_patient(patient)
        if not room.is_waiting and not patients:
            del self._room_assignments[room_number]

    def assign_room(self, room_number: int, patient_index: int) -> Result:
        """Move the patient at `patient_index` (0-based, active list) to a room."""
        if not 1 <= room_number <= len(self._rooms):
            raise ValueError(f"Invalid room number {room_number}.")
        if not 0 <= patient_index < len(self._patients):
            raise ValueError(f"Invalid patient index {patient_index}.")
        return self.assign_patient_to_room(self._patients[patient_index], room_number)

    def assign_patient_to_room(self, patient: Patient, room_number: int) -> Result:
        if patient is None:
            raise ValueError("Patient cannot be null.")
        if not self.is_tracked(patient):
            raise ValueError("Patient not found in the clinic.")
        room = self.get_room(room_number)

        if self._current_room_number(patient) == room_number:
            return _reject(
                Outcome.ALREADY_IN_ROOM,
                f"{patient.full_name} is already assigned to room {room_number}.",
                patient,
            )
        if not room.can_accept(patient):
            occupant = room.patients[0]
            return _reject(
                Outcome.ROOM_OCCUPIED,
                f"Room {room_number} is already occupied by {occupant.full_name} "
                f"(Patient ID: {occupant.patient_id}).",
                patient,
            )

        current = self._current_room_number(patient)
        if current is not None:
            self._unplace(patient, current)
        self._place(patient, room)
        return _ok(
            f"Patient {patient.full_name} (ID: {patient.patient_id}) assigned to "
            f"room {room_number} ({room.name})",
            patient,
        )

    def remove_patient_from_room(self, patient: Patient) -> Result:
        if patient is None:
            raise ValueError("Patient cannot be null.")
        current = self._current_room_number(patient)
        if current is None:
            return _reject(
                Outcome.NOT_IN_ROOM, f"{patient.full_name} is not assigned to any room.", patient
            )
        self._unplace(patient, current)
        return _ok(
            f"Patient {patient.full_name} (ID: {patient.patient_id}) removed from room {current}",
            patient,
        )

    def send_patient_home(self, patient: Patient, approver: Staff) -> Result:
        """Discharge a patient. Only a physician may approve.

        The patient leaves their room, is marked DISCHARGED, loses their
        staff assignments, and is dropped from the active patient list.
        """
        if patient is None or approver is None:
            raise ValueError("Patient or approver cannot be null.")
        if not self.is_tracked(patient):
            raise ValueError("Patient not found in the clinic.")
        if approver.job_title is not JobTitle.PHYSICIAN:
            return _reject(
                Outcome.APPROVER_NOT_PHYSICIAN,
                f"Only physicians can approve discharge; {approver.full_name} is "
                f"{approver.job_title.title}.",
                patient,
            )

        current = self._current_room_number(patient)
        if current is not None:
            self._unplace(patient, current)
        patient.visit_status = VisitStatus.DISCHARGED
        self._patients = [p for p in self._patients if p is not patient]
        self._staff_assignments.pop(patient, None)
        return _ok(
            f"{patient.full_name} was sent home (approved by {approver.title_prefix} "
            f"{approver.full_name})",
            patient,
        )

    # ------------------------------------------------------------------
    # Staff
    # ------------------------------------------------------------------

    def register_staff(self, staff: Staff) -> Result:
        if staff is None:
            raise ValueError("Staff member cannot be null.")
        if staff in self._staff:
            return _reject(
                Outcome.DUPLICATE_STAFF, f"Staff member {staff.full_name} is already registered."
            )
        self._staff.append(staff)
        return _ok(f"Registered staff member {staff.full_name} - {staff.job_title.title}")

    def register_clinical_staff(self, staff: Staff) -> Result:
        if staff is not None and not staff.is_clinical:
            raise ValueError("Only physicians and nurses can be registered as clinical staff.")
        return self.register_staff(staff)

    def search_staff(self, term: str) -> list[Staff]:
        """All staff whose full name or identifier (NPI/CPR level) matches, case-insensitively."""
        if term is None or not term.strip():
            return []
        wanted = term.strip().casefold()
        return [
            s
            for s in self._staff
            if s.full_name.casefold() == wanted or s.identifier_value.casefold() == wanted
        ]

    def _require_registered(self, staff: Staff) -> None:
        if staff is None:
            raise ValueError("Staff member cannot be null.")
        if staff not in self._staff:
            raise ValueError("Staff member not found in the clinic system.")

    def deactivate_staff(self, staff: Staff) -> Result:
        """Mark a staff member as deactivated. They stay on the roster."""
        self._require_registered(staff)
        if staff in self._deactivated:
            return _reject(
                Outcome.ALREADY_DEACTIVATED, f"{staff.full_name} is already deactivated."
            )
        self._deactivated.append(staff)
        staff.activation_status = ActivationStatus.DEACTIVATED
        return _ok(f"Staff member {staff.full_name} - {staff.job_title.title} deactivated")

    def _check_assignable(self, staff: Staff) -> None:
        self._require_registered(staff)
        if not staff.is_clinical:
            raise ValueError(f"{staff.full_name} is not clinical staff.")

    def assign_clinical_staff_to_patient(self, patient: Patient, staff: Staff) -> Result:
        if patient is None:
            raise ValueError("Patient cannot be null.")
        if not self.is_tracked(patient):
            raise ValueError("Patient not found in the clinic.")
        self._check_assignable(staff)
        return self._assign_staff(patient, staff)

    def assign_multiple_clinical_staff_to_patient(
        self, patient: Patient, staff_members: list[Staff]
    ) -> list[Result]:
        """Assign several staff members; returns one Result per member, in order.

        All preconditions are checked before anything is assigned.
        """
        if patient is None:
            raise ValueError("Patient cannot be null.")
        if staff_members is None:
            raise ValueError("Staff list cannot be null.")
        if not self.is_tracked(patient):
            raise ValueError("Patient not found in the clinic.")
        for staff in staff_members:
            self._check_assignable(staff)
        return [self._assign_staff(patient, staff) for staff in staff_members]

    def _assign_staff(self, patient: Patient, staff: Staff) -> Result:
        if staff in self._deactivated:
            return _reject(
                Outcome.STAFF_DEACTIVATED,
                f"Cannot assign deactivated staff member: {staff.full_name}",
                patient,
            )
        assigned = self._staff_assignments.setdefault(patient, [])
        if self.dedupe_staff_assignments and staff in assigned:
            return _reject(
                Outcome.ALREADY_ASSIGNED,
                f"{staff.full_name} is already assigned to {patient.full_name}.",
                patient,
            )
        assigned.append(staff)
        return _ok(
            f"Assigned {staff.title_prefix} {staff.full_name} to {patient.full_name}", patient
        )
