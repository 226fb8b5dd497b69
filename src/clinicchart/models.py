"""Domain model for a clinic: people, rooms, and visit records.

Entities validate their own invariants at construction time. Cross-entity
links (a patient's room, a room's occupants) are only changed by the
registry in clinicchart.registry, which keeps both sides in sync.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

NPI_PATTERN = re.compile(r"\d{10}")
NO_CHIEF_COMPLAINT = "No Chief Complaint available."
MIN_ROOM_NUMBER = 1
MAX_ROOM_NUMBER = 100


class JobTitle(Enum):
    """Staff job titles with their lower-case title and display prefix."""

    PHYSICIAN = ("physician", "Dr.")
    NURSE = ("nurse", "Nurse")
    RECEPTION = ("reception", "Reception")

    def __init__(self, title: str, prefix: str):
        self.title = title
        self.prefix = prefix

    @property
    def is_clinical(self) -> bool:
        return self is not JobTitle.RECEPTION


class EducationLevel(Enum):
    DOCTORAL = "doctoral"
    MASTERS = "masters"
    ALLIED = "allied"


class CprLevel(Enum):
    """CPR certification tier carried by non-clinical staff."""

    A = "A"
    B = "B"
    C = "C"
    BLS = "BLS"


class IdentifierKind(Enum):
    NPI = "NPI"  # National Provider Identifier, clinical staff
    CPR = "CPR"  # CPR level, non-clinical staff


class ActivationStatus(Enum):
    ACTIVE = "active"
    DEACTIVATED = "deactivated"


class VisitStatus(Enum):
    """Lifecycle of a patient's visit. DISCHARGED is terminal."""

    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    AWAITING_RESULTS = "awaiting_results"
    DISCHARGED = "discharged"


class TemperatureUnit(Enum):
    CELSIUS = "C"
    FAHRENHEIT = "F"


class ApprovalStatus(Enum):
    PENDING = "pending"
    APPROVED = "approved"
    DENIED = "denied"


class RoomType(Enum):
    WAITING = "waiting"
    EXAM = "exam"
    PROCEDURE = "procedure"


def fahrenheit_to_celsius(temperature: float) -> float:
    return (temperature - 32) * 5 / 9


def _require_text(value: str | None, message: str) -> None:
    if value is None or not str(value).strip():
        raise ValueError(message)


@dataclass(eq=False)
class Person:
    """Base identity shared by staff and patients."""

    first_name: str
    last_name: str

    def __post_init__(self):
        if (
            self.first_name is None
            or not self.first_name.strip()
            or self.last_name is None
            or not self.last_name.strip()
        ):
            raise ValueError("First name and last name cannot be null or empty.")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def _identity(self) -> tuple:
        return (self.first_name, self.last_name)

    def __eq__(self, other: object) -> bool:
        if other is self:
            return True
        if type(other) is not type(self):
            return NotImplemented
        return self._identity() == other._identity()

    def __hash__(self) -> int:
        return hash((type(self).__name__, *self._identity()))


@dataclass(eq=False)
class Staff(Person):
    """A staff member, tagged by identifier kind.

    Clinical staff (physicians, nurses) carry a 10-digit NPI; non-clinical
    staff (reception) carry a CPR level. Use Staff.clinical() or
    Staff.non_clinical() rather than the raw constructor.
    """

    job_title: JobTitle = JobTitle.RECEPTION
    education_level: EducationLevel = EducationLevel.ALLIED
    identifier_kind: IdentifierKind = IdentifierKind.CPR
    identifier_value: str = ""
    activation_status: ActivationStatus = ActivationStatus.ACTIVE

    def __post_init__(self):
        super().__post_init__()
        if not isinstance(self.job_title, JobTitle):
            raise ValueError(f"Invalid job title: {self.job_title!r}")
        if not isinstance(self.education_level, EducationLevel):
            raise ValueError(f"Invalid education level: {self.education_level!r}")

        if self.job_title.is_clinical:
            if self.identifier_kind is not IdentifierKind.NPI:
                raise ValueError(f"{self.job_title.title} staff must be identified by NPI.")
            if not isinstance(self.identifier_value, str) or not NPI_PATTERN.fullmatch(
                self.identifier_value
            ):
                raise ValueError("NPI must be a 10-digit number.")
        else:
            if self.identifier_kind is not IdentifierKind.CPR:
                raise ValueError("Reception staff must be identified by CPR level.")
            if isinstance(self.identifier_value, CprLevel):
                self.identifier_value = self.identifier_value.value
            if self.identifier_value not in {level.value for level in CprLevel}:
                raise ValueError(f"Invalid CPR level: {self.identifier_value!r}")

    @classmethod
    def clinical(
        cls,
        first_name: str,
        last_name: str,
        job_title: JobTitle,
        education_level: EducationLevel,
        npi: str,
    ) -> Staff:
        if job_title is JobTitle.RECEPTION:
            raise ValueError("Clinical staff must be a physician or a nurse.")
        return cls(
            first_name,
            last_name,
            job_title=job_title,
            education_level=education_level,
            identifier_kind=IdentifierKind.NPI,
            identifier_value=npi,
        )

    @classmethod
    def non_clinical(
        cls,
        first_name: str,
        last_name: str,
        education_level: EducationLevel,
        cpr_level: CprLevel,
    ) -> Staff:
        return cls(
            first_name,
            last_name,
            job_title=JobTitle.RECEPTION,
            education_level=education_level,
            identifier_kind=IdentifierKind.CPR,
            identifier_value=cpr_level.value if isinstance(cpr_level, CprLevel) else cpr_level,
        )

    @property
    def is_clinical(self) -> bool:
        return self.identifier_kind is IdentifierKind.NPI

    @property
    def npi(self) -> str | None:
        return self.identifier_value if self.is_clinical else None

    @property
    def cpr_level(self) -> CprLevel | None:
        return None if self.is_clinical else CprLevel(self.identifier_value)

    @property
    def title_prefix(self) -> str:
        return self.job_title.prefix

    @property
    def role(self) -> str:
        return "Clinical Staff" if self.is_clinical else "Non-Clinical Staff"

    @property
    def is_active(self) -> bool:
        return self.activation_status is ActivationStatus.ACTIVE

    @property
    def description(self) -> str:
        name = f"{self.title_prefix} {self.full_name}" if self.is_clinical else self.full_name
        return (
            f"{name} - job title: {self.job_title.title} - "
            f"education level: {self.education_level.value} - "
            f"Identifier: {self.identifier_kind.value} ({self.identifier_value})"
        )

    def _identity(self) -> tuple:
        return (
            self.first_name,
            self.last_name,
            self.job_title,
            self.identifier_kind,
            self.identifier_value,
        )


@dataclass
class VisitRecord:
    """One registered visit. Temperatures are always stored in Celsius."""

    registered_at: datetime
    chief_complaint: str = ""
    body_temperature: float = 0.0
    temperature_unit: TemperatureUnit = TemperatureUnit.CELSIUS
    visit_status: VisitStatus = VisitStatus.IN_PROGRESS
    approval_status: ApprovalStatus = ApprovalStatus.PENDING

    def __post_init__(self):
        if self.registered_at is None:
            raise ValueError("Registration date and time cannot be null.")
        if not self.chief_complaint or not self.chief_complaint.strip():
            self.chief_complaint = NO_CHIEF_COMPLAINT
        if self.temperature_unit is TemperatureUnit.FAHRENHEIT:
            self.body_temperature = fahrenheit_to_celsius(self.body_temperature)
        self.body_temperature = float(self.body_temperature)
        self.temperature_unit = TemperatureUnit.CELSIUS

    @property
    def formatted_registered_at(self) -> str:
        return self.registered_at.strftime("%Y-%m-%d %H:%M:%S")

    @property
    def formatted_temperature(self) -> str:
        return f"{self.body_temperature:.1f} °C"

    def __str__(self) -> str:
        return (
            f"Registration: {self.formatted_registered_at}, "
            f"Chief Complaint: {self.chief_complaint}, "
            f"Temperature: {self.formatted_temperature}"
        )


@dataclass(eq=False)
class Patient(Person):
    """A patient with a visit history and an optional current room."""

    patient_id: int = 0
    date_of_birth: str = ""
    visit_status: VisitStatus = VisitStatus.IN_PROGRESS
    _visit_records: list[VisitRecord] = field(default_factory=list, init=False, repr=False)
    _assigned_room: Room | None = field(default=None, init=False, repr=False)

    def __post_init__(self):
        super().__post_init__()
        _require_text(self.date_of_birth, "Date of birth cannot be null or empty.")
        if self.patient_id < 0:
            raise ValueError("Patient ID cannot be negative.")
        if self.visit_status is None:
            self.visit_status = VisitStatus.IN_PROGRESS

    @property
    def visit_records(self) -> list[VisitRecord]:
        return list(self._visit_records)

    def add_visit_record(self, record: VisitRecord) -> None:
        if record is None:
            raise ValueError("Visit record cannot be null.")
        self._visit_records.append(record)

    @property
    def assigned_room(self) -> Room | None:
        return self._assigned_room

    @property
    def latest_chief_complaint(self) -> str:
        if not self._visit_records:
            return "No Chief Complaint (CC) available."
        return self._visit_records[-1].chief_complaint

    @property
    def description(self) -> str:
        lines = [
            f"{self.full_name} (Patient ID: {self.patient_id}, "
            f"DOB: {self.date_of_birth}, Status: {self.visit_status.name})"
        ]
        if not self._visit_records:
            lines.append("Visit Records: No visit records available.")
        else:
            lines.append("Visit Records:")
            lines.extend(f"  {record}" for record in self._visit_records)
        return "\n".join(lines)

    def _identity(self) -> tuple:
        return (self.first_name, self.last_name, self.date_of_birth, self.patient_id)


@dataclass(eq=False)
class Room:
    """A physical room. WAITING rooms hold any number of patients,
    EXAM and PROCEDURE rooms hold at most one."""

    name: str
    room_type: RoomType
    x1: int
    y1: int
    x2: int
    y2: int
    _room_number: int = field(default=0, init=False, repr=False)
    _patients: list[Patient] = field(default_factory=list, init=False, repr=False)

    def __post_init__(self):
        _require_text(self.name, "Room name cannot be null or empty.")
        if not isinstance(self.room_type, RoomType):
            raise ValueError(f"Invalid room type: {self.room_type!r}")
        if min(self.x1, self.y1, self.x2, self.y2) < 0:
            raise ValueError("Coordinates cannot be negative.")

    @property
    def room_number(self) -> int:
        return self._room_number

    @room_number.setter
    def room_number(self, number: int) -> None:
        if self._room_number:
            raise ValueError(f"Room number is already set to {self._room_number}.")
        if not MIN_ROOM_NUMBER <= number <= MAX_ROOM_NUMBER:
            raise ValueError(
                f"Room number must be between {MIN_ROOM_NUMBER} and {MAX_ROOM_NUMBER}."
            )
        self._room_number = number

    @property
    def coordinates(self) -> str:
        return f"[{self.x1},{self.y1} to {self.x2},{self.y2}]"

    @property
    def patients(self) -> tuple[Patient, ...]:
        return tuple(self._patients)

    @property
    def is_waiting(self) -> bool:
        return self.room_type is RoomType.WAITING

    def can_accept(self, patient: Patient) -> bool:
        """True if placing `patient` here would respect the occupancy rule."""
        if self.is_waiting:
            return True
        return not self._patients or self._patients == [patient]

    def _add_patient(self, patient: Patient) -> None:
        """Place a patient in this room and point the patient back at it.

        Only the registry and the loader call this; everyone else goes
        through Clinic.assign_room so the assignment map stays in sync.
        """
        if not self._room_number:
            raise RuntimeError("Room number must be set before assigning a patient.")
        if not self.can_accept(patient):
            raise RuntimeError(
                f"{self.room_type.name} rooms can only have one patient at a time."
            )
        if patient not in self._patients:
            self._patients.append(patient)
        patient._assigned_room = self

    def _remove_patient(self, patient: Patient) -> None:
        if patient in self._patients:
            self._patients.remove(patient)
        if patient._assigned_room is self:
            patient._assigned_room = None
