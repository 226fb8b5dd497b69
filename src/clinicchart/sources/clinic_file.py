"""Parse the line-oriented clinic data file.

Format (one record per line, sections strictly in this order):

    <clinic name>
    <room count N>
    x1 y1 x2 y2 ROOMTYPE room name ...        (N lines)
    <staff count M>
    JOBTITLE first last EDUCATION identifier  (M lines)
    <patient count P>
    roomNumber first last dob                 (P lines)

Rooms are numbered 1..N in file order and patients get IDs 0..P-1 in file
order. The parser builds every entity before anything touches a registry,
so a malformed file never leaves partial state behind.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from enum import Enum
from typing import TypeVar

from clinicchart.models import (
    CprLevel,
    EducationLevel,
    JobTitle,
    Patient,
    Room,
    RoomType,
    Staff,
    VisitStatus,
)
from clinicchart.sources.base import FormatError, read_lines

E = TypeVar("E", bound=Enum)


@dataclass
class ClinicData:
    """Everything loaded from one clinic data file.

    Patients are already placed in their rooms (Room.patients and
    Patient.assigned_room agree).
    """

    name: str
    rooms: list[Room] = field(default_factory=list)
    staff: list[Staff] = field(default_factory=list)
    patients: list[Patient] = field(default_factory=list)


def _next_line(lines: Iterator[str]) -> str | None:
    line = next(lines, None)
    return None if line is None else line.rstrip("\r\n")


def _read_count(lines: Iterator[str], section: str, what: str) -> int:
    line = _next_line(lines)
    if line is None or not line.strip():
        raise FormatError(f"Invalid {section} Description: Number of {what} is missing or invalid.")
    try:
        count = int(line.strip())
    except ValueError:
        raise FormatError(
            f"Invalid {section} Description: Number of {what} must be an integer, got {line.strip()!r}."
        ) from None
    if count < 0:
        raise FormatError(f"Invalid {section} Description: Number of {what} cannot be negative.")
    return count


def _parse_enum(enum_type: type[E], raw: str, label: str) -> E:
    try:
        return enum_type[raw.upper()]
    except KeyError:
        raise FormatError(f"Invalid {label}: {raw}") from None


def parse_room(line: str | None, room_number: int) -> Room:
    """Parse `x1 y1 x2 y2 ROOMTYPE name` into a numbered Room."""
    if line is None:
        raise FormatError("Invalid Room Description: Room data is missing.")
    parts = line.split(maxsplit=5)
    if len(parts) < 6:
        raise FormatError("Invalid Room Description: Room data is incomplete.")

    try:
        x1, y1, x2, y2 = (int(p) for p in parts[:4])
    except ValueError:
        raise FormatError("Invalid Room Coordinates: Coordinates must be integers.") from None

    room_type = _parse_enum(RoomType, parts[4], "Room Type")
    try:
        room = Room(parts[5].strip(), room_type, x1, y1, x2, y2)
        room.room_number = room_number
    except ValueError as e:
        raise FormatError(f"Invalid Room Description: {e}") from e
    return room


def parse_staff(line: str | None) -> Staff:
    """Parse `JOBTITLE first last EDUCATION identifier` into a Staff member.

    Reception staff carry a CPR level; everyone else carries an NPI, which
    must be 10 digits.
    """
    if line is None:
        raise FormatError("Invalid Staff Description: Staff data is missing.")
    parts = line.split()
    if len(parts) < 5:
        raise FormatError("Invalid Staff Description: Staff data is incomplete.")

    title_raw, first_name, last_name, education_raw, identifier = parts[:5]
    job_title = _parse_enum(JobTitle, title_raw, "Job Title")
    education_level = _parse_enum(EducationLevel, education_raw, "Education Level")

    try:
        if job_title is JobTitle.RECEPTION:
            cpr_level = _parse_enum(CprLevel, identifier, "CPR Level")
            return Staff.non_clinical(first_name, last_name, education_level, cpr_level)
        return Staff.clinical(first_name, last_name, job_title, education_level, identifier)
    except ValueError as e:
        if isinstance(e, FormatError):
            raise
        raise FormatError(f"Invalid Staff Description: {e}") from e


def parse_patient(line: str | None, patient_id: int, rooms: list[Room]) -> Patient:
    """Parse `roomNumber first last dob` and seat the patient in that room."""
    if line is None:
        raise FormatError("Invalid Patient Description: Patient data is missing.")
    parts = line.split()
    if len(parts) < 4:
        raise FormatError("Invalid Patient Description: Patient data is incomplete.")

    try:
        room_number = int(parts[0])
    except ValueError:
        raise FormatError(f"Invalid room number for patient: {parts[0]}") from None
    if not 1 <= room_number <= len(rooms):
        raise FormatError(f"Invalid room number for patient: {room_number}")

    first_name, last_name, dob = parts[1:4]
    try:
        patient = Patient(
            first_name,
            last_name,
            patient_id=patient_id,
            date_of_birth=dob,
            visit_status=VisitStatus.IN_PROGRESS,
        )
    except ValueError as e:
        raise FormatError(f"Invalid Patient Description: {e}") from e

    room = rooms[room_number - 1]
    if not room.can_accept(patient):
        raise FormatError(f"Room {room_number} is already occupied by another patient.")
    room._add_patient(patient)
    return patient


def parse_clinic_lines(lines: Iterable[str]) -> ClinicData:
    """Parse clinic data from any iterable of text lines."""
    it = iter(lines)

    name = _next_line(it)
    if name is None or not name.strip():
        raise FormatError("Invalid Clinic Name: Clinic name is missing or invalid.")
    data = ClinicData(name=name.strip())

    room_count = _read_count(it, "Room", "rooms")
    for number in range(1, room_count + 1):
        data.rooms.append(parse_room(_next_line(it), number))

    staff_count = _read_count(it, "Staff", "staff members")
    for _ in range(staff_count):
        data.staff.append(parse_staff(_next_line(it)))

    patient_count = _read_count(it, "Patient", "patients")
    for patient_id in range(patient_count):
        data.patients.append(parse_patient(_next_line(it), patient_id, data.rooms))

    return data


def parse_clinic_text(text: str) -> ClinicData:
    return parse_clinic_lines(text.splitlines())


def parse_clinic_file(locator: str) -> ClinicData:
    """Parse a local clinic data file.

    Raises:
        FileNotFoundError: the file does not exist.
        ValueError: the locator is empty or remote.
        FormatError: the file content is malformed.
    """
    return parse_clinic_lines(read_lines(locator))
