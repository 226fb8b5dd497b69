"""MCP server for clinicchart: tools over one in-memory clinic registry.

Run with: python -m clinicchart.mcp.server
Configure env: CLINIC_FILE=/path/to/clinic.txt

The clinic is loaded once per process and kept in memory; mutating tools
change that in-memory registry only (nothing is written back to the file).
"""

from __future__ import annotations

import functools
import os
import threading
from datetime import datetime

from mcp.server.fastmcp import FastMCP

from clinicchart.core.utils import parse_temperature, parse_timestamp
from clinicchart.formatters.markdown import format_seating_chart_markdown
from clinicchart.formatters.text import format_room_info, format_seating_chart
from clinicchart.models import EducationLevel, JobTitle, Patient, Staff
from clinicchart.registry import Clinic, Result

DATA_FILE = os.environ.get("CLINIC_FILE", "clinic.txt")
DEDUPE_STAFF = os.environ.get("CLINIC_DEDUPE_STAFF", "1") != "0"

mcp = FastMCP(
    "clinicchart",
    instructions=(
        "Clinic record server holding one clinic's rooms, staff, patients, and "
        "their assignments in memory.\n\n"
        "Key capabilities:\n"
        "- get_seating_chart / get_room_info: Room occupancy with visit history and staff\n"
        "- list_rooms / list_patients / list_staff: Roster listings\n"
        "- search_patient / search_staff: Lookup by ID, full name, NPI, or CPR level\n"
        "- register_new_patient_visit / register_existing_patient_visit: Intake\n"
        "- assign_room / remove_patient_from_room: Move patients between rooms\n"
        "- assign_staff_to_patient: Attach clinical staff to a patient\n"
        "- send_patient_home: Discharge (a physician must approve)\n"
        "- register_clinical_staff / deactivate_staff: Staff roster changes\n"
        "- reload_clinic: Reload state from the data file\n\n"
        "Patients are referred to by patient ID or full name; staff by full name "
        "or NPI. Start with get_seating_chart to understand current state."
    ),
)

_clinic: Clinic | None = None
_clinic_lock = threading.RLock()


def _serialized(fn):
    """Run a tool while holding the registry lock; tools may mutate shared state."""

    @functools.wraps(fn)
    def wrapper(*args, **kwargs):
        with _clinic_lock:
            return fn(*args, **kwargs)

    return wrapper


def _get_clinic() -> Clinic:
    global _clinic
    if _clinic is None:
        _clinic = Clinic.from_file(DATA_FILE, dedupe_staff_assignments=DEDUPE_STAFF)
    return _clinic


def _patient_dict(patient: Patient) -> dict:
    room = patient.assigned_room
    return {
        "patient_id": patient.patient_id,
        "name": patient.full_name,
        "date_of_birth": patient.date_of_birth,
        "visit_status": patient.visit_status.name,
        "room_number": room.room_number if room else None,
        "visits": [
            {
                "registered_at": r.formatted_registered_at,
                "chief_complaint": r.chief_complaint,
                "body_temperature_c": round(r.body_temperature, 1),
            }
            for r in patient.visit_records
        ],
    }


def _staff_dict(staff: Staff) -> dict:
    return {
        "name": staff.full_name,
        "job_title": staff.job_title.name,
        "education_level": staff.education_level.name,
        "identifier_kind": staff.identifier_kind.value,
        "identifier": staff.identifier_value,
        "role": staff.role,
        "active": staff.is_active,
    }


def _result_dict(result: Result) -> dict:
    out = {"ok": result.ok, "outcome": result.outcome.value, "message": result.message}
    if result.patient is not None:
        out["patient"] = _patient_dict(result.patient)
    return out


def _resolve_patient(clinic: Clinic, term: str) -> Patient:
    patient = clinic.search_patient(term)
    if patient is None:
        raise ValueError(f"No patient found for '{term}'.")
    return patient


def _resolve_staff(clinic: Clinic, term: str) -> Staff:
    matches = clinic.search_staff(term)
    if not matches:
        raise ValueError(f"No staff member found for '{term}'.")
    if len(matches) > 1:
        raise ValueError(f"Multiple staff members match '{term}'; use their NPI instead.")
    return matches[0]


@mcp.tool()
@_serialized
def get_seating_chart(format: str = "text", hide_empty_rooms: bool = False) -> str:
    """Get the clinic seating chart: every room, its active patients, their
    visit records, and their assigned clinical staff.

    Args:
        format: "text" (classic report) or "markdown".
        hide_empty_rooms: Leave out rooms with no active patients.
    """
    try:
        clinic = _get_clinic()
    except (OSError, ValueError) as e:
        return f"Error: {e}"
    if format == "markdown":
        return format_seating_chart_markdown(clinic, hide_empty_rooms=hide_empty_rooms)
    return format_seating_chart(clinic, hide_empty_rooms=hide_empty_rooms)


@mcp.tool()
@_serialized
def get_room_info(room_number: int) -> str:
    """Get one room's details and its active patients with their assigned staff."""
    try:
        return format_room_info(_get_clinic(), room_number)
    except (OSError, ValueError) as e:
        return f"Error: {e}"


@mcp.tool()
@_serialized
def list_rooms() -> list[dict] | str:
    """List all rooms with number, type, name, coordinates, and occupant IDs."""
    try:
        clinic = _get_clinic()
    except (OSError, ValueError) as e:
        return f"Error: {e}"
    assignments = clinic.get_room_assignments()
    return [
        {
            "room_number": room.room_number,
            "room_type": room.room_type.name,
            "name": room.name,
            "coordinates": room.coordinates,
            "patient_ids": [p.patient_id for p in assignments.get(room.room_number, [])],
        }
        for room in clinic.rooms
    ]


@mcp.tool()
@_serialized
def list_patients() -> list[dict] | str:
    """List all active (not discharged) patients with their room and visits."""
    try:
        return [_patient_dict(p) for p in _get_clinic().patients]
    except (OSError, ValueError) as e:
        return f"Error: {e}"


@mcp.tool()
@_serialized
def list_staff(kind: str = "all") -> list[dict] | str:
    """List staff members.

    Args:
        kind: "all", "clinical" (physicians and nurses), or "non-clinical" (reception).
    """
    try:
        clinic = _get_clinic()
    except (OSError, ValueError) as e:
        return f"Error: {e}"
    if kind == "clinical":
        staff = clinic.clinical_staff
    elif kind == "non-clinical":
        staff = clinic.non_clinical_staff
    elif kind == "all":
        staff = clinic.staff
    else:
        return f"Error: Unknown staff kind '{kind}'."
    return [_staff_dict(s) for s in staff]


@mcp.tool()
@_serialized
def search_patient(term: str) -> dict | str:
    """Find a patient by patient ID (numeric) or full name (case-insensitive)."""
    try:
        patient = _get_clinic().search_patient(term)
    except (OSError, ValueError) as e:
        return f"Error: {e}"
    if patient is None:
        return f"No patient found for '{term}'."
    return _patient_dict(patient)


@mcp.tool()
@_serialized
def search_staff(term: str) -> list[dict] | str:
    """Find all staff whose full name or identifier (NPI or CPR level) matches."""
    try:
        return [_staff_dict(s) for s in _get_clinic().search_staff(term)]
    except (OSError, ValueError) as e:
        return f"Error: {e}"


def _register_visit(
    new_patient: bool,
    first_name: str,
    last_name: str,
    date_of_birth: str,
    chief_complaint: str,
    temperature: str,
    registered_at: str,
) -> dict | str:
    try:
        clinic = _get_clinic()
        when = parse_timestamp(registered_at) if registered_at else datetime.now()
        value, unit = parse_temperature(temperature)
        register = (
            clinic.register_new_patient_visit
            if new_patient
            else clinic.register_existing_patient_visit
        )
        result = register(
            first_name, last_name, date_of_birth, when, chief_complaint, value, temperature_unit=unit
        )
    except (OSError, ValueError, RuntimeError) as e:
        return f"Error: {e}"
    return _result_dict(result)


@mcp.tool()
@_serialized
def register_new_patient_visit(
    first_name: str,
    last_name: str,
    date_of_birth: str,
    chief_complaint: str = "",
    temperature: str = "37.0",
    registered_at: str = "",
) -> dict | str:
    """Register a first-time patient with one visit; they are seated in room 1.

    Args:
        first_name, last_name, date_of_birth: Patient identity (DOB as written, e.g. "1/1/1981").
        chief_complaint: Reason for the visit.
        temperature: Body temperature, e.g. "37.2", "98.6F".
        registered_at: Timestamp, e.g. "2025-01-15 09:30". Defaults to now.
    """
    return _register_visit(
        True, first_name, last_name, date_of_birth, chief_complaint, temperature, registered_at
    )


@mcp.tool()
@_serialized
def register_existing_patient_visit(
    first_name: str,
    last_name: str,
    date_of_birth: str,
    chief_complaint: str = "",
    temperature: str = "37.0",
    registered_at: str = "",
) -> dict | str:
    """Add a visit record to an existing patient (exact name and DOB match)."""
    return _register_visit(
        False, first_name, last_name, date_of_birth, chief_complaint, temperature, registered_at
    )


@mcp.tool()
@_serialized
def assign_room(patient: str, room_number: int) -> dict | str:
    """Move a patient (ID or full name) to a room. Exam and procedure rooms hold one patient."""
    try:
        clinic = _get_clinic()
        result = clinic.assign_patient_to_room(_resolve_patient(clinic, patient), room_number)
    except (OSError, ValueError) as e:
        return f"Error: {e}"
    return _result_dict(result)


@mcp.tool()
@_serialized
def remove_patient_from_room(patient: str) -> dict | str:
    """Take a patient (ID or full name) out of their current room."""
    try:
        clinic = _get_clinic()
        result = clinic.remove_patient_from_room(_resolve_patient(clinic, patient))
    except (OSError, ValueError) as e:
        return f"Error: {e}"
    return _result_dict(result)


@mcp.tool()
@_serialized
def assign_staff_to_patient(patient: str, staff: list[str]) -> list[dict] | str:
    """Assign one or more clinical staff (full name or NPI each) to a patient.

    Returns one result per staff member; deactivated or already-assigned
    staff are reported and skipped.
    """
    try:
        clinic = _get_clinic()
        target = _resolve_patient(clinic, patient)
        members = [_resolve_staff(clinic, term) for term in staff]
        results = clinic.assign_multiple_clinical_staff_to_patient(target, members)
    except (OSError, ValueError) as e:
        return f"Error: {e}"
    return [_result_dict(r) for r in results]


@mcp.tool()
@_serialized
def send_patient_home(patient: str, approver: str) -> dict | str:
    """Discharge a patient (ID or full name). The approver (full name or NPI) must be a physician."""
    try:
        clinic = _get_clinic()
        result = clinic.send_patient_home(
            _resolve_patient(clinic, patient), _resolve_staff(clinic, approver)
        )
    except (OSError, ValueError) as e:
        return f"Error: {e}"
    return _result_dict(result)


@mcp.tool()
@_serialized
def register_clinical_staff(
    first_name: str,
    last_name: str,
    job_title: str,
    education_level: str,
    npi: str,
) -> dict | str:
    """Register a physician or nurse.

    Args:
        job_title: "physician" or "nurse".
        education_level: "doctoral", "masters", or "allied".
        npi: 10-digit National Provider Identifier.
    """
    try:
        clinic = _get_clinic()
        member = Staff.clinical(
            first_name,
            last_name,
            JobTitle[job_title.strip().upper()],
            EducationLevel[education_level.strip().upper()],
            npi.strip(),
        )
        result = clinic.register_clinical_staff(member)
    except KeyError as e:
        return f"Error: Unknown value {e}."
    except (OSError, ValueError) as e:
        return f"Error: {e}"
    return {**_result_dict(result), "staff": _staff_dict(member)}


@mcp.tool()
@_serialized
def deactivate_staff(staff: str) -> dict | str:
    """Deactivate a staff member (full name or NPI). They stay on the roster
    but can no longer be assigned to patients."""
    try:
        clinic = _get_clinic()
        member = _resolve_staff(clinic, staff)
        result = clinic.deactivate_staff(member)
    except (OSError, ValueError) as e:
        return f"Error: {e}"
    return {**_result_dict(result), "staff": _staff_dict(member)}


@mcp.tool()
@_serialized
def reload_clinic(data_file: str = "") -> dict | str:
    """Discard in-memory changes and reload the clinic from its data file.

    Args:
        data_file: Load this file instead of the configured one.
    """
    global _clinic, DATA_FILE
    path = data_file or DATA_FILE
    try:
        clinic = Clinic.from_file(path, dedupe_staff_assignments=DEDUPE_STAFF)
    except (OSError, ValueError) as e:
        return f"Error: {e}"
    _clinic = clinic
    DATA_FILE = path
    return {
        "clinic": clinic.name,
        "rooms": len(clinic.rooms),
        "staff": len(clinic.staff),
        "patients": len(clinic.patients),
    }


def main():
    mcp.run()


if __name__ == "__main__":
    main()
