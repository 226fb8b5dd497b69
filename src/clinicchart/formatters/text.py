"""Plain-text reports: seating chart, room info, staff and patient listings.

Read-only consumers of the Clinic registry's public accessors.
"""

from __future__ import annotations

from clinicchart.models import Patient, Room, Staff, VisitStatus
from clinicchart.registry import Clinic

ROOM_RULE = "-" * 54
ROOM_END_RULE = "-" * 44


def _active(patients: list[Patient]) -> list[Patient]:
    return [p for p in patients if p.visit_status is not VisitStatus.DISCHARGED]


def _room_header(room: Room) -> str:
    return f"Room {room.room_number}: {room.room_type.name} {room.name} {room.coordinates}"


def _staff_line(staff: Staff) -> str:
    return f"{staff.title_prefix} {staff.full_name} ({staff.identifier_kind.value}: {staff.identifier_value})"


def format_patient_block(clinic: Clinic, patient: Patient, indent: str = "\t") -> list[str]:
    """Lines describing one occupant: identity, visit history, assigned staff."""
    lines = [
        "Patient: ",
        f"{indent}{patient.full_name} (Patient ID: {patient.patient_id} , DOB: {patient.date_of_birth})",
    ]

    records = patient.visit_records
    if not records:
        lines.append(f"{indent}No visit records found.")
    else:
        lines.append(f"{indent}Visit Records:")
        for record in records:
            lines.append(
                f"{indent}{indent}Registration: {record.formatted_registered_at}, "
                f"Chief Complaint: {record.chief_complaint}, "
                f"Body Temperature: {record.formatted_temperature}"
            )

    staff = clinic.get_assigned_clinical_staff(patient)
    if not staff:
        lines.append(f"{indent}No staff assigned to this patient.")
    else:
        lines.append(f"{indent}Assigned Staff:")
        lines.extend(f"{indent}{indent}{_staff_line(s)}" for s in staff)
    return lines


def format_seating_chart(clinic: Clinic, hide_empty_rooms: bool = False) -> str:
    """Render every room with its active occupants, their visits, and their staff."""
    assignments = clinic.get_room_assignments()
    lines = ["", f"========== {clinic.name} SEATING CHART ==========", ""]

    for room in clinic.rooms:
        occupants = _active(assignments.get(room.room_number, []))
        if hide_empty_rooms and not occupants:
            continue
        lines.append(_room_header(room))
        lines.append(ROOM_RULE)
        if not occupants:
            lines.append("  No patients assigned.")
        for patient in occupants:
            lines.extend(format_patient_block(clinic, patient))
        lines.append(ROOM_END_RULE)
        lines.append("")

    lines.append("========== END OF SEATING CHART ==========")
    return "\n".join(lines) + "\n"


def format_room_info(clinic: Clinic, room_number: int) -> str:
    room = clinic.get_room(room_number)
    occupants = _active(clinic.get_room_assignments().get(room_number, []))

    lines = [
        "Room Information:",
        f"\tRoom Number: {room.room_number}",
        f"\tRoom Name: {room.name}",
        f"\tRoom Type: {room.room_type.name}",
        f"\tCoordinates: {room.coordinates}",
    ]
    if not occupants:
        lines.append("No patients assigned to this room.")
        return "\n".join(lines) + "\n"

    lines.append("Assigned Patients:")
    for patient in occupants:
        lines.append(f"\tPatient: {patient.full_name} (ID: {patient.patient_id})")
        lines.append(f"\t\tLatest Chief Complaint: {patient.latest_chief_complaint}")
        staff = clinic.get_assigned_clinical_staff(patient)
        if staff:
            lines.append("\t\tAssigned Staff: " + ", ".join(_staff_line(s) for s in staff))
        else:
            lines.append("\t\tAssigned Staff: No staff assigned to this patient.")
    return "\n".join(lines) + "\n"


def format_staff_list(staff: list[Staff], heading: str = "Staff") -> str:
    if not staff:
        return f"No {heading.lower()} registered in the clinic.\n"
    lines = [f"{heading}:"]
    for member in staff:
        status = "" if member.is_active else " [DEACTIVATED]"
        lines.append(f"  {member.description} - {member.role}{status}")
    return "\n".join(lines) + "\n"


def format_patient_list(clinic: Clinic) -> str:
    patients = clinic.patients
    if not patients:
        return "No patients registered in the clinic.\n"

    lines = ["All Patients in the Clinic:"]
    for patient in patients:
        room = patient.assigned_room
        lines.append(ROOM_END_RULE)
        lines.append(patient.description)
        lines.append(f"Room: {room.room_number} ({room.name})" if room else "Room: unassigned")
    lines.append(ROOM_END_RULE)
    return "\n".join(lines) + "\n"
