"""Markdown output formatter for the clinic seating chart."""

from clinicchart.models import VisitStatus
from clinicchart.registry import Clinic


class MarkdownWriter:
    """Builds markdown output incrementally."""

    def __init__(self):
        self._lines: list[str] = []

    def w(self, line: str = "") -> None:
        self._lines.append(line)

    def heading(self, text: str, level: int = 2) -> None:
        self.w(f"{'#' * level} {text}")
        self.w()

    def table(self, headers: list[str], rows: list[list[str]]) -> None:
        self.w("| " + " | ".join(headers) + " |")
        self.w("|" + "|".join("---" for _ in headers) + "|")
        for row in rows:
            self.w("| " + " | ".join(_cell(c) for c in row) + " |")
        self.w()

    def separator(self) -> None:
        self.w("---")
        self.w()

    def text(self) -> str:
        return "\n".join(self._lines)


def _cell(value) -> str:
    return str(value).replace("|", "\\|")


def format_seating_chart_markdown(clinic: Clinic, hide_empty_rooms: bool = False) -> str:
    """Format the seating chart as a markdown document."""
    md = MarkdownWriter()
    md.heading(f"{clinic.name} — Seating Chart", level=1)

    patients = clinic.patients
    md.w(f"*{len(clinic.rooms)} rooms, {len(clinic.staff)} staff, {len(patients)} active patients.*")
    md.w()

    md.heading("Rooms")
    assignments = clinic.get_room_assignments()
    md.table(
        ["#", "Type", "Name", "Coordinates", "Occupants"],
        [
            [
                str(room.room_number),
                room.room_type.name,
                room.name,
                room.coordinates,
                str(len(assignments.get(room.room_number, []))),
            ]
            for room in clinic.rooms
        ],
    )

    for room in clinic.rooms:
        occupants = [
            p
            for p in assignments.get(room.room_number, [])
            if p.visit_status is not VisitStatus.DISCHARGED
        ]
        if hide_empty_rooms and not occupants:
            continue

        md.separator()
        md.heading(f"Room {room.room_number}: {room.name} ({room.room_type.name})")
        if not occupants:
            md.w("*No patients assigned.*")
            md.w()
            continue

        for patient in occupants:
            md.heading(
                f"{patient.full_name} — ID {patient.patient_id}, DOB {patient.date_of_birth}",
                level=3,
            )
            records = patient.visit_records
            if records:
                md.table(
                    ["Registered", "Chief Complaint", "Temperature"],
                    [
                        [r.formatted_registered_at, r.chief_complaint, r.formatted_temperature]
                        for r in records
                    ],
                )
            else:
                md.w("*No visit records found.*")
                md.w()

            staff = clinic.get_assigned_clinical_staff(patient)
            if staff:
                md.w("**Assigned Staff:**")
                md.w()
                for s in staff:
                    md.w(f"- {s.title_prefix} {s.full_name} ({s.identifier_kind.value}: {s.identifier_value})")
                md.w()
            else:
                md.w("*No staff assigned to this patient.*")
                md.w()

    return md.text()
