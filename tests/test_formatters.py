"""Tests for the text and markdown report formatters."""

import pytest

from clinicchart.formatters.markdown import MarkdownWriter, format_seating_chart_markdown
from clinicchart.formatters.text import (
    ROOM_END_RULE,
    ROOM_RULE,
    format_patient_block,
    format_patient_list,
    format_room_info,
    format_seating_chart,
    format_staff_list,
)

from conftest import REGISTERED_AT, patient_named, staff_named


@pytest.fixture
def busy_clinic(clinic):
    """Sample clinic with a visit and a staff assignment for Beth Bunion."""
    clinic.register_existing_patient_visit(
        "Beth", "Bunion", "2/2/1982", REGISTERED_AT, "Foot pain", 37.5
    )
    clinic.assign_clinical_staff_to_patient(
        patient_named(clinic, "Beth Bunion"), staff_named(clinic, "Amy Anguish")
    )
    return clinic


class TestSeatingChart:
    def test_frame(self, clinic):
        chart = format_seating_chart(clinic)
        lines = chart.splitlines()
        assert lines[1] == "========== Clinic Alpha SEATING CHART =========="
        assert lines[-1] == "========== END OF SEATING CHART =========="

    def test_room_headers_in_order(self, clinic):
        chart = format_seating_chart(clinic)
        headers = [line for line in chart.splitlines() if line.startswith("Room ")]
        assert headers == [
            "Room 1: WAITING Front Waiting Room [0,0 to 10,10]",
            "Room 2: EXAM Triage [10,0 to 20,10]",
            "Room 3: PROCEDURE Procedure Room A [20,0 to 30,10]",
        ]
        assert chart.count(ROOM_RULE + "\n") == 3
        assert chart.count(ROOM_END_RULE + "\n") >= 3

    def test_empty_room(self, clinic):
        chart = format_seating_chart(clinic)
        room3 = chart.split("Room 3:")[1]
        assert "  No patients assigned." in room3

    def test_patient_without_visits(self, clinic):
        chart = format_seating_chart(clinic)
        assert "\tAandi Acute (Patient ID: 0 , DOB: 1/1/1981)" in chart
        assert "\tNo visit records found." in chart
        assert "\tNo staff assigned to this patient." in chart

    def test_patient_with_visit_and_staff(self, busy_clinic):
        chart = format_seating_chart(busy_clinic)
        assert (
            "\t\tRegistration: 2025-01-15 09:30:00, Chief Complaint: Foot pain, "
            "Body Temperature: 37.5 °C"
        ) in chart
        assert "\tAssigned Staff:" in chart
        assert "\t\tDr. Amy Anguish (NPI: 1234567890)" in chart

    def test_waiting_room_lists_patients_in_order(self, clinic):
        chart = format_seating_chart(clinic)
        assert chart.index("Aandi Acute") < chart.index("Clive Cough") < chart.index("Room 2:")

    def test_discharged_patient_absent(self, clinic):
        clinic.send_patient_home(patient_named(clinic, "Beth Bunion"), staff_named(clinic, "Amy Anguish"))
        chart = format_seating_chart(clinic)
        assert "Beth Bunion" not in chart
        assert "  No patients assigned." in chart.split("Room 2:")[1].split("Room 3:")[0]

    def test_hide_empty_rooms(self, clinic):
        chart = format_seating_chart(clinic, hide_empty_rooms=True)
        assert "Room 3:" not in chart
        assert "Room 2:" in chart

    def test_no_rooms(self):
        from clinicchart.registry import Clinic

        chart = format_seating_chart(Clinic("Bare"))
        assert "Bare SEATING CHART" in chart
        assert "Room " not in chart


class TestPatientBlock:
    def test_lines(self, busy_clinic):
        beth = patient_named(busy_clinic, "Beth Bunion")
        lines = format_patient_block(busy_clinic, beth)
        assert lines[0] == "Patient: "
        assert lines[1] == "\tBeth Bunion (Patient ID: 1 , DOB: 2/2/1982)"
        assert lines[2] == "\tVisit Records:"
        assert lines[-2] == "\tAssigned Staff:"


class TestRoomInfo:
    def test_occupied(self, busy_clinic):
        info = format_room_info(busy_clinic, 2)
        assert info.startswith("Room Information:\n")
        assert "\tRoom Number: 2" in info
        assert "\tRoom Type: EXAM" in info
        assert "\tCoordinates: [10,0 to 20,10]" in info
        assert "\tPatient: Beth Bunion (ID: 1)" in info
        assert "\t\tLatest Chief Complaint: Foot pain" in info
        assert "Dr. Amy Anguish (NPI: 1234567890)" in info

    def test_empty(self, clinic):
        info = format_room_info(clinic, 3)
        assert "No patients assigned to this room." in info

    def test_no_visits(self, clinic):
        info = format_room_info(clinic, 1)
        assert "Latest Chief Complaint: No Chief Complaint (CC) available." in info
        assert "Assigned Staff: No staff assigned to this patient." in info

    def test_invalid_room(self, clinic):
        with pytest.raises(ValueError):
            format_room_info(clinic, 9)


class TestStaffList:
    def test_all_staff(self, clinic):
        out = format_staff_list(clinic.staff)
        assert out.startswith("Staff:\n")
        assert "Dr. Amy Anguish - job title: physician" in out
        assert "Frank Febrile - job title: reception - education level: allied - Identifier: CPR (BLS)" in out
        assert "Non-Clinical Staff" in out

    def test_deactivated_marker(self, clinic):
        clinic.deactivate_staff(staff_named(clinic, "Benny Bruise"))
        out = format_staff_list(clinic.staff)
        line = next(line for line in out.splitlines() if "Benny Bruise" in line)
        assert line.endswith("[DEACTIVATED]")

    def test_empty(self):
        assert format_staff_list([], heading="Clinical Staff") == "No clinical staff registered in the clinic.\n"


class TestPatientList:
    def test_lists_rooms(self, clinic):
        out = format_patient_list(clinic)
        assert out.startswith("All Patients in the Clinic:")
        assert "Room: 2 (Triage)" in out
        assert out.count("Room: 1 (Front Waiting Room)") == 2

    def test_unassigned(self, clinic):
        clinic.remove_patient_from_room(patient_named(clinic, "Beth Bunion"))
        assert "Room: unassigned" in format_patient_list(clinic)

    def test_empty(self, empty_clinic):
        assert format_patient_list(empty_clinic) == "No patients registered in the clinic.\n"


class TestMarkdown:
    def test_writer_escapes_pipes(self):
        md = MarkdownWriter()
        md.table(["A", "B"], [["x|y", "z"]])
        assert md.text() == "| A | B |\n|---|---|\n| x\\|y | z |\n"

    def test_seating_chart(self, busy_clinic):
        out = format_seating_chart_markdown(busy_clinic)
        assert out.startswith("# Clinic Alpha — Seating Chart")
        assert "*3 rooms, 4 staff, 3 active patients.*" in out
        assert "| 1 | WAITING | Front Waiting Room | [0,0 to 10,10] | 2 |" in out
        assert "## Room 2: Triage (EXAM)" in out
        assert "### Beth Bunion — ID 1, DOB 2/2/1982" in out
        assert "| 2025-01-15 09:30:00 | Foot pain |" in out
        assert "- Dr. Amy Anguish (NPI: 1234567890)" in out
        assert "*No patients assigned.*" in out

    def test_hide_empty_rooms(self, clinic):
        out = format_seating_chart_markdown(clinic, hide_empty_rooms=True)
        assert "## Room 3:" not in out
        # the summary table still lists every room
        assert "| 3 | PROCEDURE | Procedure Room A |" in out
