"""Tests for clinicchart.models entities."""

from datetime import datetime

import pytest

from clinicchart.models import (
    NO_CHIEF_COMPLAINT,
    ActivationStatus,
    ApprovalStatus,
    CprLevel,
    EducationLevel,
    IdentifierKind,
    JobTitle,
    Patient,
    Person,
    Room,
    RoomType,
    Staff,
    TemperatureUnit,
    VisitRecord,
    VisitStatus,
)

WHEN = datetime(2025, 3, 1, 8, 15, 0)


class TestPerson:
    def test_full_name(self):
        assert Person("Ada", "Lovelace").full_name == "Ada Lovelace"

    @pytest.mark.parametrize("first,last", [("", "Doe"), ("Jane", " "), (None, "Doe")])
    def test_blank_names_rejected(self, first, last):
        with pytest.raises(ValueError, match="cannot be null or empty"):
            Person(first, last)

    def test_equality_by_name(self):
        assert Person("Ada", "Lovelace") == Person("Ada", "Lovelace")
        assert Person("Ada", "Lovelace") != Person("Ada", "Byron")


class TestStaff:
    def test_clinical_staff(self):
        s = Staff.clinical("Amy", "Anguish", JobTitle.PHYSICIAN, EducationLevel.DOCTORAL, "1234567890")
        assert s.is_clinical
        assert s.identifier_kind is IdentifierKind.NPI
        assert s.npi == "1234567890"
        assert s.cpr_level is None
        assert s.title_prefix == "Dr."
        assert s.role == "Clinical Staff"
        assert s.activation_status is ActivationStatus.ACTIVE

    def test_nurse_prefix(self):
        s = Staff.clinical("Benny", "Bruise", JobTitle.NURSE, EducationLevel.ALLIED, "0987654321")
        assert s.title_prefix == "Nurse"

    @pytest.mark.parametrize("npi", ["12345", "12345678901", "12345abcde", ""])
    def test_invalid_npi(self, npi):
        with pytest.raises(ValueError, match="10-digit"):
            Staff.clinical("Amy", "Anguish", JobTitle.PHYSICIAN, EducationLevel.DOCTORAL, npi)

    def test_reception_cannot_be_clinical(self):
        with pytest.raises(ValueError):
            Staff.clinical("Frank", "Febrile", JobTitle.RECEPTION, EducationLevel.ALLIED, "1234567890")

    def test_non_clinical_staff(self):
        s = Staff.non_clinical("Frank", "Febrile", EducationLevel.ALLIED, CprLevel.BLS)
        assert not s.is_clinical
        assert s.job_title is JobTitle.RECEPTION
        assert s.identifier_kind is IdentifierKind.CPR
        assert s.identifier_value == "BLS"
        assert s.cpr_level is CprLevel.BLS
        assert s.npi is None
        assert s.role == "Non-Clinical Staff"

    def test_raw_constructor_validates_tag(self):
        with pytest.raises(ValueError, match="NPI"):
            Staff(
                "Amy",
                "Anguish",
                job_title=JobTitle.PHYSICIAN,
                education_level=EducationLevel.DOCTORAL,
                identifier_kind=IdentifierKind.CPR,
                identifier_value="A",
            )

    def test_description(self):
        s = Staff.clinical("Amy", "Anguish", JobTitle.PHYSICIAN, EducationLevel.DOCTORAL, "1234567890")
        assert s.description == (
            "Dr. Amy Anguish - job title: physician - education level: doctoral "
            "- Identifier: NPI (1234567890)"
        )

    def test_staff_usable_as_dict_key(self):
        a = Staff.clinical("Amy", "Anguish", JobTitle.PHYSICIAN, EducationLevel.DOCTORAL, "1234567890")
        b = Staff.clinical("Amy", "Anguish", JobTitle.PHYSICIAN, EducationLevel.DOCTORAL, "1234567890")
        assert a == b
        assert len({a, b}) == 1


class TestVisitRecord:
    def test_celsius_stored_as_given(self):
        r = VisitRecord(WHEN, "Cough", 38.25)
        assert r.body_temperature == 38.25
        assert r.temperature_unit is TemperatureUnit.CELSIUS

    def test_fahrenheit_converted(self):
        r = VisitRecord(WHEN, "Fever", 98.6, temperature_unit=TemperatureUnit.FAHRENHEIT)
        assert r.body_temperature == pytest.approx(37.0, abs=0.05)
        assert r.temperature_unit is TemperatureUnit.CELSIUS
        assert r.formatted_temperature == "37.0 °C"

    def test_blank_complaint_placeholder(self):
        assert VisitRecord(WHEN, "", 37.0).chief_complaint == NO_CHIEF_COMPLAINT
        assert VisitRecord(WHEN, "   ", 37.0).chief_complaint == NO_CHIEF_COMPLAINT

    def test_defaults(self):
        r = VisitRecord(WHEN, "Headache", 37.0)
        assert r.visit_status is VisitStatus.IN_PROGRESS
        assert r.approval_status is ApprovalStatus.PENDING

    def test_formatted_registration(self):
        assert VisitRecord(WHEN, "x", 37.0).formatted_registered_at == "2025-03-01 08:15:00"

    def test_str(self):
        r = VisitRecord(WHEN, "Rash", 36.6)
        assert str(r) == "Registration: 2025-03-01 08:15:00, Chief Complaint: Rash, Temperature: 36.6 °C"


class TestPatient:
    def test_defaults(self):
        p = Patient("Aandi", "Acute", patient_id=0, date_of_birth="1/1/1981")
        assert p.visit_status is VisitStatus.IN_PROGRESS
        assert p.visit_records == []
        assert p.assigned_room is None
        assert p.latest_chief_complaint == "No Chief Complaint (CC) available."

    def test_negative_id_rejected(self):
        with pytest.raises(ValueError, match="negative"):
            Patient("Aandi", "Acute", patient_id=-1, date_of_birth="1/1/1981")

    def test_blank_dob_rejected(self):
        with pytest.raises(ValueError, match="Date of birth"):
            Patient("Aandi", "Acute", patient_id=0, date_of_birth=" ")

    def test_visit_records_are_copied(self):
        p = Patient("Aandi", "Acute", patient_id=0, date_of_birth="1/1/1981")
        p.add_visit_record(VisitRecord(WHEN, "Cough", 37.0))
        p.visit_records.clear()
        assert len(p.visit_records) == 1
        assert p.latest_chief_complaint == "Cough"

    def test_add_none_record_rejected(self):
        p = Patient("Aandi", "Acute", patient_id=0, date_of_birth="1/1/1981")
        with pytest.raises(ValueError):
            p.add_visit_record(None)

    def test_equality_includes_dob_and_id(self):
        a = Patient("Aandi", "Acute", patient_id=0, date_of_birth="1/1/1981")
        assert a == Patient("Aandi", "Acute", patient_id=0, date_of_birth="1/1/1981")
        assert a != Patient("Aandi", "Acute", patient_id=1, date_of_birth="1/1/1981")
        assert a != Patient("Aandi", "Acute", patient_id=0, date_of_birth="2/2/1982")

    def test_description(self):
        p = Patient("Aandi", "Acute", patient_id=4, date_of_birth="1/1/1981")
        assert p.description.startswith("Aandi Acute (Patient ID: 4, DOB: 1/1/1981, Status: IN_PROGRESS)")
        assert "No visit records available." in p.description


class TestRoom:
    def _room(self, room_type=RoomType.EXAM):
        room = Room("Triage", room_type, 0, 0, 10, 10)
        room.room_number = 2
        return room

    def test_coordinates(self):
        assert Room("Front", RoomType.WAITING, 1, 2, 3, 4).coordinates == "[1,2 to 3,4]"

    def test_negative_coordinates_rejected(self):
        with pytest.raises(ValueError, match="negative"):
            Room("Front", RoomType.WAITING, -1, 0, 3, 4)

    def test_blank_name_rejected(self):
        with pytest.raises(ValueError, match="Room name"):
            Room("  ", RoomType.WAITING, 0, 0, 3, 4)

    @pytest.mark.parametrize("number", [0, 101, -5])
    def test_room_number_range(self, number):
        room = Room("Front", RoomType.WAITING, 0, 0, 1, 1)
        with pytest.raises(ValueError, match="between 1 and 100"):
            room.room_number = number

    def test_room_number_immutable(self):
        room = self._room()
        with pytest.raises(ValueError, match="already set"):
            room.room_number = 3
        assert room.room_number == 2

    def test_must_be_numbered_before_use(self):
        room = Room("Front", RoomType.WAITING, 0, 0, 1, 1)
        patient = Patient("Aandi", "Acute", patient_id=0, date_of_birth="1/1/1981")
        with pytest.raises(RuntimeError, match="Room number must be set"):
            room._add_patient(patient)

    def test_exam_room_holds_one(self):
        room = self._room()
        a = Patient("Aandi", "Acute", patient_id=0, date_of_birth="1/1/1981")
        b = Patient("Beth", "Bunion", patient_id=1, date_of_birth="2/2/1982")
        room._add_patient(a)
        assert not room.can_accept(b)
        assert room.can_accept(a)
        with pytest.raises(RuntimeError, match="one patient"):
            room._add_patient(b)
        assert room.patients == (a,)
        assert a.assigned_room is room
        assert b.assigned_room is None

    def test_waiting_room_holds_many(self):
        room = self._room(RoomType.WAITING)
        patients = [
            Patient(f"P{i}", "Waiting", patient_id=i, date_of_birth="1/1/2000") for i in range(5)
        ]
        for p in patients:
            room._add_patient(p)
        assert room.patients == tuple(patients)

    def test_remove_clears_back_reference(self):
        room = self._room()
        a = Patient("Aandi", "Acute", patient_id=0, date_of_birth="1/1/1981")
        room._add_patient(a)
        room._remove_patient(a)
        assert room.patients == ()
        assert a.assigned_room is None

    def test_patients_view_is_immutable(self):
        room = self._room()
        assert isinstance(room.patients, tuple)

    def test_no_public_mutators(self):
        public = {name for name in dir(Room) if not name.startswith("_")}
        assert public.isdisjoint({"add_patient", "remove_patient"})
        room = self._room()
        with pytest.raises(AttributeError):
            room.patients = ()
