"""Shared test fixtures for clinicchart tests."""

from datetime import datetime

import pytest

from clinicchart.registry import Clinic
from clinicchart.sources.clinic_file import parse_clinic_text

SAMPLE_CLINIC = """\
Clinic Alpha
3
0 0 10 10 waiting Front Waiting Room
10 0 20 10 exam Triage
20 0 30 10 procedure Procedure Room A
4
physician Amy Anguish doctoral 1234567890
nurse Benny Bruise allied 0987654321
reception Frank Febrile allied BLS
physician Camila Crisis doctoral 1122334455
3
1 Aandi Acute 1/1/1981
2 Beth Bunion 2/2/1982
1 Clive Cough 3/3/1983
"""

REGISTERED_AT = datetime(2025, 1, 15, 9, 30, 0)


@pytest.fixture
def sample_text():
    return SAMPLE_CLINIC


@pytest.fixture
def sample_file(tmp_path):
    """Write the sample clinic to disk and return its path."""
    path = tmp_path / "clinic.txt"
    path.write_text(SAMPLE_CLINIC)
    return str(path)


@pytest.fixture
def clinic():
    """A clinic loaded from the sample data (3 rooms, 4 staff, 3 patients)."""
    return Clinic.from_data(parse_clinic_text(SAMPLE_CLINIC))


@pytest.fixture
def empty_clinic():
    """A clinic with the sample rooms and staff but no patients."""
    text = SAMPLE_CLINIC.rsplit("3\n1 Aandi", 1)[0] + "0\n"
    return Clinic.from_data(parse_clinic_text(text))


def staff_named(clinic, full_name):
    return next(s for s in clinic.staff if s.full_name == full_name)


def patient_named(clinic, full_name):
    return next(p for p in clinic.patients if p.full_name == full_name)
