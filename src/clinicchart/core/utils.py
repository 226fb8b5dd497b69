"""Shared utility functions for timestamp and temperature input parsing."""

from __future__ import annotations

import re
from datetime import datetime

from clinicchart.models import TemperatureUnit

_TIMESTAMP_FORMATS = (
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d %H:%M",
    "%m/%d/%Y %H:%M:%S",
    "%m/%d/%Y %H:%M",
    "%m/%d/%Y",
    "%Y-%m-%d",
)

_TEMPERATURE_RE = re.compile(r"^\s*(-?\d+(?:\.\d+)?)\s*°?\s*([CF])?\s*$", re.IGNORECASE)


def parse_timestamp(value: str) -> datetime:
    """Parse a registration timestamp.

    Supported formats:
    - ISO 8601: "2025-01-15T09:30:00", "2025-01-15 09:30"
    - US clinic style: "01/15/2025 09:30", "01/15/2025"

    Raises ValueError for empty or unparseable input.
    """
    if not value or not value.strip():
        raise ValueError("Timestamp cannot be empty.")
    s = value.strip()
    try:
        return datetime.fromisoformat(s)
    except ValueError:
        pass
    for fmt in _TIMESTAMP_FORMATS:
        try:
            return datetime.strptime(s, fmt)
        except ValueError:
            continue
    raise ValueError(f"Unrecognized timestamp: {value!r}")


def parse_temperature(value: str | float) -> tuple[float, TemperatureUnit]:
    """Parse a body temperature with an optional unit suffix.

    "37.2" and "37.2C" are Celsius, "98.6F" / "98.6 °F" are Fahrenheit.
    Bare numbers are Celsius.
    """
    if isinstance(value, (int, float)):
        return float(value), TemperatureUnit.CELSIUS
    m = _TEMPERATURE_RE.match(value or "")
    if not m:
        raise ValueError(f"Invalid temperature: {value!r}")
    unit = TemperatureUnit.FAHRENHEIT if (m.group(2) or "C").upper() == "F" else TemperatureUnit.CELSIUS
    return float(m.group(1)), unit
