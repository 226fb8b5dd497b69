"""Core input-parsing helpers."""

from clinicchart.core.utils import parse_temperature, parse_timestamp
