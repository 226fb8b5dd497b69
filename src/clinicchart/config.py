"""Configuration management for clinicchart.

Handles loading and generating TOML config files for settings like the
default clinic data file and staff-assignment de-duplication.
"""

from __future__ import annotations

import sys
import tomllib
from pathlib import Path

DEFAULT_CONFIG_PATH = "clinicchart.toml"
DEFAULT_DATA_FILE = "clinic.txt"
REPORT_FORMATS = ("text", "markdown")

DEFAULT_CONFIG_TEMPLATE = """\
# clinicchart configuration
# Edit freely.

[clinic]
# Clinic data file loaded by the CLI and the MCP server
data_file = "{data_file}"

[registry]
# Reject assigning the same staff member to the same patient twice
dedupe_staff_assignments = {dedupe}

[report]
# Seating chart format: "text" or "markdown"
format = "{report_format}"
# Leave rooms with no active patients out of the seating chart
hide_empty_rooms = {hide_empty}
"""


def _default_config() -> dict:
    """Return default configuration."""
    return {
        "clinic": {
            "data_file": DEFAULT_DATA_FILE,
        },
        "registry": {
            "dedupe_staff_assignments": True,
        },
        "report": {
            "format": "text",
            "hide_empty_rooms": False,
        },
    }


def load_config(config_path: str = DEFAULT_CONFIG_PATH, quiet: bool = False) -> dict:
    """Load configuration from a TOML file.

    Returns a dict with the sections "clinic", "registry", and "report",
    each filled with defaults for any key the file leaves out.

    Falls back to defaults if the config file doesn't exist.
    """
    path = Path(config_path)
    if not path.exists():
        if not quiet:
            print(
                f"Warning: Config file '{config_path}' not found, using defaults. "
                f"Run 'clinicchart init-config' to generate one.",
                file=sys.stderr,
            )
        return _default_config()

    with open(path, "rb") as f:
        raw = tomllib.load(f)

    config = _default_config()
    for section, values in config.items():
        if isinstance(raw.get(section), dict):
            values.update(raw[section])

    report_format = config["report"]["format"]
    if report_format not in REPORT_FORMATS:
        print(
            f"Warning: Unknown report format '{report_format}', using 'text'.",
            file=sys.stderr,
        )
        config["report"]["format"] = "text"

    return config


def _toml_bool(value: bool) -> str:
    return "true" if value else "false"


def generate_config(
    config_path: str = DEFAULT_CONFIG_PATH,
    data_file: str = DEFAULT_DATA_FILE,
    dedupe_staff_assignments: bool = True,
    report_format: str = "text",
    hide_empty_rooms: bool = False,
) -> str:
    """Write a config file populated with the given settings.

    Returns the path of the written config file.
    """
    if report_format not in REPORT_FORMATS:
        raise ValueError(f"Unknown report format: {report_format}")

    content = DEFAULT_CONFIG_TEMPLATE.format(
        data_file=data_file.replace("\\", "/"),
        dedupe=_toml_bool(dedupe_staff_assignments),
        report_format=report_format,
        hide_empty=_toml_bool(hide_empty_rooms),
    )
    Path(config_path).write_text(content)
    return config_path
