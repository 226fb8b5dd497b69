#!/usr/bin/env python3
"""CLI entry point for clinicchart package.

Usage:
    python -m clinicchart chart [--file clinic.txt] [--format text|markdown] [--output out.md]
    python -m clinicchart room <number> [--file clinic.txt]
    python -m clinicchart patients [--file clinic.txt]
    python -m clinicchart staff [--clinical | --non-clinical] [--file clinic.txt]
    python -m clinicchart search-patient <term> [--file clinic.txt]
    python -m clinicchart search-staff <term> [--file clinic.txt]
    python -m clinicchart init-config [--output clinicchart.toml] [--data-file clinic.txt]
    python -m clinicchart serve-mcp [--file clinic.txt]
"""

import argparse
import logging
import sys

from clinicchart.config import DEFAULT_CONFIG_PATH


def _add_source_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--file", default="", help="Clinic data file (default: from config)")
    p.add_argument("--config", default="", help=f"Path to config file (default: {DEFAULT_CONFIG_PATH})")


def main():
    parser = argparse.ArgumentParser(
        prog="clinicchart",
        description="Load clinic records and report on rooms, staff, and patients.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log registry activity")
    sub = parser.add_subparsers(dest="command")

    # --- chart ---
    chart_parser = sub.add_parser("chart", help="Print the seating chart")
    _add_source_args(chart_parser)
    chart_parser.add_argument("--format", choices=["text", "markdown"], default=None, help="Output format")
    chart_parser.add_argument("--output", default="", help="Write to this file instead of stdout")

    # --- room ---
    room_parser = sub.add_parser("room", help="Show one room and its occupants")
    room_parser.add_argument("number", type=int, help="Room number")
    _add_source_args(room_parser)

    # --- patients ---
    patients_parser = sub.add_parser("patients", help="List all active patients")
    _add_source_args(patients_parser)

    # --- staff ---
    staff_parser = sub.add_parser("staff", help="List staff members")
    _add_source_args(staff_parser)
    kind = staff_parser.add_mutually_exclusive_group()
    kind.add_argument("--clinical", action="store_true", help="Clinical staff only")
    kind.add_argument("--non-clinical", action="store_true", help="Non-clinical staff only")

    # --- search-patient ---
    sp_parser = sub.add_parser("search-patient", help="Find a patient by ID or full name")
    sp_parser.add_argument("term", help="Patient ID or full name")
    _add_source_args(sp_parser)

    # --- search-staff ---
    ss_parser = sub.add_parser("search-staff", help="Find staff by full name or identifier")
    ss_parser.add_argument("term", help="Full name, NPI, or CPR level")
    _add_source_args(ss_parser)

    # --- init-config ---
    config_parser = sub.add_parser("init-config", help="Generate a clinicchart.toml config file")
    config_parser.add_argument("--output", default=DEFAULT_CONFIG_PATH, help="Config file output path")
    config_parser.add_argument("--data-file", default="clinic.txt", help="Default clinic data file")

    # --- serve-mcp ---
    mcp_parser = sub.add_parser("serve-mcp", help="Start MCP server over a loaded clinic")
    _add_source_args(mcp_parser)

    args = parser.parse_args()

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.command == "chart":
        _handle_chart(args)
    elif args.command == "room":
        _handle_room(args)
    elif args.command == "patients":
        _handle_patients(args)
    elif args.command == "staff":
        _handle_staff(args)
    elif args.command == "search-patient":
        _handle_search_patient(args)
    elif args.command == "search-staff":
        _handle_search_staff(args)
    elif args.command == "init-config":
        _handle_init_config(args)
    elif args.command == "serve-mcp":
        _handle_serve_mcp(args)


def _load_config(args) -> dict:
    from clinicchart.config import load_config

    if args.config:
        return load_config(args.config)
    return load_config(DEFAULT_CONFIG_PATH, quiet=True)


def _load_clinic(args, config: dict):
    from clinicchart.registry import Clinic

    data_file = args.file or config["clinic"]["data_file"]
    try:
        return Clinic.from_file(
            data_file,
            dedupe_staff_assignments=config["registry"]["dedupe_staff_assignments"],
        )
    except (OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


def _handle_chart(args):
    from clinicchart.formatters.markdown import format_seating_chart_markdown
    from clinicchart.formatters.text import format_seating_chart

    config = _load_config(args)
    clinic = _load_clinic(args, config)
    report_format = args.format or config["report"]["format"]
    hide_empty = config["report"]["hide_empty_rooms"]

    if report_format == "markdown":
        content = format_seating_chart_markdown(clinic, hide_empty_rooms=hide_empty)
    else:
        content = format_seating_chart(clinic, hide_empty_rooms=hide_empty)

    if args.output:
        with open(args.output, "w", encoding="utf-8") as f:
            f.write(content)
        print(f"Seating chart written to {args.output}")
    else:
        print(content)


def _handle_room(args):
    from clinicchart.formatters.text import format_room_info

    clinic = _load_clinic(args, _load_config(args))
    try:
        print(format_room_info(clinic, args.number))
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


def _handle_patients(args):
    from clinicchart.formatters.text import format_patient_list

    clinic = _load_clinic(args, _load_config(args))
    print(format_patient_list(clinic))


def _handle_staff(args):
    from clinicchart.formatters.text import format_staff_list

    clinic = _load_clinic(args, _load_config(args))
    if args.clinical:
        print(format_staff_list(clinic.clinical_staff, heading="Clinical Staff"))
    elif args.non_clinical:
        print(format_staff_list(clinic.non_clinical_staff, heading="Non-Clinical Staff"))
    else:
        print(format_staff_list(clinic.staff, heading="Staff"))


def _handle_search_patient(args):
    clinic = _load_clinic(args, _load_config(args))
    patient = clinic.search_patient(args.term)
    if patient is None:
        print("No patient found with the given search term.")
        sys.exit(1)

    print(patient.description)
    room = patient.assigned_room
    print(f"Room: {room.room_number} ({room.name})" if room else "Room: unassigned")


def _handle_search_staff(args):
    from clinicchart.formatters.text import format_staff_list

    clinic = _load_clinic(args, _load_config(args))
    matches = clinic.search_staff(args.term)
    if not matches:
        print("No staff members match the search term.")
        sys.exit(1)
    print(format_staff_list(matches, heading=f"Matches ({len(matches)})"))


def _handle_init_config(args):
    from clinicchart.config import generate_config

    path = generate_config(config_path=args.output, data_file=args.data_file)
    print(f"Config generated at {path}")


def _handle_serve_mcp(args):
    import os

    config = _load_config(args)
    os.environ["CLINIC_FILE"] = args.file or config["clinic"]["data_file"]
    os.environ["CLINIC_DEDUPE_STAFF"] = "1" if config["registry"]["dedupe_staff_assignments"] else "0"

    from clinicchart.mcp.server import mcp

    mcp.run()


if __name__ == "__main__":
    main()
