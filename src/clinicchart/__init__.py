"""clinicchart — In-memory clinic records: rooms, staff, patients, and seating charts.

Loads a clinic from a line-oriented text file, tracks room and staff
assignments, and renders the seating chart report.
"""

__version__ = "1.0.0"
