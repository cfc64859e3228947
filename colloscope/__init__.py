"""
Colloscope: resolve colle timetables into dated, per-group schedules.
"""

from colloscope.export_ics import export_calendar
from colloscope.parse import parse_ghost_groups
from colloscope.resolve import next_instances, resolve_dataset

__all__ = ["export_calendar", "next_instances", "parse_ghost_groups", "resolve_dataset"]
