"""
Schedule resolution (parsed tables -> dated, per-group colle instances).

Each group gets, for every grid column, the full cross product of the
column's weeks and the cell's colles. Any failure aborts the whole dataset:
a published exam timetable is never returned partially.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, time, tzinfo
from typing import List, Optional, Sequence
from zoneinfo import ZoneInfo

from colloscope.dates import project_date
from colloscope.model import CatalogEntry, ColleInstance, ColloscopeGrid, Group
from colloscope.parse import parse_catalog, parse_grid, parse_weeks
from colloscope.registry import InstructorRegistry

logger = logging.getLogger(__name__)

DEFAULT_TIMEZONE = "Europe/Paris"


def build_instance(entry: CatalogEntry, week: int, day: date, tz: tzinfo) -> ColleInstance:
    """
    Binds a catalog entry to a concrete date (zero minutes and seconds).
    """
    return ColleInstance(
        colle_id=entry.colle_id,
        instructor=entry.instructor,
        room=entry.room,
        start=datetime.combine(day, time(entry.start_hour), tzinfo=tz),
        end=datetime.combine(day, time(entry.end_hour), tzinfo=tz),
        week=week,
    )


def resolve_group(
    group_id: int,
    grid: ColloscopeGrid,
    anchors: Sequence[date],
    tz: tzinfo,
) -> Group:
    """
    Resolves one grid row into a Group whose instances are sorted by start.
    """
    instances: List[ColleInstance] = []

    for weeks, entries in zip(grid.columns, grid.cells[group_id - 1]):
        for week in weeks:
            for entry in entries:
                day = project_date(anchors, week, entry.weekday)
                instances.append(build_instance(entry, week, day, tz))

    # sorted() is stable: equal starts keep grid order
    instances = sorted(instances, key=lambda inst: inst.start)
    return Group(group_id=group_id, instances=tuple(instances))


def resolve_grid(grid: ColloscopeGrid, anchors: Sequence[date], tz: tzinfo) -> List[Group]:
    return [resolve_group(group_id, grid, anchors, tz) for group_id in range(1, grid.group_count + 1)]


def resolve_dataset(
    catalog_text: str,
    weeks_text: str,
    grid_text: str,
    tz: Optional[tzinfo] = None,
    registry: Optional[InstructorRegistry] = None,
) -> List[Group]:
    """
    Parses the three tables and resolves every group.

    A fresh InstructorRegistry is used unless one is given, so two datasets
    never share instructor identities. Raises a ParseError subclass on any
    malformed input.
    """
    tz = tz if tz is not None else ZoneInfo(DEFAULT_TIMEZONE)
    registry = registry if registry is not None else InstructorRegistry()

    catalog = parse_catalog(catalog_text, registry)
    anchors = parse_weeks(weeks_text)
    grid = parse_grid(grid_text, catalog)

    groups = resolve_grid(grid, anchors, tz)
    logger.debug(
        "Resolved %d groups, %d colles in total",
        len(groups),
        sum(len(g.instances) for g in groups),
    )
    return groups


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------


def next_instances(group: Group, now: datetime, limit: int) -> List[ColleInstance]:
    """
    First `limit` instances that have not ended yet (end > now), in order.

    Returns fewer when fewer qualify; `now` must be timezone-aware.
    """
    if limit <= 0:
        return []

    upcoming = [inst for inst in group.instances if inst.end > now]
    return upcoming[:limit]
