"""
Parsing (flat text tables -> structured objects).

- Parses the colle catalog (one line per colle type)
- Parses the week anchor table (one date per week)
- Parses the colloscope grid (one line per group) against the catalog
- Parses the ghost group list

Important rules:
- Every failure raises a ParseError subclass with the line number
- Nothing is skipped: one bad line aborts the whole table
"""

from __future__ import annotations

import logging
import re
from datetime import date, datetime
from typing import Dict, FrozenSet, List, Optional, Tuple

from colloscope.dates import WEEKDAY_CODES
from colloscope.errors import (
    CatalogLineError,
    DateParseError,
    GhostListError,
    GridShapeError,
    IdParseError,
    UnknownColleIdError,
)
from colloscope.model import SUBJECT_NAMES, CatalogEntry, ColleTypeId, ColloscopeGrid
from colloscope.registry import InstructorRegistry

logger = logging.getLogger(__name__)

Catalog = Dict[ColleTypeId, CatalogEntry]

_COLLE_ID_RE = re.compile(r"^([A-Za-z])(\d+)$")
_HOUR_RE = re.compile(r"^(\d+)\D*$")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def parse_colle_id(token: str, line: Optional[int] = None) -> ColleTypeId:
    """
    Parses a compact colle id such as 'M4'.
    """
    match = _COLLE_ID_RE.match(token)
    if not match:
        raise IdParseError("expected a subject letter followed by a number", line, token)

    subject, number = match.group(1), int(match.group(2))
    if subject not in SUBJECT_NAMES:
        raise IdParseError(f"unknown subject {subject!r}", line, token)

    return ColleTypeId(subject, number)


def _try_parse_hours(token: str) -> Optional[Tuple[int, int]]:
    # '8h-10h' -> (8, 10); None when the token is not an hour range
    parts = token.split("-")
    if len(parts) != 2:
        return None

    hours: List[int] = []
    for part in parts:
        match = _HOUR_RE.match(part)
        if not match:
            return None
        hours.append(int(match.group(1)))

    return hours[0], hours[1]


def parse_hour_range(token: str, line: Optional[int] = None) -> Tuple[int, int]:
    """
    Parses an hour range such as '8h-10h' into (start_hour, end_hour).
    """
    hours = _try_parse_hours(token)
    if hours is None:
        raise CatalogLineError("expected an hour range like 8h-10h", line, token)

    start, end = hours
    # 23 is the last hour a datetime can carry
    if not (0 <= start < end <= 23):
        raise CatalogLineError("hour range must satisfy 0 <= start < end <= 23", line, token)

    return start, end


def _split_room(raw: str, line: Optional[int]) -> Tuple[str, str]:
    """
    Splits '... (207)' into ('...', '207'). The room must end the line.
    """
    open_paren = raw.rfind("(")
    if open_paren == -1 or not raw.endswith(")"):
        raise CatalogLineError("missing room annotation '(<room>)' at end of line", line, raw)

    room = raw[open_paren + 1 : -1].strip()
    if not room or ")" in room:
        raise CatalogLineError("bad room annotation", line, raw[open_paren:])

    return raw[:open_paren].rstrip(), room


# ---------------------------------------------------------------------------
# Catalog parsing (CORE LOGIC)
# ---------------------------------------------------------------------------


def parse_catalog_line(
    raw_line: str,
    registry: InstructorRegistry,
    line: Optional[int] = None,
) -> CatalogEntry:
    """
    Parses exactly one catalog line into one CatalogEntry.

    Canonical layout:  M4 Jean Dupont Lu 8h-10h (207)
    Also accepted:     M4 Lu 8h-10h Jean Dupont (207)
    """
    raw = raw_line.strip()
    remainder, room = _split_room(raw, line)

    words = remainder.split()
    if len(words) < 4:
        raise CatalogLineError("expected id, instructor, weekday and hour range", line, raw)

    colle_id = parse_colle_id(words[0], line)
    rest = words[1:]

    # The hour range closes the line in the canonical layout; otherwise the
    # weekday and hour range directly follow the id.
    if _try_parse_hours(rest[-1]) is not None:
        weekday_code, hours_token, name_words = rest[-2], rest[-1], rest[:-2]
    elif _try_parse_hours(rest[1]) is not None:
        weekday_code, hours_token, name_words = rest[0], rest[1], rest[2:]
    else:
        raise CatalogLineError("missing hour range", line, raw)

    start, end = parse_hour_range(hours_token, line)

    weekday = WEEKDAY_CODES.get(weekday_code)
    if weekday is None:
        raise CatalogLineError(f"unknown weekday code (expected one of {', '.join(WEEKDAY_CODES)})", line, weekday_code)

    if not name_words:
        raise CatalogLineError("missing instructor name", line, raw)

    instructor = registry.get_or_create(" ".join(name_words))

    return CatalogEntry(
        colle_id=colle_id,
        start_hour=start,
        end_hour=end,
        weekday=weekday,
        room=room,
        instructor=instructor,
    )


def parse_catalog(text: str, registry: InstructorRegistry) -> Catalog:
    """
    Parses the whole catalog table. Blank lines are ignored.
    """
    catalog: Catalog = {}

    for line_no, raw_line in enumerate(text.splitlines(), start=1):
        if not raw_line.strip():
            continue

        entry = parse_catalog_line(raw_line, registry, line_no)
        if entry.colle_id in catalog:
            raise CatalogLineError("duplicate colle id", line_no, entry.colle_id.compact())

        catalog[entry.colle_id] = entry

    logger.debug("Parsed %d catalog entries, %d instructors", len(catalog), len(registry))
    return catalog


# ---------------------------------------------------------------------------
# Week anchors
# ---------------------------------------------------------------------------


def parse_anchor_date(token: str, line: Optional[int] = None) -> date:
    """
    Parses 'day-month-year' without required zero padding, e.g. '5-9-2024'.
    """
    try:
        return datetime.strptime(token, "%d-%m-%Y").date()
    except ValueError:
        raise DateParseError("expected a day-month-year date", line, token) from None


def parse_weeks(text: str) -> List[date]:
    """
    Parses the week anchor table. Line N is week N; only the last token counts.
    """
    lines = text.splitlines()

    # Trailing blank lines do not define weeks
    while lines and not lines[-1].strip():
        lines.pop()

    anchors: List[date] = []
    for line_no, raw_line in enumerate(lines, start=1):
        words = raw_line.split()
        if not words:
            raise DateParseError("blank line inside the week table", line_no)
        anchors.append(parse_anchor_date(words[-1], line_no))

    logger.debug("Parsed %d week anchors", len(anchors))
    return anchors


# ---------------------------------------------------------------------------
# Colloscope grid
# ---------------------------------------------------------------------------


def _parse_column(token: str, line: int) -> Tuple[int, ...]:
    # '1-2' -> (1, 2)
    weeks: List[int] = []
    for part in token.split("-"):
        if not part.isdecimal():
            raise GridShapeError("column must list week numbers joined by '-'", line, token)
        weeks.append(int(part))
    return tuple(weeks)


def parse_grid(text: str, catalog: Catalog) -> ColloscopeGrid:
    """
    Parses the colloscope grid. The first non-blank line defines the columns,
    every following non-blank line is one group (ids from 1, in file order).
    """
    rows = [(line_no, raw.split()) for line_no, raw in enumerate(text.splitlines(), start=1) if raw.strip()]
    if not rows:
        raise GridShapeError("empty grid: missing the column header line")

    header_line, header = rows[0]
    columns = tuple(_parse_column(token, header_line) for token in header)

    cells: List[Tuple[Tuple[CatalogEntry, ...], ...]] = []
    for line_no, group_cells in rows[1:]:
        if len(group_cells) != len(columns):
            raise GridShapeError(
                f"group row has {len(group_cells)} cells, header defines {len(columns)} columns",
                line_no,
            )

        row: List[Tuple[CatalogEntry, ...]] = []
        for cell in group_cells:
            entries: List[CatalogEntry] = []
            for token in cell.split("+"):
                colle_id = parse_colle_id(token, line_no)
                entry = catalog.get(colle_id)
                if entry is None:
                    raise UnknownColleIdError("grid references a colle missing from the catalog", line_no, token)
                entries.append(entry)
            row.append(tuple(entries))

        cells.append(tuple(row))

    logger.debug("Parsed grid: %d columns, %d groups", len(columns), len(cells))
    return ColloscopeGrid(columns=columns, cells=tuple(cells))


# ---------------------------------------------------------------------------
# Ghost groups
# ---------------------------------------------------------------------------


def parse_ghost_groups(text: str) -> FrozenSet[int]:
    """
    Parses the newline-delimited list of ghost group ids.
    """
    ghosts = set()
    for line_no, raw_line in enumerate(text.splitlines(), start=1):
        token = raw_line.strip()
        if not token:
            continue
        if not token.isdecimal() or int(token) < 1:
            raise GhostListError("expected a positive group id", line_no, token)
        ghosts.add(int(token))

    return frozenset(ghosts)
