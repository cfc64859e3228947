"""
Central data model definitions used across the project.

This module defines the canonical structure of the objects produced by the
resolution pipeline so that:
- all modules share the same field names
- parsing, resolution, export and the CLI agree on one representation
- resolved data stays immutable once handed to a consumer
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, FrozenSet, Tuple

from colloscope.errors import GroupNotFoundError


# Subject letter -> explicit subject name. Closed set: anything else is an error.
SUBJECT_NAMES: Dict[str, str] = {
    "M": "Maths",
    "P": "Physique",
    "A": "Anglais",
}


@dataclass(frozen=True, order=True)
class ColleTypeId:
    """
    Identifies one catalog entry, e.g. M4 (Maths n°4).
    """

    subject: str
    number: int

    def compact(self) -> str:
        return f"{self.subject}{self.number}"

    def explicit(self) -> str:
        return f"{SUBJECT_NAMES[self.subject]} {self.number}"

    def __str__(self) -> str:
        return self.compact()


@dataclass(frozen=True, eq=False)
class Instructor:
    """
    One instructor, shared by every catalog entry that mentions the same name.

    Identity (not equality of names) is what the registry guarantees, so
    equality stays the default object identity.
    """

    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class CatalogEntry:
    """
    One line of the colle catalog: a template without a date.

    `weekday` follows datetime.date.weekday() (Monday == 0).
    """

    colle_id: ColleTypeId
    start_hour: int
    end_hour: int
    weekday: int
    room: str
    instructor: Instructor


@dataclass(frozen=True)
class ColloscopeGrid:
    """
    The parsed assignment matrix.

    columns[c] holds the week numbers of column c;
    cells[g][c] holds the catalog entries of group g + 1 in column c.
    """

    columns: Tuple[Tuple[int, ...], ...]
    cells: Tuple[Tuple[Tuple[CatalogEntry, ...], ...], ...]

    @property
    def group_count(self) -> int:
        return len(self.cells)


@dataclass(frozen=True)
class ColleInstance:
    """
    One concrete colle: a catalog entry bound to a week, with timezone-aware
    start and end datetimes.
    """

    colle_id: ColleTypeId
    instructor: Instructor
    room: str
    start: datetime
    end: datetime
    week: int

    def hours(self) -> str:
        """
        Hour range in the catalog notation, e.g. '8h-10h'.
        """
        return f"{self.start.hour}h-{self.end.hour}h"


@dataclass(frozen=True)
class Group:
    """
    One colle group and its resolved instances, sorted by start.
    """

    group_id: int
    instances: Tuple[ColleInstance, ...] = ()


@dataclass(frozen=True)
class Dataset:
    """
    The resolved state of one dataset folder (one guild in the chat bot).
    """

    dataset_id: str
    groups: Tuple[Group, ...]
    ghosts: FrozenSet[int] = field(default_factory=frozenset)

    def get_group(self, group_id: int) -> Group:
        for group in self.groups:
            if group.group_id == group_id:
                return group
        raise GroupNotFoundError(self.dataset_id, group_id)

    def is_ghost(self, group_id: int) -> bool:
        return group_id in self.ghosts
