"""
Instructor identity store.

One registry belongs to one dataset: parsing two datasets with two registries
never shares Instructor objects between them. Within a registry, the same
display name (exact string match) always yields the same Instructor.
"""

from __future__ import annotations

from typing import Dict, Iterator

from colloscope.model import Instructor


class InstructorRegistry:
    def __init__(self) -> None:
        self._by_name: Dict[str, Instructor] = {}

    def get_or_create(self, name: str) -> Instructor:
        """
        Return the Instructor registered under `name`, creating it on first use.
        """
        instructor = self._by_name.get(name)
        if instructor is None:
            instructor = Instructor(name)
            self._by_name[name] = instructor
        return instructor

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def __len__(self) -> int:
        return len(self._by_name)

    def __iter__(self) -> Iterator[Instructor]:
        return iter(self._by_name.values())
