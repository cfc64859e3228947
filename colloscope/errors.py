"""
Exceptions raised by the resolution pipeline.

Every parse failure is a ParseError subclass carrying the offending line
number (1-based, None when not tied to a line) and token. Any of them aborts
the resolution of the whole dataset: no partial schedule is ever returned.
"""

from __future__ import annotations

from typing import Optional


class ParseError(ValueError):
    """
    Base class for malformed table content.
    """

    kind = "parse error"

    def __init__(self, message: str, line: Optional[int] = None, token: Optional[str] = None) -> None:
        self.message = message
        self.line = line
        self.token = token
        super().__init__(self._render())

    def _render(self) -> str:
        where = f"line {self.line}: " if self.line is not None else ""
        what = f" ({self.token!r})" if self.token is not None else ""
        return f"{self.kind}: {where}{self.message}{what}"


class IdParseError(ParseError):
    kind = "invalid colle id"


class CatalogLineError(ParseError):
    kind = "invalid catalog line"


class DateParseError(ParseError):
    kind = "invalid week date"


class GridShapeError(ParseError):
    kind = "invalid colloscope grid"


class UnknownColleIdError(ParseError):
    kind = "unknown colle id"


class WeekRangeError(ParseError):
    kind = "week out of range"


class GhostListError(ParseError):
    kind = "invalid ghost group"


class ColloscopeError(Exception):
    """
    Base class for lookup and persistence failures outside of parsing.
    """


class DatasetNotFoundError(ColloscopeError):
    def __init__(self, dataset_id: str) -> None:
        self.dataset_id = dataset_id
        super().__init__(f"no data found for dataset {dataset_id}")


class MissingTableError(ColloscopeError):
    def __init__(self, dataset_id: str, table: str) -> None:
        self.dataset_id = dataset_id
        self.table = table
        super().__init__(f"dataset {dataset_id} has no {table!r} table")


class GroupNotFoundError(ColloscopeError):
    def __init__(self, dataset_id: str, group_id: int) -> None:
        self.dataset_id = dataset_id
        self.group_id = group_id
        super().__init__(f"group {group_id} does not exist in dataset {dataset_id}")


class MessageRecordError(ColloscopeError):
    """
    A recurring message file does not hold a (message id, channel id) pair.
    """
