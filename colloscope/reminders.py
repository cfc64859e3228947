"""
Subscriber reminders.

A subscriber follows one group. Shortly before that group's next colle of a
given subject (English by default: students must bring their colle booklet),
they get a reminder. Deciding *when* to check is up to the caller.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Dict, List, Optional, Tuple

from colloscope.board import format_instance
from colloscope.errors import GroupNotFoundError
from colloscope.model import ColleInstance, Dataset, Group
from colloscope.resolve import next_instances


def due_reminder(
    group: Group,
    now: datetime,
    subject: str = "A",
    window_hours: int = 30,
    lookahead: int = 4,
) -> Optional[ColleInstance]:
    """
    The colle a subscriber of `group` should be reminded of, if any.

    Only the next `lookahead` colles are considered; the first one of
    `subject` is due when it starts less than `window_hours` from now.
    """
    for instance in next_instances(group, now, lookahead):
        if instance.colle_id.subject == subject:
            if instance.start - now < timedelta(hours=window_hours):
                return instance
            return None
    return None


def reminder_text(user: str, instance: ColleInstance) -> str:
    return f"{user}, n'oublie pas ton carnet de colle pour ta colle {format_instance(instance)}"


def collect_reminders(
    dataset: Dataset,
    subscribers: Dict[str, int],
    now: datetime,
    subject: str = "A",
    window_hours: int = 30,
    lookahead: int = 4,
) -> List[Tuple[str, ColleInstance]]:
    """
    (user id, colle) pairs for every subscriber currently due a reminder.

    Subscribers of a group that no longer exists are skipped.
    """
    due: List[Tuple[str, ColleInstance]] = []
    for user_id, group_id in sorted(subscribers.items()):
        try:
            group = dataset.get_group(group_id)
        except GroupNotFoundError:
            continue
        instance = due_reminder(group, now, subject, window_hours, lookahead)
        if instance is not None:
            due.append((user_id, instance))
    return due
