"""
Plain-text renderings shared by the CLI and any chat front end.
"""

from __future__ import annotations

from datetime import date, datetime

from colloscope.dates import MONTH_SHORT_NAMES, next_occurrence, short_french_date
from colloscope.model import ColleInstance, Dataset
from colloscope.resolve import next_instances

WEDNESDAY = 2


def format_instance(instance: ColleInstance, explicit: bool = True) -> str:
    """
    e.g. 'Maths 4: Lundi 2 Sep 8h-10h avec Dupont en 207'.
    """
    colle = instance.colle_id.explicit() if explicit else instance.colle_id.compact()
    return (
        f"{colle}: {short_french_date(instance.start)} "
        f"{instance.hours()} avec {instance.instructor.name} en {instance.room}"
    )


def group_title(dataset: Dataset, group_id: int) -> str:
    ghost = " (fantôme 👻)" if dataset.is_ghost(group_id) else ""
    return f"Groupe {group_id}{ghost}"


def next_colles_board(dataset: Dataset, now: datetime, limit: int = 2) -> str:
    """
    The "next colles" board: every group with its next `limit` colles.
    """
    parts = ["# Prochaines colles: "]
    for group in dataset.groups:
        parts.append(f"\n### {group_title(dataset, group.group_id)} ")
        for instance in next_instances(group, now, limit):
            parts.append(f"\n- {format_instance(instance, explicit=False)}")
    return "".join(parts)


def lab_week_text(today: date) -> str:
    """
    Which half of the class starts with maths tutorials next Wednesday.

    Odd ISO weeks: group 1 starts with maths, group 2 with physics labs.
    """
    wednesday = next_occurrence(today, WEDNESDAY)
    math, physics = "td maths", "tp physique"

    if wednesday.isocalendar()[1] % 2 == 1:
        first, second = math, physics
    else:
        first, second = physics, math

    return (
        f"Mercredi prochain ({wednesday.day} {MONTH_SHORT_NAMES[wednesday.month - 1]}) "
        f"le groupe 1 commence par {first} et le groupe 2 par {second}"
    )
