"""
iCalendar (.ics) export.

We convert a group's colles into a calendar file that can be imported into:
- Google Calendar
- Outlook
- Apple Calendar
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from pathlib import Path

from colloscope.model import ColleInstance, Group

ICS_CATEGORY = "Colles"


def _ics_escape(text: str) -> str:
    """
    Escape text for ICS fields (very small subset, sufficient for our use).
    """
    return (
        text.replace("\\", "\\\\").replace("\r\n", "\\n").replace("\n", "\\n").replace(";", "\\;").replace(",", "\\,")
    )


def _ics_fold(line: str, limit: int = 75) -> str:
    """
    Fold a content line into chunks of at most `limit` UTF-8 octets
    (RFC 5545 §3.1). Continuation lines start with one space, which counts
    toward their limit. Multi-byte characters are never split.
    """
    if len(line.encode("utf-8")) <= limit:
        return line

    chunks: list[str] = []
    current = ""
    size = 0
    for ch in line:
        width = len(ch.encode("utf-8"))
        # continuation chunks lose one octet to the leading space
        room = limit if not chunks else limit - 1
        if size + width > room:
            chunks.append(current)
            current, size = "", 0
        current += ch
        size += width
    chunks.append(current)

    return "\r\n ".join(chunks)


def _dt_utc(dt: datetime) -> str:
    """
    Convert an aware datetime to the ICS UTC basic form 'YYYYMMDDTHHMMSSZ'.
    """
    return dt.astimezone(timezone.utc).strftime("%Y%m%dT%H%M%SZ")


def summary(instance: ColleInstance) -> str:
    return f"Colle {instance.colle_id.explicit()} avec {instance.instructor.name}"


def description(instance: ColleInstance) -> str:
    return f"{summary(instance)} en salle {instance.room} de {instance.hours()}"


def calendar_filename(group_id: int) -> str:
    return f"Calendrier de colles groupe {group_id}.ics"


def _event_lines(instance: ColleInstance, dtstamp: str) -> list[str]:
    return [
        "BEGIN:VEVENT",
        f"UID:{uuid.uuid4()}",
        f"DTSTAMP:{dtstamp}",
        f"DTSTART:{_dt_utc(instance.start)}",
        f"DTEND:{_dt_utc(instance.end)}",
        f"ORGANIZER:{_ics_escape(instance.instructor.name)}",
        f"CATEGORIES:{ICS_CATEGORY}",
        f"SUMMARY:{_ics_escape(summary(instance))}",
        f"DESCRIPTION:{_ics_escape(description(instance))}",
        "END:VEVENT",
    ]


def export_calendar(group: Group) -> str:
    """
    Serialize every colle of the group into one VCALENDAR document.
    """
    lines: list[str] = []
    lines.append("BEGIN:VCALENDAR")
    lines.append("VERSION:2.0")
    lines.append(f"PRODID:-//Colloscope//Calendrier de colle groupe {group.group_id}//FR")
    lines.append("CALSCALE:GREGORIAN")

    dtstamp = _dt_utc(datetime.now(timezone.utc))
    for instance in group.instances:
        lines.extend(_event_lines(instance, dtstamp))

    lines.append("END:VCALENDAR")

    # ICS standard uses CRLF and folds long lines
    return "\r\n".join(_ics_fold(line) for line in lines) + "\r\n"


def export_calendar_to_file(group: Group, out_path: str | Path) -> int:
    """
    Write the group's calendar to an .ics file. Returns number of exported events.
    """
    out = Path(out_path)
    out.parent.mkdir(parents=True, exist_ok=True)

    # newline="" keeps the CRLF line endings untouched
    with out.open("w", encoding="utf-8", newline="") as fh:
        fh.write(export_calendar(group))

    return len(group.instances)
