"""
CLI (Command Line Interface).

Terminal commands over one dataset folder, e.g.:

    colloscope check <dataset>
    colloscope next <dataset> <group>
    colloscope board <dataset>
    colloscope export <dataset> <group> --out colles.ics
    colloscope semaine-tp
    colloscope subscribe <dataset> <user> <group>
    colloscope unsubscribe <dataset> <user>
    colloscope reminders <dataset>

Note:
- Datasets live in <data-dir>/<dataset>/ (see colloscope/storage.py)
- Any table error aborts the command with exit code 1
"""

from __future__ import annotations

import argparse
import logging
from datetime import datetime, tzinfo
from pathlib import Path

from rich import box
from rich.console import Console
from rich.table import Table

from colloscope.board import group_title, lab_week_text, next_colles_board
from colloscope.config import LOG_LEVELS, Settings, get_settings
from colloscope.errors import ColloscopeError, ParseError
from colloscope.export_ics import calendar_filename, export_calendar_to_file
from colloscope.logging_setup import setup_logging
from colloscope.reminders import collect_reminders, reminder_text
from colloscope.resolve import next_instances
from colloscope.storage import get_dataset, load_subscribers, save_subscribers, subscribers_path

logger = logging.getLogger(__name__)

console = Console()


def _cmd_check(args: argparse.Namespace, data_dir: Path, tz: tzinfo) -> int:
    """
    Parse and resolve a dataset, report what was found.
    """
    dataset = get_dataset(args.dataset, data_dir, tz)

    table = Table(title=f"Dataset {dataset.dataset_id}", box=box.SIMPLE)
    table.add_column("Groupe")
    table.add_column("Colles", justify="right")
    table.add_column("Première")
    table.add_column("Dernière")

    for group in dataset.groups:
        first = group.instances[0].start.strftime("%d/%m/%Y") if group.instances else "-"
        last = group.instances[-1].start.strftime("%d/%m/%Y") if group.instances else "-"
        table.add_row(group_title(dataset, group.group_id), str(len(group.instances)), first, last)

    console.print(table)
    console.print(f"OK: {len(dataset.groups)} groups, ghosts: {sorted(dataset.ghosts) or 'none'}")
    return 0


def _cmd_next(args: argparse.Namespace, data_dir: Path, tz: tzinfo) -> int:
    """
    Print the next colles of one group.
    """
    if args.limit < 1:
        console.print("Please provide a positive --limit.")
        return 1

    dataset = get_dataset(args.dataset, data_dir, tz)
    group = dataset.get_group(args.group)
    upcoming = next_instances(group, datetime.now(tz), args.limit)

    if not upcoming:
        console.print(f"No upcoming colles for group {group.group_id}.")
        return 0

    table = Table(title=f"Prochaines colles pour le groupe {group.group_id}", box=box.SIMPLE)
    table.add_column("Colle")
    table.add_column("Date")
    table.add_column("Horaire")
    table.add_column("Colleur")
    table.add_column("Salle")

    for inst in upcoming:
        table.add_row(
            inst.colle_id.explicit(),
            inst.start.strftime("%d/%m/%Y"),
            inst.hours(),
            inst.instructor.name,
            inst.room,
        )

    console.print(table)
    return 0


def _cmd_board(args: argparse.Namespace, data_dir: Path, tz: tzinfo) -> int:
    dataset = get_dataset(args.dataset, data_dir, tz)
    console.print(next_colles_board(dataset, datetime.now(tz), args.limit), markup=False, highlight=False)
    return 0


def _cmd_export(args: argparse.Namespace, data_dir: Path, tz: tzinfo) -> int:
    """
    Export one group's colles into an iCalendar (.ics) file.
    """
    dataset = get_dataset(args.dataset, data_dir, tz)
    group = dataset.get_group(args.group)

    out_path = args.out or calendar_filename(group.group_id)
    n = export_calendar_to_file(group, out_path)
    console.print(f"Exported {n} colles to: {out_path}", markup=False)
    return 0


def _cmd_semaine_tp(args: argparse.Namespace, data_dir: Path, tz: tzinfo) -> int:
    console.print(lab_week_text(datetime.now(tz).date()))
    return 0


def _cmd_subscribe(args: argparse.Namespace, data_dir: Path, tz: tzinfo) -> int:
    """
    Subscribe a user to the reminders of one group.
    """
    user = (args.user or "").strip()
    if not user:
        console.print("Please provide a user id.")
        return 1

    # Validate the group against the resolved data before persisting
    dataset = get_dataset(args.dataset, data_dir, tz)
    group = dataset.get_group(args.group)

    path = subscribers_path(args.dataset, data_dir)
    subscribers = load_subscribers(path)
    subscribers[user] = group.group_id
    save_subscribers(subscribers, path)

    console.print(f"Subscribed: {user} -> group {group.group_id} (subscribers: {len(subscribers)})", markup=False)
    return 0


def _cmd_unsubscribe(args: argparse.Namespace, data_dir: Path, tz: tzinfo) -> int:
    user = (args.user or "").strip()
    path = subscribers_path(args.dataset, data_dir)
    subscribers = load_subscribers(path)

    if user not in subscribers:
        console.print(f"Not subscribed: {user}", markup=False)
        return 0

    del subscribers[user]
    save_subscribers(subscribers, path)
    console.print(f"Unsubscribed: {user} (subscribers: {len(subscribers)})", markup=False)
    return 0


def _cmd_reminders(args: argparse.Namespace, data_dir: Path, tz: tzinfo, settings: Settings) -> int:
    """
    Print the reminders due right now, one per line.
    """
    dataset = get_dataset(args.dataset, data_dir, tz)
    subscribers = load_subscribers(subscribers_path(args.dataset, data_dir))

    due = collect_reminders(
        dataset,
        subscribers,
        datetime.now(tz),
        subject=settings.REMINDER_SUBJECT,
        window_hours=settings.REMINDER_WINDOW_HOURS,
        lookahead=settings.REMINDER_LOOKAHEAD,
    )
    if not due:
        console.print("No reminders due.")
        return 0

    for user, inst in due:
        console.print(reminder_text(user, inst), markup=False, highlight=False)
    logger.info("%d reminders due for dataset %s", len(due), dataset.dataset_id)
    return 0


def build_parser() -> argparse.ArgumentParser:
    """
    Build the argparse CLI parser with sub-commands.
    """
    parser = argparse.ArgumentParser(prog="colloscope", description="Colloscope CLI")
    parser.add_argument("--data-dir", type=Path, default=None, help="Folder holding one sub-folder per dataset")
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        default=None,
        help="Logging level (default from settings)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p_check = sub.add_parser("check", help="Parse and resolve a dataset")
    p_check.add_argument("dataset", type=str, help="Dataset folder name")

    p_next = sub.add_parser("next", help="Show the next colles of a group")
    p_next.add_argument("dataset", type=str, help="Dataset folder name")
    p_next.add_argument("group", type=int, help="Group id (e.g. 3)")
    p_next.add_argument("--limit", type=int, default=5, help="Number of colles to show")

    p_board = sub.add_parser("board", help="Show the next colles of every group")
    p_board.add_argument("dataset", type=str, help="Dataset folder name")
    p_board.add_argument("--limit", type=int, default=2, help="Colles per group")

    p_export = sub.add_parser("export", help="Export a group's colles to .ics")
    p_export.add_argument("dataset", type=str, help="Dataset folder name")
    p_export.add_argument("group", type=int, help="Group id (e.g. 3)")
    p_export.add_argument("--out", type=str, default=None, help="Output file path (e.g. colles.ics)")

    sub.add_parser("semaine-tp", help="Show which lab rotation starts next Wednesday")

    p_subscribe = sub.add_parser("subscribe", help="Subscribe a user to a group's reminders")
    p_subscribe.add_argument("dataset", type=str, help="Dataset folder name")
    p_subscribe.add_argument("user", type=str, help="User id")
    p_subscribe.add_argument("group", type=int, help="Group id (e.g. 3)")

    p_unsubscribe = sub.add_parser("unsubscribe", help="Remove a user's subscription")
    p_unsubscribe.add_argument("dataset", type=str, help="Dataset folder name")
    p_unsubscribe.add_argument("user", type=str, help="User id")

    p_reminders = sub.add_parser("reminders", help="Show the reminders due now")
    p_reminders.add_argument("dataset", type=str, help="Dataset folder name")

    return parser


def main(argv: list[str] | None = None) -> None:
    """
    CLI entry point. Parses args, dispatches to command handlers,
    and exits via SystemExit with a return code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    settings = get_settings()
    setup_logging((args.log_level or settings.LOG_LEVEL).upper())

    data_dir = args.data_dir if args.data_dir is not None else settings.DATA_DIR
    tz = settings.timezone

    handlers = {
        "check": _cmd_check,
        "next": _cmd_next,
        "board": _cmd_board,
        "export": _cmd_export,
        "semaine-tp": _cmd_semaine_tp,
        "subscribe": _cmd_subscribe,
        "unsubscribe": _cmd_unsubscribe,
    }

    try:
        if args.command == "reminders":
            raise SystemExit(_cmd_reminders(args, data_dir, tz, settings))
        if args.command in handlers:
            raise SystemExit(handlers[args.command](args, data_dir, tz))
    except (ParseError, ColloscopeError) as exc:
        console.print(f"Error: {exc}", markup=False, highlight=False)
        raise SystemExit(1)

    raise SystemExit(2)
