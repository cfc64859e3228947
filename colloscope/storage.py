"""
Dataset folders and small persistent state.

Every dataset (one guild of the chat bot) lives in its own folder:

    <data_dir>/<dataset_id>/colles
    <data_dir>/<dataset_id>/weeks
    <data_dir>/<dataset_id>/colloscope
    <data_dir>/<dataset_id>/ghosts              (optional)
    <data_dir>/<dataset_id>/subscribers.json    (written by subscribe)
    <data_dir>/<dataset_id>/message_colles      (recurring message ids)
    <data_dir>/<dataset_id>/message_semaine_tp

Resolved datasets are cached per (data_dir, dataset_id); each one is parsed
with its own instructor registry, so nothing leaks between datasets.
"""

from __future__ import annotations

import enum
import json
import logging
import threading
from datetime import tzinfo
from pathlib import Path
from typing import Dict, Optional, Tuple

from colloscope.errors import DatasetNotFoundError, MessageRecordError, MissingTableError, ParseError
from colloscope.model import Dataset
from colloscope.parse import parse_ghost_groups
from colloscope.registry import InstructorRegistry
from colloscope.resolve import resolve_dataset

logger = logging.getLogger(__name__)

COLLE_LIST_FILE = "colles"
WEEKS_FILE = "weeks"
COLLOSCOPE_FILE = "colloscope"
GHOSTS_FILE = "ghosts"
SUBSCRIBERS_FILE = "subscribers.json"


class RecurringMessage(enum.Enum):
    """
    Messages the bot keeps editing in place; the value is the file name
    holding their (message id, channel id) pair.
    """

    SEMAINE_TP = "message_semaine_tp"
    COLLES = "message_colles"


# ---------------------------------------------------------------------------
# Dataset tables
# ---------------------------------------------------------------------------


def dataset_folder(dataset_id: str, data_dir: str | Path) -> Path:
    return Path(data_dir) / str(dataset_id)


def read_table(dataset_id: str, data_dir: str | Path, name: str) -> str:
    path = dataset_folder(dataset_id, data_dir) / name
    try:
        return path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise MissingTableError(dataset_id, name) from None


def load_dataset(dataset_id: str, data_dir: str | Path, tz: Optional[tzinfo] = None) -> Dataset:
    """
    Read and resolve the tables of one dataset folder.

    Raises DatasetNotFoundError when the folder does not exist, and lets any
    ParseError through: a dataset is resolved completely or not at all.
    """
    folder = dataset_folder(dataset_id, data_dir)
    if not folder.is_dir():
        raise DatasetNotFoundError(dataset_id)

    logger.info("Parsing data for dataset %s", dataset_id)

    try:
        groups = resolve_dataset(
            read_table(dataset_id, data_dir, COLLE_LIST_FILE),
            read_table(dataset_id, data_dir, WEEKS_FILE),
            read_table(dataset_id, data_dir, COLLOSCOPE_FILE),
            tz=tz,
            registry=InstructorRegistry(),
        )

        # No ghosts file simply means no ghost groups
        ghosts_path = folder / GHOSTS_FILE
        ghosts = parse_ghost_groups(ghosts_path.read_text(encoding="utf-8")) if ghosts_path.exists() else frozenset()
    except ParseError as exc:
        logger.warning("Dataset %s rejected: %s", dataset_id, exc)
        raise

    logger.info("Parsed data for dataset %s: %d groups", dataset_id, len(groups))
    return Dataset(dataset_id=str(dataset_id), groups=tuple(groups), ghosts=ghosts)


class DatasetCache:
    """
    Thread-safe cache of resolved datasets, keyed by (data_dir, dataset_id).
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._datasets: Dict[Tuple[Path, str], Dataset] = {}

    def get(self, dataset_id: str, data_dir: str | Path, tz: Optional[tzinfo] = None) -> Dataset:
        key = (Path(data_dir).resolve(), str(dataset_id))
        with self._lock:
            dataset = self._datasets.get(key)
            if dataset is None:
                dataset = load_dataset(dataset_id, data_dir, tz)
                self._datasets[key] = dataset
            return dataset

    def invalidate(self, dataset_id: str, data_dir: str | Path) -> None:
        with self._lock:
            self._datasets.pop((Path(data_dir).resolve(), str(dataset_id)), None)

    def clear(self) -> None:
        with self._lock:
            self._datasets.clear()


_cache = DatasetCache()


def get_dataset(dataset_id: str, data_dir: str | Path, tz: Optional[tzinfo] = None) -> Dataset:
    """
    Cached load_dataset(). Use clear_cache() to force a re-parse.
    """
    return _cache.get(dataset_id, data_dir, tz)


def clear_cache() -> None:
    _cache.clear()


# ---------------------------------------------------------------------------
# Subscribers
# ---------------------------------------------------------------------------


def load_subscribers(path: str | Path) -> Dict[str, int]:
    """
    Load the user id -> group id mapping from subscribers.json.

    Returns an empty mapping if the file does not exist or is invalid.
    """
    subscribers_path = Path(path)

    # First run: file does not exist yet -> nobody subscribed
    if not subscribers_path.exists():
        return {}

    try:
        data = json.loads(subscribers_path.read_text(encoding="utf-8"))
        raw = data.get("subscribers", {})
        if not isinstance(raw, dict):
            return {}
        out: Dict[str, int] = {}
        for user_id, entry in raw.items():
            group_id = entry.get("group_id") if isinstance(entry, dict) else None
            # bool is an int subclass; reject it explicitly
            if isinstance(group_id, int) and not isinstance(group_id, bool):
                out[str(user_id)] = group_id
        return out
    except (OSError, json.JSONDecodeError, UnicodeDecodeError, AttributeError):
        logger.warning("Ignoring unreadable subscribers file %s", subscribers_path)
        return {}


def save_subscribers(subscribers: Dict[str, int], path: str | Path) -> None:
    """
    Save the user id -> group id mapping. Creates parent directories if needed.
    """
    subscribers_path = Path(path)
    subscribers_path.parent.mkdir(parents=True, exist_ok=True)

    payload = {"subscribers": {str(uid): {"group_id": gid} for uid, gid in sorted(subscribers.items())}}
    subscribers_path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")


def subscribers_path(dataset_id: str, data_dir: str | Path) -> Path:
    return dataset_folder(dataset_id, data_dir) / SUBSCRIBERS_FILE


# ---------------------------------------------------------------------------
# Recurring messages
# ---------------------------------------------------------------------------


def read_message_record(folder: str | Path, kind: RecurringMessage) -> Tuple[int, int]:
    """
    Read the (message id, channel id) pair stored for a recurring message.
    """
    path = Path(folder) / kind.value
    try:
        lines = path.read_text(encoding="utf-8").splitlines()
    except FileNotFoundError:
        raise MessageRecordError(f"no {kind.value} record in {folder}") from None

    try:
        return int(lines[0]), int(lines[1])
    except (IndexError, ValueError):
        raise MessageRecordError(f"{path} must hold a message id and a channel id") from None


def write_message_record(folder: str | Path, kind: RecurringMessage, message_id: int, channel_id: int) -> None:
    path = Path(folder) / kind.value
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(f"{message_id}\n{channel_id}", encoding="utf-8")
