"""Load task trees from YAML files."""
from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Any, List, Mapping

import yaml

from nagger.tasks.task import DEFAULT_TASK_NAME, Task, TaskImportance, TaskStatus


def load_tasks(path: Path) -> List[Task]:
    """Read a YAML list of task mappings.

    Each entry may contain ``name``, ``deadline`` (ISO-8601), ``importance``
    (``casual``/``normal``/``important``/``critical``), ``status``
    (``in_progress``/``on_hold``/``completed``), ``notes`` as a list of
    ``{text, percent}`` mappings and nested ``subtasks``.
    """

    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle)
    if data is None:
        return []
    if not isinstance(data, list):
        raise ValueError("task file root must be a list")
    return [_build_task(entry) for entry in data]


def _build_task(entry: Any) -> Task:
    if not isinstance(entry, Mapping):
        raise ValueError(f"task entry must be a mapping, got {entry!r}")

    task = Task(
        name=str(entry.get("name", DEFAULT_TASK_NAME)),
        deadline=_parse_deadline(entry.get("deadline")),
        importance=_parse_importance(entry.get("importance", "normal")),
        status=_parse_status(entry.get("status", "in_progress")),
        subtasks=[_build_task(sub) for sub in entry.get("subtasks") or []],
    )
    for note in entry.get("notes") or []:
        if isinstance(note, str):
            task.add_note(note)
            continue
        if not isinstance(note, Mapping):
            raise ValueError(f"note must be a string or mapping, got {note!r}")
        percent = note.get("percent")
        task.add_note(str(note.get("text", "")), int(percent) if percent is not None else None)
    return task


def _parse_deadline(value: Any):
    if value is None:
        return None
    if isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError as exc:
        raise ValueError(f"invalid deadline: {value!r}") from exc


def _parse_importance(value: Any) -> TaskImportance:
    try:
        return TaskImportance[str(value).upper()]
    except KeyError as exc:
        raise ValueError(f"unknown importance: {value!r}") from exc


def _parse_status(value: Any) -> TaskStatus:
    try:
        return TaskStatus(str(value).lower())
    except ValueError as exc:
        raise ValueError(f"unknown status: {value!r}") from exc
