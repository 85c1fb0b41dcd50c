"""Hierarchical tasks with a small status state machine."""
from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum, IntEnum
from typing import Iterator, List, Optional, Tuple

from nagger.tasks.progress import Completion, ProgressNote

DEFAULT_TASK_NAME = "new task..."


class TaskStatusError(RuntimeError):
    """Raised for a status transition the task does not allow."""


class TaskImportance(IntEnum):
    """Ordered from least to most urgent."""

    CASUAL = 0
    NORMAL = 1
    IMPORTANT = 2
    CRITICAL = 3


class TaskStatus(str, Enum):
    IN_PROGRESS = "in_progress"
    ON_HOLD = "on_hold"
    COMPLETED = "completed"


class TaskBuilder:
    """Fluent description of a task tree, turned into tasks by :meth:`build`."""

    def __init__(self) -> None:
        self.name: Optional[str] = None
        self.deadline: Optional[datetime] = None
        self.importance: Optional[TaskImportance] = None
        self.status: Optional[TaskStatus] = None
        self.subtasks: List[TaskBuilder] = []

    def with_name(self, value: str) -> "TaskBuilder":
        self.name = value
        return self

    def with_deadline(self, value: datetime) -> "TaskBuilder":
        self.deadline = value
        return self

    def with_importance(self, value: TaskImportance) -> "TaskBuilder":
        self.importance = value
        return self

    def with_status(self, value: TaskStatus) -> "TaskBuilder":
        self.status = value
        return self

    def add_subtask(self, value: "TaskBuilder") -> "TaskBuilder":
        self.subtasks.append(value)
        return self

    def build(self) -> "Task":
        return Task.from_builder(self)


@dataclass(slots=True, eq=False)
class Task:
    """A unit of work with an optional deadline, notes and nested subtasks."""

    name: str = DEFAULT_TASK_NAME
    deadline: Optional[datetime] = None
    importance: TaskImportance = TaskImportance.NORMAL
    status: TaskStatus = TaskStatus.IN_PROGRESS
    subtasks: List["Task"] = field(default_factory=list)
    notes: List[ProgressNote] = field(default_factory=list)
    id: uuid.UUID = field(default_factory=uuid.uuid4)

    @classmethod
    def from_builder(cls, builder: TaskBuilder) -> "Task":
        return cls(
            name=builder.name if builder.name is not None else DEFAULT_TASK_NAME,
            deadline=builder.deadline,
            importance=builder.importance or TaskImportance.NORMAL,
            status=builder.status or TaskStatus.IN_PROGRESS,
            subtasks=[cls.from_builder(sub) for sub in builder.subtasks],
        )

    # ------------------------------------------------------------------
    # Progress
    def completion(self) -> Completion:
        """Average of the notes' completion and every subtask's completion.

        A completed task always reports 100%.
        """

        if self.status is TaskStatus.COMPLETED:
            return Completion.full()
        total = self.completion_notes_only().value
        total += sum(subtask.completion().value for subtask in self.subtasks)
        return Completion(total // (len(self.subtasks) + 1))

    def completion_notes_only(self) -> Completion:
        result = Completion.zero()
        for note in self.notes:
            if note.completed is not None:
                result = result + note.completed
        return result

    def completion_breakdown(self) -> Tuple[int, List[Tuple[str, Completion]]]:
        """Return the divisor used by :meth:`completion` and its parts."""

        parts: List[Tuple[str, Completion]] = [("notes_only", self.completion_notes_only())]
        parts.extend((subtask.name, subtask.completion()) for subtask in self.subtasks)
        return len(self.subtasks) + 1, parts

    def add_note(self, note: str, percent: Optional[int] = None) -> None:
        if percent is None:
            self.notes.append(ProgressNote(note))
        else:
            self.notes.append(ProgressNote.with_completion(note, percent))

    def walk(self) -> Iterator["Task"]:
        """Yield this task and all nested subtasks depth-first."""

        yield self
        for subtask in self.subtasks:
            yield from subtask.walk()

    # ------------------------------------------------------------------
    # Status transitions
    def pause(self) -> None:
        if self.status is not TaskStatus.IN_PROGRESS:
            raise TaskStatusError(f"Task {self.name} is not currently in progress!")
        for subtask in self.subtasks:
            subtask.pause()
        self.status = TaskStatus.ON_HOLD

    def resume(self) -> None:
        if self.status is TaskStatus.IN_PROGRESS:
            return
        if self.status is TaskStatus.COMPLETED:
            raise TaskStatusError(f"Task {self.name} is already completed!")
        for subtask in self.subtasks:
            if subtask.status is not TaskStatus.COMPLETED:
                subtask.resume()
        self.status = TaskStatus.IN_PROGRESS

    def complete(self) -> None:
        if self.status is TaskStatus.COMPLETED:
            raise TaskStatusError(f"Task {self.name} is already complete!")
        for subtask in self.subtasks:
            if subtask.status is not TaskStatus.COMPLETED:
                subtask.complete()
        self.status = TaskStatus.COMPLETED

    def restart(self) -> None:
        """Reopen a completed task, keeping its notes but not their percentages."""

        if self.status is not TaskStatus.COMPLETED:
            raise TaskStatusError(f"Task {self.name} has not been completed yet!")
        for subtask in self.subtasks:
            subtask.restart()
        for note in self.notes:
            note.reset_completion()
        self.status = TaskStatus.IN_PROGRESS

    def reset(self) -> None:
        """Drop all notes and put the whole tree back in progress."""

        for subtask in self.subtasks:
            subtask.reset()
        self.notes.clear()
        self.status = TaskStatus.IN_PROGRESS

    # ------------------------------------------------------------------
    # Importance and deadline
    def change_importance(self, new: TaskImportance) -> Optional[TaskImportance]:
        """Set the importance; return the old value only if it changed."""

        if self.importance == new:
            return None
        old, self.importance = self.importance, new
        return old

    def change_deadline(self, deadline: datetime) -> Optional[datetime]:
        old, self.deadline = self.deadline, deadline
        return old

    def extend_deadline(self, delta: timedelta) -> Optional[datetime]:
        """Push the deadline back by ``delta``; no-op without a deadline."""

        if self.deadline is None:
            return None
        old, self.deadline = self.deadline, self.deadline + delta
        return old

    def remove_deadline(self) -> Optional[datetime]:
        old, self.deadline = self.deadline, None
        return old

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "name": self.name,
            "deadline": self.deadline.isoformat() if self.deadline else None,
            "importance": self.importance.name.lower(),
            "status": self.status.value,
            "completion": self.completion().value,
            "notes": [note.to_dict() for note in self.notes],
            "subtasks": [subtask.to_dict() for subtask in self.subtasks],
        }
