"""Task tree and its mapping onto scheduler alarms."""

from .deadlines import DeadlineTracker, alarm_for
from .loader import load_tasks
from .progress import Completion, ProgressNote
from .task import Task, TaskBuilder, TaskImportance, TaskStatus, TaskStatusError

__all__ = [
    "Completion",
    "DeadlineTracker",
    "ProgressNote",
    "Task",
    "TaskBuilder",
    "TaskImportance",
    "TaskStatus",
    "TaskStatusError",
    "alarm_for",
    "load_tasks",
]
