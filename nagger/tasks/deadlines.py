"""Keep scheduler alarms in step with task deadlines."""
from __future__ import annotations

from typing import List, Optional, Protocol

from nagger.alarms import Alarm
from nagger.tasks.task import Task, TaskStatus


class AlarmSink(Protocol):
    """The part of :class:`nagger.services.Scheduler` the tracker relies on."""

    def add_alarm(self, alarm: Alarm) -> None:
        ...

    def del_alarm(self, name: str) -> Optional[Alarm]:
        ...


def alarm_for(task: Task) -> Optional[Alarm]:
    """Alarm for ``task``'s deadline, named after the task id."""

    if task.deadline is None or task.status is TaskStatus.COMPLETED:
        return None
    return Alarm(name=str(task.id), due_time=task.deadline)


class DeadlineTracker:
    """Translate task deadline changes into ``add_alarm``/``del_alarm`` calls.

    The tracker only knows tasks and the scheduler's public methods; fired
    alarms carry the task id as their name so consumers can map them back.
    """

    def __init__(self, scheduler: AlarmSink) -> None:
        self._scheduler = scheduler

    def track(self, task: Task) -> List[Alarm]:
        """Schedule an alarm for every open task in the tree that has a deadline."""

        scheduled: List[Alarm] = []
        for node in task.walk():
            alarm = alarm_for(node)
            if alarm is not None:
                self._scheduler.add_alarm(alarm)
                scheduled.append(alarm)
        return scheduled

    def deadline_changed(self, task: Task) -> Optional[Alarm]:
        """Replace the pending alarm of ``task`` after its deadline moved."""

        self._scheduler.del_alarm(str(task.id))
        alarm = alarm_for(task)
        if alarm is not None:
            self._scheduler.add_alarm(alarm)
        return alarm

    def untrack(self, task: Task) -> Optional[Alarm]:
        return self._scheduler.del_alarm(str(task.id))

    def task_completed(self, task: Task) -> List[Alarm]:
        """Cancel the alarms of ``task`` and all of its subtasks."""

        removed: List[Alarm] = []
        for node in task.walk():
            alarm = self._scheduler.del_alarm(str(node.id))
            if alarm is not None:
                removed.append(alarm)
        return removed
