"""Lock-protected, time-ordered container of pending alarms."""
from __future__ import annotations

import bisect
import threading
from datetime import datetime
from typing import List, Optional

from nagger.alarms.alarm import Alarm


def _due_key(alarm: Alarm) -> datetime:
    return alarm.due_time


class AlarmQueue:
    """Sorted collection of :class:`Alarm` ascending by due time.

    Every public method runs under a single lock, so callers only ever see
    the queue between complete operations.  A condition bound to that lock is
    notified after each mutation; :meth:`take_due` waits on it so a sleeping
    scheduler notices inserts and removals.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._changed = threading.Condition(self._lock)
        self._items: List[Alarm] = []

    def insert(self, alarm: Alarm) -> None:
        """Insert ``alarm`` keeping ascending due-time order."""

        with self._lock:
            bisect.insort_right(self._items, alarm, key=_due_key)
            self._changed.notify_all()

    def remove_by_name(self, name: str) -> Optional[Alarm]:
        """Remove and return the earliest alarm called ``name``, if any."""

        with self._lock:
            for index, alarm in enumerate(self._items):
                if alarm.name == name:
                    del self._items[index]
                    self._changed.notify_all()
                    return alarm
            return None

    def pop_minimum(self) -> Optional[Alarm]:
        """Remove and return the alarm with the smallest due time."""

        with self._lock:
            return self._pop_locked()

    def take_due(self, max_wait: float, now: Optional[datetime] = None) -> Optional[Alarm]:
        """Pop the earliest alarm if it is due, otherwise wait for a change.

        Waits at most ``max_wait`` seconds, or less when the earliest alarm
        becomes due sooner, and returns ``None`` after waking.  The lock is
        released while waiting.
        """

        with self._changed:
            head = self._items[0] if self._items else None
            if head is None:
                self._changed.wait(max(0.0, max_wait))
                return None
            remaining = head.remaining(now)
            if remaining > 0:
                self._changed.wait(min(remaining, max(0.0, max_wait)))
                return None
            return self._pop_locked()

    def wake(self) -> None:
        """Wake any thread blocked in :meth:`take_due`."""

        with self._changed:
            self._changed.notify_all()

    def snapshot(self) -> List[Alarm]:
        """Return a sorted copy of the pending alarms."""

        with self._lock:
            return list(self._items)

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    def _pop_locked(self) -> Optional[Alarm]:
        if not self._items:
            return None
        alarm = self._items.pop(0)
        self._changed.notify_all()
        return alarm
