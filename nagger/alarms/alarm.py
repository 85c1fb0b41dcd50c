"""The alarm value delivered by the scheduler."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Optional


@dataclass(frozen=True, order=True, slots=True)
class Alarm:
    """A named point in time.

    Alarms compare and order by ``due_time`` only; two alarms with the same
    due time are equal whatever their names.  Naive datetimes are read as
    local time and stored in UTC.
    """

    name: str = field(compare=False)
    due_time: datetime

    def __post_init__(self) -> None:
        if not isinstance(self.due_time, datetime):
            raise TypeError(f"due_time must be a datetime, got {type(self.due_time).__name__}")
        object.__setattr__(self, "due_time", self.due_time.astimezone(timezone.utc))

    @classmethod
    def after(cls, name: str, delay: timedelta, *, now: Optional[datetime] = None) -> "Alarm":
        """Build an alarm that fires ``delay`` from ``now``."""

        start = now or datetime.now(timezone.utc)
        return cls(name=name, due_time=start + delay)

    def remaining(self, now: Optional[datetime] = None) -> float:
        """Seconds until the alarm is due, never negative."""

        current = now or datetime.now(timezone.utc)
        return max(0.0, (self.due_time - current).total_seconds())

    def to_dict(self) -> dict:
        return {"name": self.name, "due_time": self.due_time.isoformat()}
