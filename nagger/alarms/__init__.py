"""Alarm values and the pending-alarm queue."""

from .alarm import Alarm
from .queue import AlarmQueue

__all__ = ["Alarm", "AlarmQueue"]
