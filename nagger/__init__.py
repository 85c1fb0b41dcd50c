"""nagger: task tracking with a background alarm scheduler."""

from .alarms import Alarm, AlarmQueue
from .cli import main as cli_main
from .config_loader import load_config
from .services import AlarmReceiver, ChannelClosed, Scheduler

__all__ = [
    "Alarm",
    "AlarmQueue",
    "AlarmReceiver",
    "ChannelClosed",
    "Scheduler",
    "cli_main",
    "load_config",
    "config",
    "alarms",
    "services",
    "tasks",
    "notifiers",
]
