"""Scheduler loop and delivery channel."""

from .channel import (
    AlarmReceiver,
    AlarmSender,
    ChannelClosed,
    ChannelTimeout,
    open_channel,
)
from .scheduler import Scheduler

__all__ = [
    "AlarmReceiver",
    "AlarmSender",
    "ChannelClosed",
    "ChannelTimeout",
    "Scheduler",
    "open_channel",
]
