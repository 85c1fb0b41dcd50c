"""Configuration schema for the nagger reminder utility.

This module defines dataclasses that describe how the alarm scheduler, the
logger and the optional Telegram notifier are configured.  Every field has a
sensible default so an empty configuration file yields a working setup.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta
from typing import Optional, Sequence

DEFAULT_LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "{level:<8} | {extra[tag]} | {message}"
)


@dataclass(slots=True)
class SchedulerConfig:
    """Timing knobs for the background alarm scheduler."""

    poll_interval: timedelta = timedelta(seconds=1)
    # ``True`` re-evaluates the earliest alarm whenever the queue changes;
    # ``False`` pops the earliest alarm and sleeps until it is due.
    strict_ordering: bool = True
    # ``None`` (or 0) means an unbounded delivery channel.
    delivery_capacity: Optional[int] = None
    join_timeout: timedelta = timedelta(seconds=2)


@dataclass(slots=True)
class LoggingConfig:
    """Console logging options."""

    level: str = "INFO"
    format: str = DEFAULT_LOG_FORMAT
    sink: str = "stderr"


@dataclass(slots=True)
class TelegramConfig:
    """Outgoing Telegram bot integration for fired alarms."""

    bot_token: str
    chat_ids: Sequence[int]
    api_base: str = "https://api.telegram.org"
    request_timeout: float = 5.0
    dry_run: bool = False


@dataclass(slots=True)
class NaggerConfig:
    """Top-level configuration bundle."""

    scheduler: SchedulerConfig = field(default_factory=SchedulerConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    telegram: Optional[TelegramConfig] = None
