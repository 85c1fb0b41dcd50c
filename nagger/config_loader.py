"""Utilities to load :mod:`nagger.config` structures from YAML files."""
from __future__ import annotations

import datetime as _dt
import re
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml

from .config import (
    DEFAULT_LOG_FORMAT,
    LoggingConfig,
    NaggerConfig,
    SchedulerConfig,
    TelegramConfig,
)

_NUMBER_PATTERN = re.compile(r"^\d+\.\d*$|^\.\d+$")

_DURATION_UNITS = {
    "s": _dt.timedelta(seconds=1),
    "m": _dt.timedelta(minutes=1),
    "h": _dt.timedelta(hours=1),
    "d": _dt.timedelta(days=1),
}


def load_config(path: Optional[Path]) -> NaggerConfig:
    """Load a configuration file into :class:`NaggerConfig`.

    The loader accepts human friendly values such as ``"1s"`` or ``"5m"`` for
    durations and converts them into :class:`datetime.timedelta` objects.  Fields
    omitted in the YAML file fall back to the defaults declared in
    :mod:`nagger.config`.  ``path=None`` returns the defaults.
    """

    if path is None:
        return NaggerConfig()

    raw = _load_yaml(path)

    scheduler_section = raw.get("scheduler") or {}
    capacity = scheduler_section.get("delivery_capacity")
    scheduler = SchedulerConfig(
        poll_interval=parse_duration(scheduler_section.get("poll_interval", "1s")),
        strict_ordering=bool(scheduler_section.get("strict_ordering", True)),
        delivery_capacity=int(capacity) if capacity else None,
        join_timeout=parse_duration(scheduler_section.get("join_timeout", "2s")),
    )
    if scheduler.poll_interval <= _dt.timedelta(0):
        raise ValueError("scheduler.poll_interval must be positive")

    logging_section = raw.get("logging") or {}
    logging_cfg = LoggingConfig(
        level=str(logging_section.get("level", "INFO")).upper(),
        format=str(logging_section.get("format", DEFAULT_LOG_FORMAT)),
        sink=str(logging_section.get("sink", "stderr")),
    )

    telegram_cfg = None
    if "telegram" in raw and raw["telegram"]:
        telegram_cfg = TelegramConfig(
            bot_token=str(raw["telegram"]["bot_token"]),
            chat_ids=tuple(int(cid) for cid in raw["telegram"].get("chat_ids", [])),
            api_base=str(raw["telegram"].get("api_base", "https://api.telegram.org")),
            request_timeout=float(raw["telegram"].get("request_timeout", 5.0)),
            dry_run=bool(raw["telegram"].get("dry_run", False)),
        )

    return NaggerConfig(
        scheduler=scheduler,
        logging=logging_cfg,
        telegram=telegram_cfg,
    )


def _load_yaml(path: Path) -> Mapping[str, Any]:
    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle)
    if data is None:
        return {}
    if not isinstance(data, Mapping):
        raise ValueError("configuration root must be a mapping")
    return data


def parse_duration(value: Any) -> _dt.timedelta:
    """Convert ``"30s"``, ``"5m"``, ``12`` or a timedelta into a timedelta."""

    if isinstance(value, _dt.timedelta):
        return value
    if isinstance(value, bool):
        raise ValueError(f"unsupported duration value: {value!r}")
    if isinstance(value, (int, float)):
        return _seconds(float(value), value)
    if not isinstance(value, str):
        raise ValueError(f"unsupported duration value: {value!r}")
    value = value.strip()
    if not value:
        raise ValueError("empty duration")
    if value.isdigit():
        return _seconds(int(value), value)
    if _NUMBER_PATTERN.match(value):
        return _seconds(float(value), value)
    unit = value[-1].lower()
    if unit not in _DURATION_UNITS:
        raise ValueError(f"unknown duration unit: {value}")
    try:
        amount = float(value[:-1])
    except ValueError as exc:
        raise ValueError(f"invalid duration: {value}") from exc
    base = _DURATION_UNITS[unit]
    return _seconds(base.total_seconds() * amount, value)


def _seconds(amount: float, raw: Any) -> _dt.timedelta:
    try:
        return _dt.timedelta(seconds=amount)
    except OverflowError as exc:
        raise ValueError(f"duration out of range: {raw!r}") from exc
