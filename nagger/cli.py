"""Command line entry point for nagger."""
from __future__ import annotations

import argparse
import json
import sys
import time
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Sequence

from .alarms import Alarm
from .config_loader import load_config, parse_duration
from .logging import setup_logging
from .notifiers import NotifierError, TelegramNotifier
from .services import ChannelClosed, ChannelTimeout, Scheduler
from .tasks import load_tasks


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="nagger reminder CLI")
    sub = parser.add_subparsers(dest="command", required=True)

    watch = sub.add_parser(
        "watch",
        help="Schedule alarms and print them as they fire",
    )
    watch.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to the YAML configuration file",
    )
    watch.add_argument(
        "--alarm",
        dest="alarms",
        action="append",
        required=True,
        metavar="NAME=WHEN",
        help="Alarm to schedule; WHEN is a delay such as 30s/5m or an ISO-8601 time",
    )
    watch.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Give up after this many seconds (default: wait for every alarm)",
    )
    watch.add_argument(
        "--notify",
        action="store_true",
        help="Forward fired alarms to the configured Telegram chats",
    )

    tasks = sub.add_parser(
        "tasks",
        help="Print a YAML task tree with completion percentages",
    )
    tasks.add_argument(
        "--file",
        type=Path,
        required=True,
        help="Path to the YAML task file",
    )

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "watch":
        try:
            alarms = [parse_alarm(spec) for spec in args.alarms]
        except ValueError as exc:
            parser.error(str(exc))
        return _command_watch(args, alarms)
    if args.command == "tasks":
        return _command_tasks(args)

    parser.error("unknown command")
    return 1


def parse_alarm(spec: str, *, now: Optional[datetime] = None) -> Alarm:
    """Parse ``NAME=WHEN`` into an :class:`Alarm`."""

    name, sep, when = spec.partition("=")
    name, when = name.strip(), when.strip()
    if not sep or not name or not when:
        raise ValueError(f"alarm must look like NAME=WHEN: {spec!r}")
    try:
        delay = parse_duration(when)
    except ValueError:
        delay = None
    try:
        if delay is not None:
            return Alarm.after(name, delay, now=now)
        due = datetime.fromisoformat(when.replace("Z", "+00:00"))
        return Alarm(name=name, due_time=due)
    except OverflowError as exc:
        raise ValueError(f"alarm time out of range: {when!r}") from exc
    except ValueError as exc:
        raise ValueError(f"cannot parse alarm time: {when!r}") from exc


def _command_watch(args: argparse.Namespace, alarms: List[Alarm]) -> int:
    config = load_config(args.config)
    setup_logging(config.logging)

    notifier = None
    if args.notify:
        if config.telegram is None:
            print("--notify requires a telegram section in the config", file=sys.stderr)
            return 2
        notifier = TelegramNotifier(config.telegram)

    scheduler, receiver = Scheduler.init(config.scheduler)
    for alarm in alarms:
        scheduler.add_alarm(alarm)

    remaining = len(alarms)
    end_time = None if args.timeout is None else time.monotonic() + args.timeout
    try:
        while remaining:
            wait = None if end_time is None else max(0.0, end_time - time.monotonic())
            try:
                fired = receiver.recv(timeout=wait)
            except (ChannelTimeout, ChannelClosed):
                break
            remaining -= 1
            print(json.dumps(fired.to_dict(), ensure_ascii=False), flush=True)
            if notifier is not None:
                try:
                    notifier.send([notifier.format(fired)])
                except NotifierError as exc:
                    print(f"Notification failed: {exc}", file=sys.stderr)
    except KeyboardInterrupt:  # pragma: no cover - interactive use
        print("Interrupted, stopping scheduler...", file=sys.stderr)
    finally:
        receiver.close()
        scheduler.stop()
        if notifier is not None:
            notifier.close()

    return 0 if remaining == 0 else 1


def _command_tasks(args: argparse.Namespace) -> int:
    tasks = load_tasks(args.file)
    output = [task.to_dict() for task in tasks]
    print(json.dumps(output, indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
