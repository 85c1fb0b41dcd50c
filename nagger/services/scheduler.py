"""Background alarm scheduler."""
from __future__ import annotations

import threading
from typing import List, Optional, Tuple

from nagger.alarms import Alarm, AlarmQueue
from nagger.config import SchedulerConfig
from nagger.logging import setup_logging
from nagger.services.channel import AlarmReceiver, AlarmSender, ChannelClosed, open_channel

TAG = __name__
logger = setup_logging()


class Scheduler:
    """Public handle over the pending-alarm queue and its delivery thread.

    Use :meth:`init` to obtain a running scheduler together with the
    receiving end of its delivery channel.  ``add_alarm`` and ``del_alarm``
    are safe to call from any thread while the loop runs.  The loop stops
    once the receiver is closed (observed at the next send or wake-up) or
    when :meth:`stop` is called.

    Two wait strategies are available, see
    :attr:`SchedulerConfig.strict_ordering`:

    * strict: the earliest alarm stays in the queue until it is due and the
      loop re-evaluates whenever the queue changes, so an earlier alarm added
      during a wait still fires first and a pending alarm can be removed up to
      the moment it fires;
    * polling: the earliest alarm is popped and slept on.  Alarms added
      meanwhile are only considered after that wait, and the popped alarm can
      no longer be removed.
    """

    def __init__(self, config: SchedulerConfig, sender: AlarmSender) -> None:
        self._config = config
        self._queue = AlarmQueue()
        self._sender = sender
        self._stopping = threading.Event()
        self._thread = threading.Thread(
            target=self._run, name="nagger-scheduler", daemon=True
        )

    @classmethod
    def init(
        cls, config: Optional[SchedulerConfig] = None
    ) -> Tuple["Scheduler", AlarmReceiver]:
        """Start a scheduler and return it with the consumer end of its channel."""

        config = config or SchedulerConfig()
        sender, receiver = open_channel(config.delivery_capacity)
        scheduler = cls(config, sender)
        scheduler._thread.start()
        return scheduler, receiver

    # ------------------------------------------------------------------
    # Public API
    def add_alarm(self, alarm: Alarm) -> None:
        """Queue ``alarm``.  Still succeeds after the loop has stopped."""

        self._queue.insert(alarm)
        logger.bind(tag=TAG).debug(
            f"Alarm '{alarm.name}' scheduled for {alarm.due_time.isoformat()}"
        )

    def del_alarm(self, name: str) -> Optional[Alarm]:
        """Remove the earliest pending alarm called ``name``."""

        removed = self._queue.remove_by_name(name)
        if removed is not None:
            logger.bind(tag=TAG).debug(f"Alarm '{name}' cancelled")
        return removed

    def pending(self) -> List[Alarm]:
        """Sorted copy of the alarms that have not been taken for delivery."""

        return self._queue.snapshot()

    @property
    def is_running(self) -> bool:
        return self._thread.is_alive()

    def stop(self, timeout: Optional[float] = None) -> None:
        """Close the delivery channel and wait for the loop to exit."""

        self._stopping.set()
        self._sender.close()
        self._queue.wake()
        if timeout is None:
            timeout = self._config.join_timeout.total_seconds()
        if self._thread.is_alive() and threading.current_thread() is not self._thread:
            self._thread.join(timeout)

    def __enter__(self) -> "Scheduler":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:  # type: ignore[override]
        self.stop()

    # ------------------------------------------------------------------
    # Loop
    def _run(self) -> None:
        log = logger.bind(tag=TAG)
        mode = "strict" if self._config.strict_ordering else "polling"
        log.debug(f"Alarm scheduler started ({mode})")
        try:
            if self._config.strict_ordering:
                self._run_strict()
            else:
                self._run_polling()
        except Exception:
            log.opt(exception=True).error("Alarm scheduler loop failed; shutting down")
        finally:
            self._sender.close()
            log.info("Alarm scheduler stopped")

    def _run_strict(self) -> None:
        poll = self._poll_seconds()
        while not self._should_stop():
            alarm = self._queue.take_due(poll)
            if alarm is None:
                continue
            if not self._deliver(alarm):
                return

    def _run_polling(self) -> None:
        poll = self._poll_seconds()
        while not self._should_stop():
            alarm = self._queue.pop_minimum()
            if alarm is None:
                self._stopping.wait(poll)
                continue
            # Far-future due times exceed the platform timer, so wait in slices.
            while alarm.remaining() > 0:
                if self._stopping.wait(min(alarm.remaining(), poll)):
                    logger.bind(tag=TAG).info(
                        f"Dropping in-flight alarm '{alarm.name}' on shutdown"
                    )
                    return
            if not self._deliver(alarm):
                return

    def _deliver(self, alarm: Alarm) -> bool:
        try:
            self._sender.send(alarm)
        except ChannelClosed:
            logger.bind(tag=TAG).info(
                f"Alarm consumer closed; '{alarm.name}' not delivered"
            )
            return False
        logger.bind(tag=TAG).info(f"Alarm '{alarm.name}' fired")
        return True

    def _should_stop(self) -> bool:
        return self._stopping.is_set() or self._sender.is_closed

    def _poll_seconds(self) -> float:
        return max(0.001, self._config.poll_interval.total_seconds())
