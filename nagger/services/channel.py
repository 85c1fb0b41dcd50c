"""Closable single-producer/single-consumer conduit for fired alarms."""
from __future__ import annotations

import threading
import time
from collections import deque
from typing import Deque, Iterator, Optional, Tuple

from nagger.alarms import Alarm


class ChannelClosed(RuntimeError):
    """Raised when the other end of the channel has gone away."""


class ChannelTimeout(RuntimeError):
    """Raised when :meth:`AlarmReceiver.recv` times out."""


class _ChannelState:
    def __init__(self, capacity: Optional[int]) -> None:
        if capacity is not None and capacity < 0:
            raise ValueError("capacity must not be negative")
        self.capacity = capacity or None
        self.buffer: Deque[Alarm] = deque()
        self.cond = threading.Condition()
        self.sender_closed = False
        self.receiver_closed = False


class AlarmSender:
    """Producer end, owned by the scheduler loop."""

    def __init__(self, state: _ChannelState) -> None:
        self._state = state

    @property
    def is_closed(self) -> bool:
        state = self._state
        with state.cond:
            return state.sender_closed or state.receiver_closed

    def send(self, alarm: Alarm) -> None:
        """Queue ``alarm`` for the consumer.

        Blocks while a bounded channel is full.  Raises :class:`ChannelClosed`
        if either end has been closed, including while blocked.
        """

        state = self._state
        with state.cond:
            while True:
                if state.sender_closed or state.receiver_closed:
                    raise ChannelClosed("alarm channel is closed")
                if state.capacity is None or len(state.buffer) < state.capacity:
                    break
                state.cond.wait()
            state.buffer.append(alarm)
            state.cond.notify_all()

    def close(self) -> None:
        """Stop producing; the receiver drains what is left, then sees closure."""

        state = self._state
        with state.cond:
            state.sender_closed = True
            state.cond.notify_all()


class AlarmReceiver:
    """Consumer end handed back to the caller of :meth:`Scheduler.init`."""

    def __init__(self, state: _ChannelState) -> None:
        self._state = state

    @property
    def is_closed(self) -> bool:
        state = self._state
        with state.cond:
            return state.receiver_closed or (state.sender_closed and not state.buffer)

    def recv(self, timeout: Optional[float] = None) -> Alarm:
        """Return the next fired alarm.

        Raises :class:`ChannelClosed` once the channel is closed and drained,
        or :class:`ChannelTimeout` if nothing arrives within ``timeout`` seconds.
        """

        state = self._state
        deadline = None if timeout is None else time.monotonic() + max(0.0, timeout)
        with state.cond:
            while True:
                if state.receiver_closed:
                    raise ChannelClosed("alarm channel is closed")
                if state.buffer:
                    alarm = state.buffer.popleft()
                    state.cond.notify_all()
                    return alarm
                if state.sender_closed:
                    raise ChannelClosed("alarm channel is closed")
                if deadline is None:
                    state.cond.wait()
                    continue
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    raise ChannelTimeout(f"no alarm received within {timeout}s")
                state.cond.wait(remaining)

    def close(self) -> None:
        """Drop the consumer end; the scheduler stops at its next send."""

        state = self._state
        with state.cond:
            state.receiver_closed = True
            state.buffer.clear()
            state.cond.notify_all()

    def __iter__(self) -> Iterator[Alarm]:
        while True:
            try:
                yield self.recv()
            except ChannelClosed:
                return

    def __enter__(self) -> "AlarmReceiver":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:  # type: ignore[override]
        self.close()


def open_channel(capacity: Optional[int] = None) -> Tuple[AlarmSender, AlarmReceiver]:
    """Create a connected sender/receiver pair.

    ``capacity`` of ``None`` or ``0`` gives an unbounded channel.
    """

    state = _ChannelState(capacity)
    return AlarmSender(state), AlarmReceiver(state)


__all__ = [
    "AlarmReceiver",
    "AlarmSender",
    "ChannelClosed",
    "ChannelTimeout",
    "open_channel",
]
