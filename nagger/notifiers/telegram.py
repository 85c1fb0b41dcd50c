"""Telegram notification backend for fired alarms."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

import httpx

from nagger.alarms import Alarm
from nagger.config import TelegramConfig
from nagger.logging import setup_logging
from nagger.services.channel import AlarmReceiver

TAG = __name__
logger = setup_logging()

SEND_MESSAGE_ENDPOINT = "/bot{token}/sendMessage"


class NotifierError(RuntimeError):
    """Raised when the Telegram Bot API rejects or fails a request."""


@dataclass(slots=True)
class Notification:
    """A message about one fired alarm."""

    alarm: Alarm
    message: str


class TelegramNotifier:
    """Send alarm notifications through a Telegram bot.

    Uses the Bot API ``sendMessage`` method, one request per configured chat.
    With ``dry_run`` enabled messages are only logged.
    """

    def __init__(self, config: TelegramConfig, client: Optional[httpx.Client] = None) -> None:
        self._config = config
        self._client = client or httpx.Client(
            base_url=config.api_base.rstrip("/"),
            timeout=config.request_timeout,
        )

    def format(self, alarm: Alarm) -> Notification:
        """Build the message that will be sent to Telegram."""

        local_time = alarm.due_time.astimezone().strftime("%Y-%m-%d %H:%M")
        return Notification(alarm=alarm, message=f"⏰ {alarm.name} (due {local_time})")

    def send(self, notifications: Iterable[Notification]) -> int:
        """Deliver notifications to the configured chats; return messages sent."""

        sent = 0
        endpoint = SEND_MESSAGE_ENDPOINT.format(token=self._config.bot_token)
        for notification in notifications:
            for chat_id in self._config.chat_ids:
                if self._config.dry_run:
                    logger.bind(tag=TAG).info(
                        f"[dry-run] chat {chat_id}: {notification.message}"
                    )
                    continue
                self._post(endpoint, {"chat_id": chat_id, "text": notification.message})
                sent += 1
        return sent

    def close(self) -> None:
        """Close the underlying :class:`httpx.Client`."""

        self._client.close()

    def __enter__(self) -> "TelegramNotifier":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:  # type: ignore[override]
        self.close()

    def _post(self, endpoint: str, payload: dict) -> None:
        try:
            response = self._client.post(endpoint, json=payload)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise NotifierError(str(exc)) from exc
        body = response.json()
        if not isinstance(body, dict) or not body.get("ok"):
            description = body.get("description") if isinstance(body, dict) else None
            raise NotifierError(description or "telegram request failed")


def forward(receiver: AlarmReceiver, notifier: TelegramNotifier) -> int:
    """Relay every fired alarm from ``receiver`` until the channel closes.

    Delivery failures are logged and do not stop the relay.
    """

    forwarded = 0
    for alarm in receiver:
        try:
            notifier.send([notifier.format(alarm)])
        except NotifierError as exc:
            logger.bind(tag=TAG).warning(f"Failed to notify alarm '{alarm.name}': {exc}")
            continue
        forwarded += 1
    return forwarded
