"""Notification backends."""

from .telegram import Notification, NotifierError, TelegramNotifier, forward

__all__ = ["Notification", "NotifierError", "TelegramNotifier", "forward"]
