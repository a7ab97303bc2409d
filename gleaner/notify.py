"""Notification sinks for crawl outcomes.

Delivery channels (push, e-mail, ...) belong to the hosting application; it
plugs them in by subclassing :class:`Notifier`.  The crawler treats every
sink as fire-and-forget and swallows its failures.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

logger = logging.getLogger(__name__)


class Notifier(ABC):
    """Abstract base class for a notification sink."""

    @abstractmethod
    def notify(self, title: str, body: str) -> None:
        """Deliver one notification.  May raise; callers swallow errors."""


class LogNotifier(Notifier):
    """Writes notifications to the application log."""

    def notify(self, title: str, body: str) -> None:
        logger.info("[notify] %s: %s", title, body)
