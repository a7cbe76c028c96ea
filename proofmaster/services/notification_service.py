"""
Notification Service

Delivers toasts and alerts to the UI. Every notification is logged and kept
in a bounded in-memory feed that the frontend polls.
"""
import logging
import threading
from collections import deque
from typing import Deque, List, Optional, Protocol

from proofmaster.models.notification import Notification, NotificationChannel, NotificationSeverity
from proofmaster.services.clock import Clock, SystemClock

logger = logging.getLogger(__name__)

_LOG_LEVELS = {
    NotificationSeverity.INFO: logging.INFO,
    NotificationSeverity.SUCCESS: logging.INFO,
    NotificationSeverity.WARNING: logging.WARNING,
    NotificationSeverity.ERROR: logging.ERROR,
}


class Notifier(Protocol):
    def notify(self, message: str, severity: NotificationSeverity = NotificationSeverity.INFO) -> None:
        ...

    def alert(self, title: str, message: str) -> None:
        ...


class NotificationService:
    """In-memory notification feed"""

    def __init__(self, history_size: int = 200, clock: Optional[Clock] = None):
        if history_size <= 0:
            raise ValueError("history_size must be positive")
        self._clock = clock or SystemClock()
        self._feed: Deque[Notification] = deque(maxlen=history_size)
        self._next_id = 1
        self._lock = threading.Lock()

    def notify(self, message: str, severity: NotificationSeverity = NotificationSeverity.INFO) -> Notification:
        """Queue a toast"""
        severity = NotificationSeverity(severity)
        logger.log(_LOG_LEVELS[severity], f"[toast:{severity.value}] {message}")
        return self._append(NotificationChannel.TOAST, severity, None, message)

    def alert(self, title: str, message: str) -> Notification:
        """Queue an alert (shown as a modal with sound by the UI)"""
        logger.info(f"[alert] {title}: {message}")
        return self._append(NotificationChannel.ALERT, NotificationSeverity.WARNING, title, message)

    def recent(self, after_id: Optional[int] = None, limit: Optional[int] = None) -> List[Notification]:
        """
        Get notifications from the feed, oldest first.

        Args:
            after_id: Only return notifications with a greater id
            limit: Keep only the newest `limit` results

        Returns:
            List of notifications
        """
        with self._lock:
            items = [n for n in self._feed if after_id is None or n.id > after_id]
        if limit is not None:
            items = items[-limit:] if limit > 0 else []
        return items

    def _append(
        self,
        channel: NotificationChannel,
        severity: NotificationSeverity,
        title: Optional[str],
        message: str,
    ) -> Notification:
        with self._lock:
            notification = Notification(
                id=self._next_id,
                channel=channel,
                severity=severity,
                title=title,
                message=message,
                created_at=self._clock.now(),
            )
            self._next_id += 1
            self._feed.append(notification)
        return notification
