"""Services module"""

from proofmaster.services.clock import Clock, SystemClock
from proofmaster.services.notification_service import NotificationService, Notifier

__all__ = [
    "Clock",
    "SystemClock",
    "NotificationService",
    "Notifier",
]
