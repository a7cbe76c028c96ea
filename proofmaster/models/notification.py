from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel


class NotificationChannel(str, Enum):
    """Where the UI shows a notification"""
    TOAST = "toast"
    ALERT = "alert"  # modal with sound


class NotificationSeverity(str, Enum):
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


class Notification(BaseModel):
    id: int
    channel: NotificationChannel
    severity: NotificationSeverity = NotificationSeverity.INFO
    title: Optional[str] = None
    message: str
    created_at: datetime
