"""Timer models"""
import math
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, List, Optional

from pydantic import BaseModel, Field, field_validator


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Treat a datetime without timezone as UTC"""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class TimerKind(str, Enum):
    """Production phase a timer belongs to"""
    PROOFING = "proofing"
    BAKING = "baking"


class TimerStatus(str, Enum):
    """Urgency derived from remaining time"""
    NORMAL = "normal"
    WARNING = "warning"
    URGENT = "urgent"


class Timer(BaseModel):
    """A running countdown attached to a production item"""
    id: str
    product_id: str
    name: str
    kind: TimerKind
    duration_seconds: int
    started_at: datetime
    rotate_at_seconds: Optional[int] = None  # baking only
    rotate_notified: bool = False
    status: TimerStatus = TimerStatus.NORMAL

    @field_validator("started_at")
    @classmethod
    def started_at_utc(cls, value: datetime) -> datetime:
        return as_utc(value)

    def elapsed_seconds(self, now: datetime) -> int:
        """Whole seconds since the timer started"""
        return math.floor((now - self.started_at).total_seconds())

    def remaining_seconds(self, now: datetime) -> int:
        """Seconds left, negative once the timer has run out"""
        return self.duration_seconds - self.elapsed_seconds(now)


class TimerConfig(BaseModel):
    """Arguments for starting a timer"""
    id: str
    product_id: str
    name: str
    kind: TimerKind
    duration_seconds: int
    started_at: Optional[datetime] = None  # defaults to clock now
    rotate_at_seconds: Optional[int] = None
    on_complete: Optional[Callable[[], None]] = Field(default=None, exclude=True)

    @field_validator("started_at")
    @classmethod
    def started_at_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return as_utc(value)


# API schemas

class TimerStartRequest(BaseModel):
    """Request body for starting a timer from the UI"""
    id: str
    product_id: str
    name: str
    kind: TimerKind
    duration_seconds: int
    started_at: Optional[datetime] = Field(None, description="Naive values are read as UTC")
    rotate_at_seconds: Optional[int] = None

    @field_validator("started_at")
    @classmethod
    def started_at_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return as_utc(value)


class TimerExtendRequest(BaseModel):
    seconds: int = Field(description="Seconds to add, e.g. 120 for the +2 min button")


class TimerCount(BaseModel):
    count: int


class TimerCard(BaseModel):
    """Timer as shown on the timers grid"""
    id: str
    product_id: str
    name: str
    kind: TimerKind
    status: TimerStatus
    duration_seconds: int
    remaining_seconds: int
    remaining_display: str
    minutes_remaining: int
    progress_percent: float
    header_class: str
    started_at: datetime
    rotate_at_seconds: Optional[int] = None
    rotate_notified: bool = False


class DashboardTimerRow(BaseModel):
    """Compact timer line on the dashboard"""
    id: str
    name: str
    kind: TimerKind
    remaining_display: str


class TimerBoard(BaseModel):
    """Everything the timers view, dashboard and badge need in one payload"""
    cards: List[TimerCard]
    dashboard: List[DashboardTimerRow]
    count: int
    next_timer_id: Optional[str] = None
    generated_at: datetime
