"""Proofing and baking timers"""

from .broadcaster import TimerBoardBroadcaster
from .errors import DuplicateTimerError, InvalidTimerConfigError, TimerNotFoundError
from .scheduler import AsyncioScheduler, ScheduledJob, Scheduler
from .timer_registry import TimerRegistry, status_for_remaining
from .views import build_dashboard_row, build_timer_board, build_timer_card

__all__ = [
    "TimerBoardBroadcaster",
    "DuplicateTimerError",
    "InvalidTimerConfigError",
    "TimerNotFoundError",
    "AsyncioScheduler",
    "ScheduledJob",
    "Scheduler",
    "TimerRegistry",
    "status_for_remaining",
    "build_dashboard_row",
    "build_timer_board",
    "build_timer_card",
]
