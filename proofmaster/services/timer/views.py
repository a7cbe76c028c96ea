"""View builders for the timers grid, dashboard summary and badge"""
from datetime import datetime
from typing import TYPE_CHECKING

from proofmaster.models.timer import DashboardTimerRow, Timer, TimerBoard, TimerCard, TimerStatus
from proofmaster.utils.time_format import format_time

if TYPE_CHECKING:
    from .timer_registry import TimerRegistry


def build_timer_card(timer: Timer, now: datetime) -> TimerCard:
    """
    Build the timers-grid card for one timer.

    Remaining time is clamped at zero for display. The header uses the
    urgent style once the timer is urgent, otherwise the timer kind.
    """
    remaining = max(0, timer.remaining_seconds(now))
    progress = (timer.duration_seconds - remaining) / timer.duration_seconds * 100
    header_class = "urgent" if timer.status == TimerStatus.URGENT else timer.kind.value

    return TimerCard(
        id=timer.id,
        product_id=timer.product_id,
        name=timer.name,
        kind=timer.kind,
        status=timer.status,
        duration_seconds=timer.duration_seconds,
        remaining_seconds=remaining,
        remaining_display=format_time(remaining),
        minutes_remaining=remaining // 60,
        progress_percent=round(progress, 2),
        header_class=header_class,
        started_at=timer.started_at,
        rotate_at_seconds=timer.rotate_at_seconds,
        rotate_notified=timer.rotate_notified,
    )


def build_dashboard_row(timer: Timer, now: datetime) -> DashboardTimerRow:
    return DashboardTimerRow(
        id=timer.id,
        name=timer.name,
        kind=timer.kind,
        remaining_display=format_time(timer.remaining_seconds(now)),
    )


def build_timer_board(registry: "TimerRegistry") -> TimerBoard:
    """Snapshot every derived timer view at a single instant"""
    now = registry.clock.now()
    timers = registry.list_timers()
    next_timer = registry.next_to_complete()
    return TimerBoard(
        cards=[build_timer_card(t, now) for t in timers],
        dashboard=[build_dashboard_row(t, now) for t in timers],
        count=len(timers),
        next_timer_id=next_timer.id if next_timer else None,
        generated_at=now,
    )
