"""Shared fixtures: a clock and scheduler the tests drive by hand."""
from datetime import datetime, timedelta, timezone
from typing import Callable, List, Tuple

import pytest

from proofmaster.config import ProductionSettings, TimerSettings
from proofmaster.models.notification import NotificationSeverity
from proofmaster.services.production.production_service import ProductionService
from proofmaster.services.timer.scheduler import ScheduledJob
from proofmaster.services.timer.timer_registry import TimerRegistry

START = datetime(2025, 3, 1, 5, 30, tzinfo=timezone.utc)


class FakeClock:
    def __init__(self, start: datetime = START):
        self.current = start

    def now(self) -> datetime:
        return self.current

    def advance(self, seconds: float) -> None:
        self.current += timedelta(seconds=seconds)


class ManualScheduler:
    """Fires every live job once per simulated second."""

    def __init__(self, clock: FakeClock):
        self.clock = clock
        self._entries: List[Tuple[ScheduledJob, Callable[[], None]]] = []

    def every(self, interval_seconds, callback, name=""):
        job = ScheduledJob(name, interval_seconds)
        self._entries.append((job, callback))
        return job

    def cancel(self, job):
        job.cancel()

    @property
    def active_jobs(self) -> List[ScheduledJob]:
        return [job for job, _ in self._entries if not job.cancelled]

    def advance(self, seconds: int) -> None:
        for _ in range(seconds):
            self.clock.advance(1)
            for job, callback in list(self._entries):
                if not job.cancelled:
                    callback()
            self._entries = [(j, cb) for j, cb in self._entries if not j.cancelled]


class RecordingNotifier:
    def __init__(self):
        self.toasts: List[Tuple[str, NotificationSeverity]] = []
        self.alerts: List[Tuple[str, str]] = []

    def notify(self, message, severity=NotificationSeverity.INFO):
        self.toasts.append((message, NotificationSeverity(severity)))

    def alert(self, title, message):
        self.alerts.append((title, message))

    @property
    def messages(self) -> List[str]:
        return [message for message, _ in self.toasts]


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def scheduler(clock):
    return ManualScheduler(clock)


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def timer_settings():
    return TimerSettings(warning_threshold_seconds=600, critical_threshold_seconds=300)


@pytest.fixture
def registry(clock, scheduler, notifier, timer_settings):
    return TimerRegistry(clock, scheduler, notifier, timer_settings)


@pytest.fixture
def production(registry, notifier):
    return ProductionService(registry, notifier, ProductionSettings())
