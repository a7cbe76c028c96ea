"""Timer Registry - Manages proofing and baking timer lifecycle"""
import logging
import threading
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from proofmaster.config import TimerSettings
from proofmaster.models.timer import Timer, TimerConfig, TimerKind, TimerStatus
from proofmaster.services.clock import Clock
from proofmaster.services.notification_service import Notifier
from proofmaster.utils.time_format import format_minutes
from .errors import DuplicateTimerError, InvalidTimerConfigError, TimerNotFoundError
from .scheduler import ScheduledJob, Scheduler

logger = logging.getLogger(__name__)

Observer = Callable[["TimerRegistry"], None]


@dataclass
class _Entry:
    """A registered timer together with its tick job"""
    timer: Timer
    job: Optional[ScheduledJob] = None
    on_complete: Optional[Callable[[], None]] = None


def status_for_remaining(remaining_seconds: int, settings: TimerSettings) -> TimerStatus:
    """Classify remaining time against the warning/critical cutoffs"""
    if remaining_seconds <= settings.critical_threshold_seconds:
        return TimerStatus.URGENT
    if remaining_seconds <= settings.warning_threshold_seconds:
        return TimerStatus.WARNING
    return TimerStatus.NORMAL


class TimerRegistry:
    """
    Owns the running timers and advances each one on its own recurring tick.

    All mutations run under one re-entrant lock, so completion callbacks and
    observers may call back into the registry.
    """

    def __init__(
        self,
        clock: Clock,
        scheduler: Scheduler,
        notifier: Notifier,
        settings: Optional[TimerSettings] = None,
    ):
        self._clock = clock
        self._scheduler = scheduler
        self._notifier = notifier
        self._settings = settings or TimerSettings()
        self._timers: Dict[str, _Entry] = {}
        self._observers: List[Observer] = []
        self._lock = threading.RLock()

    @property
    def clock(self) -> Clock:
        return self._clock

    @property
    def settings(self) -> TimerSettings:
        return self._settings

    # --- Mutations ---

    def start(self, config: TimerConfig) -> Timer:
        """
        Register a timer and schedule its ticks.

        Args:
            config: Timer arguments; rotate_at_seconds is dropped for proofing timers

        Returns:
            Snapshot of the new timer

        Raises:
            InvalidTimerConfigError: duration is not positive or rotate offset is negative
            DuplicateTimerError: a timer with this id is already running
        """
        if config.duration_seconds <= 0:
            raise InvalidTimerConfigError(
                f"Timer {config.id}: duration must be positive, got {config.duration_seconds}"
            )
        if config.rotate_at_seconds is not None and config.rotate_at_seconds < 0:
            raise InvalidTimerConfigError(
                f"Timer {config.id}: rotate offset cannot be negative, got {config.rotate_at_seconds}"
            )

        rotate_at = config.rotate_at_seconds if config.kind == TimerKind.BAKING else None

        with self._lock:
            if config.id in self._timers:
                raise DuplicateTimerError(config.id)

            timer = Timer(
                id=config.id,
                product_id=config.product_id,
                name=config.name,
                kind=config.kind,
                duration_seconds=config.duration_seconds,
                started_at=config.started_at or self._clock.now(),
                rotate_at_seconds=rotate_at,
            )
            timer.status = status_for_remaining(timer.remaining_seconds(self._clock.now()), self._settings)

            timer_id = timer.id
            job = self._scheduler.every(
                self._settings.tick_interval_seconds,
                lambda: self.tick(timer_id),
                name=f"timer:{timer_id}",
            )
            self._timers[timer_id] = _Entry(timer=timer, job=job, on_complete=config.on_complete)

            logger.info(
                f"Timer started: {timer_id} ({timer.kind.value}) for product {timer.product_id}, "
                f"{timer.duration_seconds}s"
            )
            self._notifier.notify(f"Timer started: {timer.name} ({timer.kind.value})")
            self._publish()
            return timer.model_copy()

    def tick(self, timer_id: str) -> None:
        """Advance one timer: rotate reminder, completion, status"""
        with self._lock:
            entry = self._timers.get(timer_id)
            if entry is None:
                return

            timer = entry.timer
            elapsed = timer.elapsed_seconds(self._clock.now())
            remaining = timer.duration_seconds - elapsed

            if (
                timer.kind == TimerKind.BAKING
                and timer.rotate_at_seconds is not None
                and not timer.rotate_notified
                and elapsed >= timer.rotate_at_seconds
            ):
                timer.rotate_notified = True
                logger.info(f"Rotate reminder for timer {timer_id} at {elapsed}s")
                self._notifier.alert("Rotate Trays!", f"{timer.name}: Time to rotate trays")

            if remaining <= 0:
                self.complete(timer_id)
                return

            timer.status = status_for_remaining(remaining, self._settings)
            self._publish()

    def complete(self, timer_id: str) -> None:
        """
        Finish a timer: cancel its ticks, drop it, then run its on_complete callback.

        The timer is removed before the callback runs, so the callback may
        start a follow-up timer, even one reusing the same id.
        """
        with self._lock:
            entry = self._timers.pop(timer_id, None)
            if entry is None:
                logger.debug(f"Timer {timer_id} already finished")
                return

            self._cancel_job(entry)
            logger.info(f"Timer completed: {timer_id}")

            if entry.on_complete:
                try:
                    entry.on_complete()
                except Exception as e:
                    logger.error(f"Completion callback for timer {timer_id} failed: {e}", exc_info=True)

            self._publish()

    def stop(self, timer_id: str) -> Timer:
        """
        Cancel a running timer without running its completion callback.

        Raises:
            TimerNotFoundError: no running timer has this id
        """
        with self._lock:
            entry = self._timers.pop(timer_id, None)
            if entry is None:
                logger.warning(f"Stop requested for unknown timer: {timer_id}")
                raise TimerNotFoundError(timer_id)

            self._cancel_job(entry)
            logger.info(f"Timer stopped: {timer_id}")
            self._notifier.notify(f"Timer stopped: {entry.timer.name}")
            self._publish()
            return entry.timer.model_copy()

    def extend(self, timer_id: str, delta_seconds: int) -> Timer:
        """
        Add time to a running timer.

        Args:
            timer_id: Timer to extend
            delta_seconds: Seconds to add, must be positive

        Returns:
            Snapshot of the extended timer

        Raises:
            InvalidTimerConfigError: delta_seconds is not positive
            TimerNotFoundError: no running timer has this id
        """
        if delta_seconds <= 0:
            raise InvalidTimerConfigError(f"Extension must be positive, got {delta_seconds}")

        with self._lock:
            entry = self._timers.get(timer_id)
            if entry is None:
                logger.warning(f"Extend requested for unknown timer: {timer_id}")
                raise TimerNotFoundError(timer_id)

            timer = entry.timer
            timer.duration_seconds += delta_seconds
            timer.status = status_for_remaining(timer.remaining_seconds(self._clock.now()), self._settings)

            logger.info(f"Timer {timer_id} extended by {delta_seconds}s to {timer.duration_seconds}s")
            self._notifier.notify(f"Added {format_minutes(delta_seconds)} minutes to {timer.name}")
            self._publish()
            return timer.model_copy()

    def shutdown(self) -> None:
        """Cancel every tick job and drop all timers without completing them"""
        with self._lock:
            count = len(self._timers)
            for entry in self._timers.values():
                self._cancel_job(entry)
            self._timers.clear()
        logger.info(f"Timer registry shut down, {count} timers dropped")

    # --- Queries ---

    def get(self, timer_id: str) -> Optional[Timer]:
        with self._lock:
            entry = self._timers.get(timer_id)
            return entry.timer.model_copy() if entry else None

    def list_timers(self) -> List[Timer]:
        with self._lock:
            return [entry.timer.model_copy() for entry in self._timers.values()]

    def count(self) -> int:
        """Number of running timers (badge count)"""
        with self._lock:
            return len(self._timers)

    def find_by_product(self, product_id: str) -> Optional[Timer]:
        """First running timer for a product, or None"""
        with self._lock:
            for entry in self._timers.values():
                if entry.timer.product_id == product_id:
                    return entry.timer.model_copy()
            return None

    def next_to_complete(self) -> Optional[Timer]:
        """Timer with the least remaining time; the first one wins ties"""
        with self._lock:
            now = self._clock.now()
            earliest: Optional[Timer] = None
            earliest_remaining = None
            for entry in self._timers.values():
                remaining = entry.timer.remaining_seconds(now)
                if earliest_remaining is None or remaining < earliest_remaining:
                    earliest = entry.timer
                    earliest_remaining = remaining
            return earliest.model_copy() if earliest else None

    def remaining_seconds(self, timer: Timer) -> int:
        return timer.remaining_seconds(self._clock.now())

    # --- Observers ---

    def subscribe(self, observer: Observer) -> Callable[[], None]:
        """
        Register a callback run after every state change.

        Returns:
            Function that removes the observer again
        """
        with self._lock:
            self._observers.append(observer)

        def unsubscribe():
            with self._lock:
                if observer in self._observers:
                    self._observers.remove(observer)

        return unsubscribe

    def _publish(self):
        for observer in list(self._observers):
            try:
                observer(self)
            except Exception as e:
                logger.error(f"Timer observer failed: {e}", exc_info=True)

    def _cancel_job(self, entry: _Entry):
        if entry.job is not None:
            self._scheduler.cancel(entry.job)
