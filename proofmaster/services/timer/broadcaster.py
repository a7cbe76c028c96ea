"""Pushes timer board snapshots to streaming clients"""
import asyncio
import logging
import threading
from typing import List, Optional, Tuple

from proofmaster.models.timer import TimerBoard
from .timer_registry import TimerRegistry
from .views import build_timer_board

logger = logging.getLogger(__name__)


class TimerBoardBroadcaster:
    """
    Registry observer that fans the current board out to subscriber queues.

    Each queue holds at most `queue_size` boards; when a client falls behind
    the oldest pending board is dropped.
    """

    def __init__(self, queue_size: int = 5):
        self._queue_size = queue_size
        self._subscribers: List[Tuple[asyncio.AbstractEventLoop, asyncio.Queue]] = []
        self._lock = threading.Lock()

    def __call__(self, registry: TimerRegistry) -> None:
        with self._lock:
            subscribers = list(self._subscribers)
        if not subscribers:
            return

        board = build_timer_board(registry)
        current_loop = _running_loop()
        for loop, queue in subscribers:
            if loop is current_loop:
                self._offer(queue, board)
            elif not loop.is_closed():
                loop.call_soon_threadsafe(self._offer, queue, board)

    def subscribe(self) -> asyncio.Queue:
        """Register a queue on the running loop"""
        queue: asyncio.Queue = asyncio.Queue(maxsize=self._queue_size)
        with self._lock:
            self._subscribers.append((asyncio.get_running_loop(), queue))
        logger.debug(f"Board subscriber added ({len(self._subscribers)} total)")
        return queue

    def unsubscribe(self, queue: asyncio.Queue) -> None:
        with self._lock:
            self._subscribers = [(loop, q) for loop, q in self._subscribers if q is not queue]

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscribers)

    @staticmethod
    def _offer(queue: asyncio.Queue, board: TimerBoard):
        if queue.full():
            queue.get_nowait()
        queue.put_nowait(board)


def _running_loop() -> Optional[asyncio.AbstractEventLoop]:
    try:
        return asyncio.get_running_loop()
    except RuntimeError:
        return None
