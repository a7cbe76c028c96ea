"""Timer endpoints"""
import asyncio
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import StreamingResponse

from proofmaster.api.deps import get_board_broadcaster, get_timer_registry
from proofmaster.models.timer import (
    TimerBoard,
    TimerCard,
    TimerConfig,
    TimerCount,
    TimerExtendRequest,
    TimerStartRequest,
)
from proofmaster.services.timer.broadcaster import TimerBoardBroadcaster
from proofmaster.services.timer.errors import (
    DuplicateTimerError,
    InvalidTimerConfigError,
    TimerNotFoundError,
)
from proofmaster.services.timer.timer_registry import TimerRegistry
from proofmaster.services.timer.views import build_timer_board, build_timer_card

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/timers", tags=["timers"])

STREAM_KEEPALIVE_SECONDS = 15


@router.post("", response_model=TimerCard, status_code=201)
async def start_timer(
    request: TimerStartRequest,
    registry: TimerRegistry = Depends(get_timer_registry),
):
    """Start a proofing or baking timer"""
    try:
        timer = registry.start(TimerConfig(**request.model_dump()))
    except DuplicateTimerError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except InvalidTimerConfigError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return build_timer_card(timer, registry.clock.now())


@router.get("", response_model=List[TimerCard])
async def list_timers(registry: TimerRegistry = Depends(get_timer_registry)):
    """All running timers as timer cards"""
    now = registry.clock.now()
    return [build_timer_card(timer, now) for timer in registry.list_timers()]


@router.get("/count", response_model=TimerCount)
async def count_timers(registry: TimerRegistry = Depends(get_timer_registry)):
    """Badge count"""
    return TimerCount(count=registry.count())


@router.get("/next", response_model=TimerCard)
async def get_next_timer(registry: TimerRegistry = Depends(get_timer_registry)):
    """The timer that finishes first"""
    timer = registry.next_to_complete()
    if timer is None:
        raise HTTPException(status_code=404, detail="No active timers")
    return build_timer_card(timer, registry.clock.now())


@router.get("/board", response_model=TimerBoard)
async def get_timer_board(registry: TimerRegistry = Depends(get_timer_registry)):
    """Timer cards, dashboard rows and badge count in one payload"""
    return build_timer_board(registry)


@router.get("/stream")
async def stream_timer_board(
    request: Request,
    registry: TimerRegistry = Depends(get_timer_registry),
    broadcaster: TimerBoardBroadcaster = Depends(get_board_broadcaster),
):
    """
    Stream the timer board as server-sent events.

    Sends the current board right away, then a new one after every timer
    change. A comment line keeps idle connections open.
    """
    queue = broadcaster.subscribe()

    async def event_stream():
        try:
            yield _board_event(build_timer_board(registry))
            while not await request.is_disconnected():
                try:
                    board = await asyncio.wait_for(queue.get(), timeout=STREAM_KEEPALIVE_SECONDS)
                except asyncio.TimeoutError:
                    yield ": keep-alive\n\n"
                    continue
                yield _board_event(board)
        finally:
            broadcaster.unsubscribe(queue)
            logger.debug("Timer board stream closed")

    return StreamingResponse(
        event_stream(),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
        }
    )


@router.get("/by-product/{product_id}", response_model=TimerCard)
async def get_timer_for_product(
    product_id: str,
    registry: TimerRegistry = Depends(get_timer_registry),
):
    timer = registry.find_by_product(product_id)
    if timer is None:
        raise HTTPException(status_code=404, detail="No active timer for this product")
    return build_timer_card(timer, registry.clock.now())


@router.get("/{timer_id}", response_model=TimerCard)
async def get_timer(timer_id: str, registry: TimerRegistry = Depends(get_timer_registry)):
    timer = registry.get(timer_id)
    if timer is None:
        raise HTTPException(status_code=404, detail=f"Timer {timer_id} not found")
    return build_timer_card(timer, registry.clock.now())


@router.post("/{timer_id}/extend", response_model=TimerCard)
async def extend_timer(
    timer_id: str,
    request: TimerExtendRequest,
    registry: TimerRegistry = Depends(get_timer_registry),
):
    """Add time to a running timer (+2 min / +5 min buttons)"""
    try:
        timer = registry.extend(timer_id, request.seconds)
    except TimerNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InvalidTimerConfigError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return build_timer_card(timer, registry.clock.now())


@router.delete("/{timer_id}", response_model=TimerCard)
async def stop_timer(timer_id: str, registry: TimerRegistry = Depends(get_timer_registry)):
    """
    Stop a timer without completing it.

    The UI asks the baker to confirm before calling this.
    """
    try:
        timer = registry.stop(timer_id)
    except TimerNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    return build_timer_card(timer, registry.clock.now())


def _board_event(board: TimerBoard) -> str:
    return f"event: board\ndata: {board.model_dump_json()}\n\n"
