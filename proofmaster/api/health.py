"""Health check endpoints"""

from fastapi import APIRouter, Depends

from proofmaster.api.deps import get_timer_registry
from proofmaster.services.timer.timer_registry import TimerRegistry

router = APIRouter(prefix="/api/health", tags=["health"])


@router.get("/")
async def health_check(registry: TimerRegistry = Depends(get_timer_registry)):
    """Basic health check endpoint"""
    return {
        "status": "healthy",
        "service": "proofmaster",
        "active_timers": registry.count(),
    }
