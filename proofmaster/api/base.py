from fastapi import APIRouter
from proofmaster.api import health, notifications, production, timers

api_router = APIRouter()

# Include all sub-routers
api_router.include_router(health.router)
api_router.include_router(timers.router)
api_router.include_router(production.router)
api_router.include_router(notifications.router)
