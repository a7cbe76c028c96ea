# API module exports
from proofmaster.api import health, notifications, production, timers
from proofmaster.api.base import api_router

__all__ = ["health", "notifications", "production", "timers", "api_router"]
