"""FastAPI dependencies for the services owned by the application"""
from fastapi import Request

from proofmaster.services.notification_service import NotificationService
from proofmaster.services.production.production_service import ProductionService
from proofmaster.services.timer.broadcaster import TimerBoardBroadcaster
from proofmaster.services.timer.timer_registry import TimerRegistry


def get_timer_registry(request: Request) -> TimerRegistry:
    return request.app.state.timer_registry


def get_board_broadcaster(request: Request) -> TimerBoardBroadcaster:
    return request.app.state.board_broadcaster


def get_notification_service(request: Request) -> NotificationService:
    return request.app.state.notification_service


def get_production_service(request: Request) -> ProductionService:
    return request.app.state.production_service
