"""Notification feed endpoints"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from proofmaster.api.deps import get_notification_service
from proofmaster.models.notification import Notification
from proofmaster.services.notification_service import NotificationService

router = APIRouter(prefix="/api/notifications", tags=["notifications"])


@router.get("", response_model=List[Notification])
async def get_notifications(
    after_id: Optional[int] = Query(None, description="Only notifications newer than this id"),
    limit: Optional[int] = Query(None, ge=1, le=500),
    service: NotificationService = Depends(get_notification_service),
):
    """
    Poll toasts and alerts.

    The UI keeps the last id it has shown and passes it as after_id.
    """
    return service.recent(after_id=after_id, limit=limit)
