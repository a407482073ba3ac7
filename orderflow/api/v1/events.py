"""
Event log, notifications and state metrics.
"""

from typing import List, Optional

from fastapi import APIRouter, HTTPException, Query, status

from orderflow.api.deps import Coordinator, Notifications
from orderflow.kernel.models.event_log import EventRecord
from orderflow.orchestration.reactions import Notification
from orderflow.schemas.common import SuccessResponse
from orderflow.schemas.order import StateCountsResponse

router = APIRouter()


@router.get("/events", response_model=List[EventRecord])
async def list_events(
    coordinator: Coordinator,
    event_type: Optional[str] = Query(None, alias="type"),
):
    """Published events, oldest first."""
    return list(coordinator.bus.history(event_type))


@router.get("/notifications/{recipient}", response_model=List[Notification])
async def list_notifications(
    recipient: str,
    notifications: Notifications,
    unread_only: bool = False,
):
    """Notifications of a department, newest first."""
    return notifications.for_recipient(recipient, unread_only=unread_only)


@router.post("/notifications/{notification_id}/read", response_model=SuccessResponse)
async def mark_notification_read(notification_id: str, notifications: Notifications):
    """Mark a notification as read."""
    if not notifications.mark_read(notification_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Notification not found",
        )
    return SuccessResponse(message="Notification marked as read")


@router.get("/metrics/states", response_model=StateCountsResponse)
async def state_metrics(coordinator: Coordinator):
    """Order counts per department and state."""
    return coordinator.state_counts()
