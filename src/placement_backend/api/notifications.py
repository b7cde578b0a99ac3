"""Notification inbox API endpoints."""

from typing import Dict, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from placement_backend.auth.dependencies import get_current_user
from placement_backend.auth.models import CurrentUser
from placement_backend.schemas.notification import NotificationListResponse, NotificationResponse
from placement_backend.services.notification_service import NotificationService
from .dependencies import get_notification_service

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("", response_model=NotificationListResponse)
async def list_notifications(
    is_read: Optional[bool] = Query(None, description="Filter by read state"),
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
    current_user: CurrentUser = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service)
):
    return service.list_for_user(current_user.user_id, is_read=is_read, skip=skip, limit=limit)


@router.get("/unread-count")
async def unread_count(
    current_user: CurrentUser = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service)
) -> Dict[str, int]:
    return {"unread_count": service.unread_count(current_user.user_id)}


@router.put("/read-all")
async def mark_all_read(
    current_user: CurrentUser = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service)
) -> Dict[str, int]:
    """Mark every unread notification of the caller as read."""
    return {"updated": service.mark_all_as_read(current_user.user_id)}


@router.put("/{notification_id}/read", response_model=NotificationResponse)
async def mark_read(
    notification_id: UUID,
    current_user: CurrentUser = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service)
):
    """Mark one of the caller's notifications as read."""
    return service.mark_as_read(notification_id, current_user.user_id)


@router.delete("/clear-read")
async def clear_read(
    current_user: CurrentUser = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service)
) -> Dict[str, int]:
    """Delete every notification the caller has already read."""
    return {"deleted": service.clear_read(current_user.user_id)}


@router.delete("/{notification_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_notification(
    notification_id: UUID,
    current_user: CurrentUser = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service)
):
    service.delete_notification(notification_id, current_user.user_id)
