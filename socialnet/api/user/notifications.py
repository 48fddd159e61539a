from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, ConfigDict

from socialnet.core.deps import CurrentUserDep, NotificationServiceDep, get_current_user_id

router = APIRouter(tags=["notifications"])


class NotificationSchema(BaseModel):
    id: str
    type: str
    actor_id: Optional[str] = None
    payload: Optional[dict] = None
    is_read: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class NotificationListResponse(BaseModel):
    unread_count: int
    notifications: List[NotificationSchema]


class MarkAllReadResponse(BaseModel):
    updated: int


@router.get("/user/notifications", response_model=NotificationListResponse)
async def list_notifications(
    notifications: NotificationServiceDep,
    unread_only: bool = Query(False),
    limit: Optional[int] = Query(None, ge=1, le=200),
    user_id: str = Depends(get_current_user_id),
):
    items = await notifications.list_for_user(user_id, unread_only=unread_only, limit=limit)
    return NotificationListResponse(
        unread_count=await notifications.unread_count(user_id),
        notifications=items,
    )


@router.post("/user/notifications/read-all", response_model=MarkAllReadResponse)
async def mark_all_notifications_read(
    notifications: NotificationServiceDep,
    user_id: CurrentUserDep,
):
    return MarkAllReadResponse(updated=await notifications.mark_all_read(user_id))


@router.post("/user/notifications/{notification_id}/read", response_model=NotificationSchema)
async def mark_notification_read(
    notification_id: str,
    notifications: NotificationServiceDep,
    user_id: CurrentUserDep,
):
    return await notifications.mark_read(user_id, notification_id)
