"""Notifications API endpoints (scoped to the calling user)"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from crm.database import get_db
from crm.middleware.identity import get_user_email
from crm.schemas.common import Envelope, MessageResponse, ok
from crm.schemas.notification import NotificationResponse, UnreadCountResponse
from crm.services import notification_service

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("", response_model=Envelope[list[NotificationResponse]])
async def list_notifications(user_email: str = Depends(get_user_email), db: AsyncSession = Depends(get_db)):
    """Latest 50 notifications, newest first"""
    notifications = await notification_service.list_notifications(db, user_email)
    return ok([NotificationResponse.model_validate(n) for n in notifications], count=len(notifications))


@router.get("/unread-count", response_model=Envelope[UnreadCountResponse])
async def unread_count(user_email: str = Depends(get_user_email), db: AsyncSession = Depends(get_db)):
    return ok({"count": await notification_service.unread_count(db, user_email)})


@router.patch("/read-all", response_model=MessageResponse)
async def mark_all_read(user_email: str = Depends(get_user_email), db: AsyncSession = Depends(get_db)):
    updated = await notification_service.mark_all_as_read(db, user_email)
    return {"success": True, "message": f"{updated} notification(s) marked as read"}


@router.patch("/{notification_id}/read", response_model=Envelope[NotificationResponse])
async def mark_read(
    notification_id: int,
    user_email: str = Depends(get_user_email),
    db: AsyncSession = Depends(get_db),
):
    notification = await notification_service.mark_as_read(db, notification_id, user_email)
    return ok(NotificationResponse.model_validate(notification))


@router.delete("/{notification_id}", response_model=MessageResponse)
async def delete_notification(
    notification_id: int,
    user_email: str = Depends(get_user_email),
    db: AsyncSession = Depends(get_db),
):
    await notification_service.delete_notification(db, notification_id, user_email)
    return {"success": True, "message": "Notification deleted"}
