"""Notification service"""

from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from crm.exceptions import NotFoundError
from crm.models.notification import Notification
from crm.timeutils import utcnow

logger = logging.getLogger(__name__)

NOTIFICATION_LIST_LIMIT = 50


async def create_notification(
    db: AsyncSession,
    user_email: str,
    type: str,
    title: str,
    message: Optional[str] = None,
    related_task_id: Optional[int] = None,
    related_lead_id: Optional[int] = None,
) -> Notification:
    """Stage a notification; the caller owns the commit."""
    notification = Notification(
        user_email=user_email,
        type=type,
        title=title,
        message=message,
        related_task_id=related_task_id,
        related_lead_id=related_lead_id,
        is_read=False,
        created_at=utcnow(),
    )
    db.add(notification)
    await db.flush()
    return notification


async def list_notifications(db: AsyncSession, user_email: str) -> list[Notification]:
    result = await db.execute(
        select(Notification)
        .where(Notification.user_email == user_email)
        .order_by(Notification.created_at.desc(), Notification.id.desc())
        .limit(NOTIFICATION_LIST_LIMIT)
    )
    return list(result.scalars().all())


async def unread_count(db: AsyncSession, user_email: str) -> int:
    count = await db.scalar(
        select(func.count(Notification.id)).where(
            Notification.user_email == user_email,
            Notification.is_read.is_(False),
        )
    )
    return count or 0


async def mark_as_read(db: AsyncSession, notification_id: int, user_email: str) -> Notification:
    result = await db.execute(
        update(Notification)
        .where(Notification.id == notification_id, Notification.user_email == user_email)
        .values(is_read=True, read_at=utcnow())
    )
    if not result.rowcount:
        await db.rollback()
        raise NotFoundError("Notification not found")
    await db.commit()
    return await db.get(Notification, notification_id, populate_existing=True)


async def mark_all_as_read(db: AsyncSession, user_email: str) -> int:
    result = await db.execute(
        update(Notification)
        .where(Notification.user_email == user_email, Notification.is_read.is_(False))
        .values(is_read=True, read_at=utcnow())
    )
    await db.commit()
    return result.rowcount or 0


async def mark_task_notifications_read(db: AsyncSession, task_id: int, user_email: str) -> int:
    """Mark earlier unread task alerts for this assignee as read so only the newest stays unread"""
    result = await db.execute(
        update(Notification)
        .where(
            Notification.related_task_id == task_id,
            Notification.user_email == user_email,
            Notification.type.in_(("task_assigned", "task_updated")),
            Notification.is_read.is_(False),
        )
        .values(is_read=True, read_at=utcnow())
    )
    return result.rowcount or 0


async def delete_notification(db: AsyncSession, notification_id: int, user_email: str) -> None:
    result = await db.execute(
        delete(Notification).where(
            Notification.id == notification_id,
            Notification.user_email == user_email,
        )
    )
    if not result.rowcount:
        await db.rollback()
        raise NotFoundError("Notification not found")
    await db.commit()
