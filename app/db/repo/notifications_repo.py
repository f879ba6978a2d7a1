from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.notifications import Notification


class NotificationsRepo:
    @staticmethod
    async def create(
        session: AsyncSession,
        *,
        recipient_id: int,
        sender_id: int | None,
        type: str,
        sub_type: str,
        title: str,
        message: str,
        related_id: str | None,
        related_kind: str | None,
        priority: str,
    ) -> Notification:
        notification = Notification(
            recipient_id=recipient_id,
            sender_id=sender_id,
            type=type,
            sub_type=sub_type,
            title=title,
            message=message,
            related_id=related_id,
            related_kind=related_kind,
            priority=priority,
            is_read=False,
        )
        session.add(notification)
        await session.flush()
        return notification
