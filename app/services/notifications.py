from __future__ import annotations

from dataclasses import dataclass

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.db.repo.notifications_repo import NotificationsRepo
from app.db.repo.users_repo import UsersRepo

logger = structlog.get_logger(__name__)


@dataclass(frozen=True, slots=True)
class NotificationRef:
    recipient_id: int
    notification_id: int | None
    persisted: bool


async def notify(
    session: AsyncSession,
    *,
    recipient_id: int,
    sender_id: int | None,
    type: str,
    sub_type: str,
    title: str,
    message: str,
    related_id: str | None = None,
    related_kind: str | None = None,
    priority: str = "medium",
) -> NotificationRef:
    if not get_settings().notifications_enabled:
        return NotificationRef(recipient_id=recipient_id, notification_id=None, persisted=False)

    notification = await NotificationsRepo.create(
        session,
        recipient_id=recipient_id,
        sender_id=sender_id,
        type=type,
        sub_type=sub_type,
        title=title,
        message=message,
        related_id=related_id,
        related_kind=related_kind,
        priority=priority,
    )
    return NotificationRef(recipient_id=recipient_id, notification_id=notification.id, persisted=True)


async def notify_by_role(
    session: AsyncSession,
    *,
    role: str,
    sender_id: int | None,
    type: str,
    sub_type: str,
    title: str,
    message: str,
    related_id: str | None = None,
    related_kind: str | None = None,
    priority: str = "medium",
) -> list[NotificationRef]:
    recipients = await UsersRepo.list_by_role(session, role)
    refs: list[NotificationRef] = []
    for recipient in recipients:
        refs.append(
            await notify(
                session,
                recipient_id=recipient.id,
                sender_id=sender_id,
                type=type,
                sub_type=sub_type,
                title=title,
                message=message,
                related_id=related_id,
                related_kind=related_kind,
                priority=priority,
            )
        )
    logger.info("role_notification_fanned_out", role=role, recipients=len(refs), sub_type=sub_type)
    return refs
