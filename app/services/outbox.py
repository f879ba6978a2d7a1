from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.outbox_events import OutboxEvent
from app.db.repo.outbox_events_repo import OutboxEventsRepo

EVENT_NOTIFICATION = "notification"
EVENT_NOTIFICATION_BY_ROLE = "notification_by_role"
EVENT_EMAIL = "email"
EVENT_SMS = "sms"


class OutboxService:
    @staticmethod
    async def enqueue_notification(
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
    ) -> OutboxEvent:
        return await OutboxEventsRepo.create(
            session,
            event_type=EVENT_NOTIFICATION,
            payload={
                "recipient_id": recipient_id,
                "sender_id": sender_id,
                "type": type,
                "sub_type": sub_type,
                "title": title,
                "message": message,
                "related_id": related_id,
                "related_kind": related_kind,
                "priority": priority,
            },
        )

    @staticmethod
    async def enqueue_role_notification(
        session: AsyncSession,
        *,
        role: str,
        sender_id: int | None,
        type: str,
        sub_type: str,
        title: str,
        message: str,
        related_id: str | None,
        related_kind: str | None,
        priority: str,
    ) -> OutboxEvent:
        return await OutboxEventsRepo.create(
            session,
            event_type=EVENT_NOTIFICATION_BY_ROLE,
            payload={
                "role": role,
                "sender_id": sender_id,
                "type": type,
                "sub_type": sub_type,
                "title": title,
                "message": message,
                "related_id": related_id,
                "related_kind": related_kind,
                "priority": priority,
            },
        )

    @staticmethod
    async def enqueue_email(session: AsyncSession, *, to: str, subject: str, body: str) -> OutboxEvent:
        return await OutboxEventsRepo.create(
            session,
            event_type=EVENT_EMAIL,
            payload={"to": to, "subject": subject, "body": body},
        )

    @staticmethod
    async def enqueue_sms(session: AsyncSession, *, phone: str, message: str) -> OutboxEvent:
        return await OutboxEventsRepo.create(
            session,
            event_type=EVENT_SMS,
            payload={"phone": phone, "message": message},
        )
