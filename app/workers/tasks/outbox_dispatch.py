from __future__ import annotations

from datetime import datetime, timezone

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.db.models.outbox_events import OutboxEvent
from app.db.repo.outbox_events_repo import OutboxEventsRepo
from app.db.session import SessionLocal
from app.services import messaging, notifications
from app.services.outbox import (
    EVENT_EMAIL,
    EVENT_NOTIFICATION,
    EVENT_NOTIFICATION_BY_ROLE,
    EVENT_SMS,
)
from app.workers.asyncio_runner import run_async_job
from app.workers.celery_app import celery_app

logger = structlog.get_logger(__name__)
OUTBOX_DISPATCH_INTERVAL_SECONDS = 30.0


class OutboxDeliveryError(Exception):
    pass


async def _deliver(session: AsyncSession, event: OutboxEvent) -> None:
    payload = dict(event.payload)
    settings = get_settings()
    if event.event_type == EVENT_NOTIFICATION:
        await notifications.notify(session, **payload)
    elif event.event_type == EVENT_NOTIFICATION_BY_ROLE:
        await notifications.notify_by_role(session, **payload)
    elif event.event_type == EVENT_EMAIL:
        if settings.email_enabled and not await messaging.send_email(
            to=str(payload["to"]),
            subject=str(payload["subject"]),
            body=str(payload["body"]),
        ):
            raise OutboxDeliveryError("email delivery failed")
    elif event.event_type == EVENT_SMS:
        if settings.sms_enabled and not await messaging.send_sms(
            phone=str(payload["phone"]),
            message=str(payload["message"]),
        ):
            raise OutboxDeliveryError("sms delivery failed")
    else:
        raise OutboxDeliveryError(f"unknown outbox event type: {event.event_type}")


async def dispatch_outbox_events_async(*, batch_size: int | None = None) -> dict[str, int]:
    settings = get_settings()
    resolved_batch_size = max(1, int(batch_size or settings.outbox_batch_size))
    max_attempts = max(1, int(settings.outbox_max_attempts))
    now_utc = datetime.now(timezone.utc)
    result = {"claimed": 0, "sent": 0, "retried": 0, "failed": 0}

    async with SessionLocal.begin() as session:
        events = await OutboxEventsRepo.claim_pending(session, limit=resolved_batch_size)
        result["claimed"] = len(events)
        for event in events:
            try:
                async with session.begin_nested():
                    await _deliver(session, event)
            except Exception as exc:
                event.attempts = int(event.attempts or 0) + 1
                event.last_error = str(exc)[:500]
                if event.attempts >= max_attempts:
                    event.status = "FAILED"
                    event.processed_at = now_utc
                    result["failed"] += 1
                else:
                    result["retried"] += 1
                logger.warning(
                    "outbox_event_delivery_failed",
                    outbox_event_id=event.id,
                    event_type=event.event_type,
                    attempts=event.attempts,
                    exc_info=True,
                )
                continue
            event.status = "SENT"
            event.processed_at = now_utc
            result["sent"] += 1

    logger.info("outbox_dispatch_finished", **result)
    return result


@celery_app.task(name="app.workers.tasks.outbox_dispatch.dispatch_outbox_events")
def dispatch_outbox_events(batch_size: int | None = None) -> dict[str, int]:
    return run_async_job(
        dispatch_outbox_events_async(batch_size=batch_size),
        job_name="dispatch_outbox_events",
    )


celery_app.conf.beat_schedule = celery_app.conf.beat_schedule or {}
celery_app.conf.beat_schedule.update(
    {
        "outbox-dispatch-every-30s": {
            "task": "app.workers.tasks.outbox_dispatch.dispatch_outbox_events",
            "schedule": OUTBOX_DISPATCH_INTERVAL_SECONDS,
            "options": {"queue": "q_normal"},
        },
    }
)
