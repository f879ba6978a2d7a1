from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from typing import Any

import structlog
from celery.schedules import crontab

from app.commitments.daily_summary import summary_day
from app.commitments.types import Role, to_money
from app.core.config import get_settings
from app.db.models.daily_commitment_summaries import DailyCommitmentSummary
from app.db.repo.daily_summaries_repo import DailySummariesRepo
from app.db.repo.users_repo import UsersRepo
from app.db.session import SessionLocal
from app.services.outbox import OutboxService
from app.workers.asyncio_runner import run_async_job
from app.workers.celery_app import celery_app
from app.workers.tasks import daily_summary_text

logger = structlog.get_logger(__name__)
DAILY_SUMMARY_BATCH_SIZE = 500
DAILY_SUMMARY_HOUR_LOCAL = 20
DAILY_SUMMARY_MINUTE_LOCAL = 0


def aggregate_by_distributor(
    summaries: list[DailyCommitmentSummary],
    *,
    distributor_names: dict[int, str],
) -> list[dict[str, Any]]:
    rows: dict[int, dict[str, Any]] = {}
    members: dict[int, set[int]] = {}
    for summary in summaries:
        row = rows.setdefault(
            summary.distributor_id,
            {
                "distributor_name": distributor_names.get(summary.distributor_id, "Unknown distributor"),
                "total_commitments": 0,
                "total_quantity": 0,
                "total_amount": Decimal("0"),
            },
        )
        row["total_commitments"] += int(summary.total_commitments)
        row["total_quantity"] += int(summary.total_quantity)
        row["total_amount"] = to_money(row["total_amount"] + to_money(summary.total_amount))
        members.setdefault(summary.distributor_id, set()).add(summary.user_id)
    for distributor_id, row in rows.items():
        row["unique_members"] = len(members[distributor_id])
    return list(rows.values())


async def send_daily_commitment_summaries_async(*, now_utc: datetime | None = None) -> dict[str, object]:
    now_utc = now_utc or datetime.now(timezone.utc)
    day = summary_day(now_utc, timezone_name=get_settings().business_timezone)
    emails_enqueued = 0

    async with SessionLocal.begin() as session:
        summaries = await DailySummariesRepo.list_unsent_for_day_for_update(
            session,
            summary_date=day,
            limit=DAILY_SUMMARY_BATCH_SIZE,
        )
        if not summaries:
            logger.info("daily_commitment_summaries_empty", summary_date=day.isoformat())
            return {"summary_date": day.isoformat(), "summaries": 0, "emails_enqueued": 0}

        user_ids = {summary.user_id for summary in summaries} | {
            summary.distributor_id for summary in summaries
        }
        users = {user.id: user for user in await UsersRepo.list_by_ids(session, list(user_ids))}
        distributor_names = {
            user_id: (user.business_name or user.name) for user_id, user in users.items()
        }

        admin_body = daily_summary_text.build_admin_summary(
            aggregate_by_distributor(summaries, distributor_names=distributor_names)
        )
        for admin in await UsersRepo.list_by_role(session, Role.ADMIN.value):
            if admin.email:
                await OutboxService.enqueue_email(
                    session,
                    to=admin.email,
                    subject=daily_summary_text.ADMIN_SUBJECT,
                    body=admin_body,
                )
                emails_enqueued += 1

        for summary in summaries:
            member = users.get(summary.user_id)
            distributor = users.get(summary.distributor_id)
            member_name = member.name if member is not None else "Member"
            total_amount = to_money(summary.total_amount)
            if member is not None and member.email:
                await OutboxService.enqueue_email(
                    session,
                    to=member.email,
                    subject=daily_summary_text.MEMBER_SUBJECT,
                    body=daily_summary_text.build_member_summary(
                        member_name=member_name,
                        snapshots=summary.commitments,
                        total_quantity=summary.total_quantity,
                        total_amount=total_amount,
                    ),
                )
                emails_enqueued += 1
            if distributor is not None and distributor.email:
                await OutboxService.enqueue_email(
                    session,
                    to=distributor.email,
                    subject=daily_summary_text.DISTRIBUTOR_SUBJECT,
                    body=daily_summary_text.build_distributor_summary(
                        distributor_name=distributor_names[distributor.id],
                        member_name=member_name,
                        snapshots=summary.commitments,
                        total_quantity=summary.total_quantity,
                        total_amount=total_amount,
                    ),
                )
                emails_enqueued += 1
            summary.email_sent = True
            summary.updated_at = now_utc

    result: dict[str, object] = {
        "summary_date": day.isoformat(),
        "summaries": len(summaries),
        "emails_enqueued": emails_enqueued,
    }
    logger.info("daily_commitment_summaries_finished", **result)
    return result


@celery_app.task(name="app.workers.tasks.daily_summaries.send_daily_commitment_summaries")
def send_daily_commitment_summaries() -> dict[str, object]:
    return run_async_job(
        send_daily_commitment_summaries_async(),
        job_name="send_daily_commitment_summaries",
    )


celery_app.conf.beat_schedule = celery_app.conf.beat_schedule or {}
celery_app.conf.beat_schedule.update(
    {
        "daily-commitment-summaries": {
            "task": "app.workers.tasks.daily_summaries.send_daily_commitment_summaries",
            "schedule": crontab(hour=DAILY_SUMMARY_HOUR_LOCAL, minute=DAILY_SUMMARY_MINUTE_LOCAL),
            "options": {"queue": "q_low"},
        },
    }
)
