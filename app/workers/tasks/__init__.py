from app.workers.tasks.daily_summaries import send_daily_commitment_summaries
from app.workers.tasks.outbox_dispatch import dispatch_outbox_events

__all__ = [
    "dispatch_outbox_events",
    "send_daily_commitment_summaries",
]
