from app.db.models.audit_logs import AuditLog
from app.db.models.commitments import Commitment
from app.db.models.daily_commitment_summaries import DailyCommitmentSummary
from app.db.models.deals import Deal
from app.db.models.notifications import Notification
from app.db.models.outbox_events import OutboxEvent
from app.db.models.users import User

__all__ = [
    "AuditLog",
    "Commitment",
    "DailyCommitmentSummary",
    "Deal",
    "Notification",
    "OutboxEvent",
    "User",
]
