from app.db.repo.audit_logs_repo import AuditLogsRepo
from app.db.repo.commitments_repo import CommitmentsRepo
from app.db.repo.daily_summaries_repo import DailySummariesRepo
from app.db.repo.deals_repo import DealsRepo
from app.db.repo.notifications_repo import NotificationsRepo
from app.db.repo.outbox_events_repo import OutboxEventsRepo
from app.db.repo.users_repo import UsersRepo

__all__ = [
    "AuditLogsRepo",
    "CommitmentsRepo",
    "DailySummariesRepo",
    "DealsRepo",
    "NotificationsRepo",
    "OutboxEventsRepo",
    "UsersRepo",
]
