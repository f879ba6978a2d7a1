from __future__ import annotations

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.audit_logs import AuditLog
from app.db.repo.audit_logs_repo import AuditLogsRepo

logger = structlog.get_logger(__name__)


async def append_log(
    session: AsyncSession,
    *,
    message: str,
    severity: str,
    user_id: int | None,
) -> AuditLog:
    entry = await AuditLogsRepo.create(session, message=message, severity=severity, user_id=user_id)
    logger.info("audit_log_appended", severity=severity, user_id=user_id)
    return entry
