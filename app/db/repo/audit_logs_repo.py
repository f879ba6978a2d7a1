from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.audit_logs import AuditLog


class AuditLogsRepo:
    @staticmethod
    async def create(
        session: AsyncSession,
        *,
        message: str,
        severity: str,
        user_id: int | None,
    ) -> AuditLog:
        entry = AuditLog(message=message, severity=severity, user_id=user_id)
        session.add(entry)
        await session.flush()
        return entry
