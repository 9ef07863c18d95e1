import uuid
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.audit_log import AdminAuditLog


class AuditLogRepository:
    """Insert and read access to the admin audit trail.

    Insert and read only; rows are never updated or deleted.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(
        self,
        actor_user_id: uuid.UUID,
        action: str,
        entity_type: str,
        target_user_id: uuid.UUID | None = None,
        entity_id: str | None = None,
        metadata: dict[str, Any] | None = None,
        ip: str | None = None,
        user_agent: str | None = None,
    ) -> AdminAuditLog:
        audit_log = AdminAuditLog(
            actor_user_id=actor_user_id,
            target_user_id=target_user_id,
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            metadata_=metadata or {},
            ip=ip,
            user_agent=user_agent,
        )
        self.session.add(audit_log)
        # Flush only: the caller commits the business change and the audit
        # row together.
        await self.session.flush()
        await self.session.refresh(audit_log)
        return audit_log

    async def count(self) -> int:
        result = await self.session.execute(
            select(func.count()).select_from(AdminAuditLog)
        )
        return int(result.scalar_one())

    async def list_page(self, limit: int, offset: int) -> list[AdminAuditLog]:
        result = await self.session.execute(
            select(AdminAuditLog)
            .order_by(AdminAuditLog.created_at.desc(), AdminAuditLog.id)
            .limit(limit)
            .offset(offset)
        )
        return list(result.scalars().all())
