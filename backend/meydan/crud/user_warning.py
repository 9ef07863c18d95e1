import uuid
from datetime import datetime

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.user_warning import ModerationWarning


class UserWarningRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def list_for_user(self, user_id: uuid.UUID, limit: int = 50) -> list[ModerationWarning]:
        result = await self.session.execute(
            select(ModerationWarning)
            .where(ModerationWarning.user_id == user_id)
            .order_by(ModerationWarning.created_at.desc())
            .limit(limit)
        )
        return list(result.scalars().all())

    async def create(
        self,
        user_id: uuid.UUID,
        created_by_admin_id: uuid.UUID,
        reason: str,
        severity: str,
        expires_at: datetime | None = None,
    ) -> ModerationWarning:
        warning = ModerationWarning(
            user_id=user_id,
            created_by_admin_id=created_by_admin_id,
            reason=reason,
            severity=severity,
            expires_at=expires_at,
        )
        self.session.add(warning)
        await self.session.flush()
        await self.session.refresh(warning)
        return warning

    async def delete(self, warning_id: uuid.UUID, user_id: uuid.UUID) -> bool:
        result = await self.session.execute(
            delete(ModerationWarning).where(
                ModerationWarning.id == warning_id,
                ModerationWarning.user_id == user_id,
            )
        )
        return result.rowcount > 0
