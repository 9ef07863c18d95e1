import uuid
from datetime import datetime, timedelta, timezone

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.auth_user import AuthUser


# Effectively permanent; matches the identity provider's "876000h" ban.
PERMANENT_BAN = timedelta(hours=876000)


class AuthUserRepository:
    """Identity-provider account operations available to the admin API."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, user_id: uuid.UUID) -> AuthUser | None:
        return await self.session.get(AuthUser, user_id)

    async def list_all(self, limit: int = 1000) -> list[AuthUser]:
        result = await self.session.execute(
            select(AuthUser).order_by(AuthUser.created_at.desc()).limit(limit)
        )
        return list(result.scalars().all())

    async def ban(
        self,
        user_id: uuid.UUID,
        duration: timedelta = PERMANENT_BAN,
        *,
        now: datetime | None = None,
    ) -> bool:
        banned_until = (now or datetime.now(timezone.utc)) + duration
        return await self._set_banned_until(user_id, banned_until)

    async def unban(self, user_id: uuid.UUID) -> bool:
        return await self._set_banned_until(user_id, None)

    async def _set_banned_until(
        self, user_id: uuid.UUID, banned_until: datetime | None
    ) -> bool:
        result = await self.session.execute(
            update(AuthUser)
            .where(AuthUser.id == user_id)
            .values(banned_until=banned_until)
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount > 0
