import uuid
from collections.abc import Sequence

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.profile import Profile


class ProfileRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, user_id: uuid.UUID) -> Profile | None:
        return await self.session.get(Profile, user_id)

    async def get_role(self, user_id: uuid.UUID) -> tuple[bool, str | None]:
        """Return ``(found, role)`` for a single profile row."""
        result = await self.session.execute(
            select(Profile.role).where(Profile.id == user_id)
        )
        row = result.first()
        if row is None:
            return False, None
        return True, row[0]

    async def list_by_ids(self, user_ids: Sequence[uuid.UUID]) -> list[Profile]:
        if not user_ids:
            return []
        result = await self.session.execute(
            select(Profile).where(Profile.id.in_(user_ids))
        )
        return list(result.scalars().all())

    async def update_role(self, user_id: uuid.UUID, role: str) -> bool:
        result = await self.session.execute(
            update(Profile)
            .where(Profile.id == user_id)
            .values(role=role)
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount > 0

    async def create(self, user_id: uuid.UUID, role: str | None = None) -> Profile:
        profile = Profile(id=user_id, role=role)
        self.session.add(profile)
        await self.session.flush()
        return profile
