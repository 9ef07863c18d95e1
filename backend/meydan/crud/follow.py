import uuid

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.follow import Follow


class FollowRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def list_following(self, follower_id: uuid.UUID, limit: int = 50) -> list[Follow]:
        result = await self.session.execute(
            select(Follow)
            .where(Follow.follower_id == follower_id)
            .order_by(Follow.created_at.desc())
            .limit(limit)
        )
        return list(result.scalars().all())

    async def remove(self, follower_id: uuid.UUID, following_id: uuid.UUID) -> bool:
        result = await self.session.execute(
            delete(Follow).where(
                Follow.follower_id == follower_id,
                Follow.following_id == following_id,
            )
        )
        return result.rowcount > 0
