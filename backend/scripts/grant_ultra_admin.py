"""
Promote an existing account to ultra_admin.

Role changes through the admin API require an ultra_admin, so the first one has
to be created out of band. The promotion is audited like any other role change,
with the promoted account recorded as both actor and target.

Usage:
    python -m scripts.grant_ultra_admin <user-id>
"""
import argparse
import asyncio
import logging
import os
import sys
import uuid

# Add parent directory to path to import meydan modules
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy.ext.asyncio import AsyncSession

from meydan.auth.roles import AppRole
from meydan.crud.auth_user import AuthUserRepository
from meydan.crud.profile import ProfileRepository
from meydan.database import dispose_engine, get_sessionmaker
from meydan.errors import NotFoundError
from meydan.services.audit import AuditEntry, AuditService

logger = logging.getLogger("meydan.scripts.grant_ultra_admin")

BOOTSTRAP_ACTION = "admin.user.role.bootstrap"
SCRIPT_USER_AGENT = "scripts.grant_ultra_admin"


async def grant_ultra_admin(session: AsyncSession, user_id: uuid.UUID) -> str | None:
    """Set the profile role to ultra_admin and audit it. Returns the previous role."""
    if await AuthUserRepository(session).get_by_id(user_id) is None:
        raise NotFoundError("User not found.")

    profiles = ProfileRepository(session)
    found, previous_role = await profiles.get_role(user_id)
    if found:
        await profiles.update_role(user_id, AppRole.ULTRA_ADMIN.value)
    else:
        await profiles.create(user_id, AppRole.ULTRA_ADMIN.value)

    await AuditService(session).record(
        AuditEntry(
            actor_user_id=user_id,
            target_user_id=user_id,
            action=BOOTSTRAP_ACTION,
            entity_type="profile",
            entity_id=user_id,
            metadata={"fromRole": previous_role, "toRole": AppRole.ULTRA_ADMIN.value},
            user_agent=SCRIPT_USER_AGENT,
        )
    )
    await session.commit()
    return previous_role


async def main(user_id: uuid.UUID) -> None:
    try:
        async with get_sessionmaker()() as session:
            previous_role = await grant_ultra_admin(session, user_id)
        logger.info("Granted ultra_admin to %s (was %r)", user_id, previous_role)
    finally:
        await dispose_engine()


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Grant the ultra_admin role to a user.")
    parser.add_argument("user_id", type=uuid.UUID, help="Account id (UUID)")
    return parser.parse_args(argv)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s %(message)s")
    args = parse_args()
    try:
        asyncio.run(main(args.user_id))
    except NotFoundError as exc:
        logger.error("%s", exc.message)
        sys.exit(1)
