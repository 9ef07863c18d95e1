from __future__ import annotations

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..crud.profile import ProfileRepository
from ..errors import RoleResolutionError
from .identity import Identity

logger = logging.getLogger(__name__)


def _role_hint(value: object) -> str | None:
    if isinstance(value, str) and value:
        return value
    return None


async def resolve_role(session: AsyncSession, identity: Identity) -> str | None:
    """Resolve the caller's role, fresh, for the current request.

    Precedence: profile row, then provider app metadata, then provider user
    metadata. A missing row or empty hint falls through; a store error does
    not, it raises ``RoleResolutionError`` so the request fails loudly instead
    of running with a guessed role.
    """
    try:
        _, profile_role = await ProfileRepository(session).get_role(identity.id)
    except SQLAlchemyError as exc:
        logger.error("Role lookup failed for user %s: %s", identity.id, exc)
        raise RoleResolutionError() from exc

    for candidate in (
        profile_role,
        identity.app_metadata_role,
        identity.user_metadata_role,
    ):
        role = _role_hint(candidate)
        if role is not None:
            return role
    return None
