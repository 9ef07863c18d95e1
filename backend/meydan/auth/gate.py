"""
Authorization gate - the one choke point in front of privileged routes.

``authorize`` returns a tagged result instead of raising, so callers outside
FastAPI (scripts, tests, other services) must handle both outcomes. The
``require_*`` dependencies unwrap that result for routes: an ``Err`` is raised
as its ``AuthorizationError`` and rendered by the application error handler.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Generic, TypeVar, Union

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from ..dependencies import get_db
from ..errors import AuthorizationError, AuthorizationErrorKind
from .identity import Identity, get_current_identity
from .resolver import resolve_role
from .roles import AppRole, has_minimum_role

logger = logging.getLogger(__name__)

T = TypeVar("T")
E = TypeVar("E")


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T


@dataclass(frozen=True)
class Err(Generic[E]):
    error: E


@dataclass(frozen=True)
class AuthorizationContext:
    """Result of a passed gate check; lives for one request only."""

    session: AsyncSession
    identity: Identity
    role: str


AuthorizationResult = Union[Ok[AuthorizationContext], Err[AuthorizationError]]


async def authorize(
    session: AsyncSession,
    identity: Identity | None,
    minimum: AppRole,
) -> AuthorizationResult:
    if identity is None:
        return Err(AuthorizationError(AuthorizationErrorKind.UNAUTHENTICATED))

    try:
        role = await resolve_role(session, identity)
    except AuthorizationError as exc:
        return Err(exc)

    if not has_minimum_role(role, minimum):
        logger.warning(
            "Denied user %s (%s) with role %r (requires %s)",
            identity.id,
            identity.email or "no email",
            role,
            minimum.value,
        )
        return Err(AuthorizationError(AuthorizationErrorKind.FORBIDDEN))

    assert role is not None
    return Ok(AuthorizationContext(session=session, identity=identity, role=role))


def require_role(minimum: AppRole) -> Callable:
    async def dependency(
        request: Request,
        db: AsyncSession = Depends(get_db),
        identity: Identity | None = Depends(get_current_identity),
    ) -> AuthorizationContext:
        result = await authorize(db, identity, minimum)
        if isinstance(result, Err):
            logger.info(
                "Gate rejected %s %s: %s",
                request.method,
                request.url.path,
                result.error.kind.value,
            )
            raise result.error
        return result.value

    return dependency


def ensure_role(context: AuthorizationContext, minimum: AppRole) -> AuthorizationContext:
    """Re-check an already authorized context against a stricter minimum."""
    if not has_minimum_role(context.role, minimum):
        logger.warning(
            "Denied user %s (%s) with role %r (requires %s)",
            context.identity.id,
            context.identity.email or "no email",
            context.role,
            minimum.value,
        )
        raise AuthorizationError(AuthorizationErrorKind.FORBIDDEN)
    return context


require_moderator = require_role(AppRole.MODERATOR)
require_admin = require_role(AppRole.ADMIN)
require_ultra_admin = require_role(AppRole.ULTRA_ADMIN)
