"""Tests for the authorization gate."""
import logging
import uuid
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncSession

from meydan.auth.gate import (
    AuthorizationContext,
    Err,
    Ok,
    authorize,
    ensure_role,
    require_role,
)
from meydan.auth.identity import Identity
from meydan.auth.roles import AppRole
from meydan.errors import AuthorizationError, AuthorizationErrorKind, RoleResolutionError


@pytest.fixture
def identity() -> Identity:
    return Identity(id=uuid.uuid4(), email="staff@example.com")


def _patch_role(role=None, *, side_effect=None):
    return patch(
        "meydan.auth.gate.resolve_role",
        AsyncMock(return_value=role, side_effect=side_effect),
    )


class TestAuthorize:
    @pytest.mark.anyio
    @pytest.mark.parametrize("minimum", list(AppRole))
    async def test_no_identity_is_unauthenticated(self, minimum):
        with _patch_role("admin") as resolve:
            result = await authorize(MagicMock(spec=AsyncSession), None, minimum)

        assert isinstance(result, Err)
        assert result.error.kind is AuthorizationErrorKind.UNAUTHENTICATED
        assert result.error.status_code == 401
        resolve.assert_not_called()

    @pytest.mark.anyio
    @pytest.mark.parametrize(
        "role, minimum",
        [
            ("moderator", AppRole.ADMIN),
            ("admin", AppRole.ULTRA_ADMIN),
            ("user", AppRole.MODERATOR),
            (None, AppRole.USER),
            ("superuser", AppRole.USER),
        ],
    )
    async def test_insufficient_role_is_forbidden(self, identity, role, minimum):
        with _patch_role(role):
            result = await authorize(MagicMock(spec=AsyncSession), identity, minimum)

        assert isinstance(result, Err)
        assert result.error.kind is AuthorizationErrorKind.FORBIDDEN
        assert result.error.status_code == 403
        assert result.error.message == "Insufficient admin privileges."

    @pytest.mark.anyio
    @pytest.mark.parametrize(
        "role, minimum",
        [
            ("moderator", AppRole.MODERATOR),
            ("admin", AppRole.MODERATOR),
            ("ultra_admin", AppRole.ADMIN),
            ("ultra_admin", AppRole.ULTRA_ADMIN),
        ],
    )
    async def test_sufficient_role_passes(self, identity, role, minimum):
        session = MagicMock(spec=AsyncSession)
        with _patch_role(role):
            result = await authorize(session, identity, minimum)

        assert isinstance(result, Ok)
        assert result.value == AuthorizationContext(
            session=session, identity=identity, role=role
        )

    @pytest.mark.anyio
    async def test_denial_is_logged_with_email(self, identity, caplog):
        with caplog.at_level(logging.WARNING, logger="meydan.auth.gate"):
            with _patch_role("moderator"):
                await authorize(MagicMock(spec=AsyncSession), identity, AppRole.ADMIN)

        assert "staff@example.com" in caplog.text
        assert "requires admin" in caplog.text

    @pytest.mark.anyio
    async def test_resolution_failure_is_returned(self, identity):
        with _patch_role(side_effect=RoleResolutionError()):
            result = await authorize(MagicMock(spec=AsyncSession), identity, AppRole.USER)

        assert isinstance(result, Err)
        assert result.error.kind is AuthorizationErrorKind.RESOLUTION_FAILED
        assert result.error.status_code == 500


class TestRequireRole:
    @pytest.mark.anyio
    async def test_raises_error_from_result(self, identity):
        request = MagicMock(spec=Request)
        request.method = "GET"
        request.url.path = "/api/admin/session"
        dependency = require_role(AppRole.ADMIN)

        with _patch_role("moderator"):
            with pytest.raises(AuthorizationError) as exc_info:
                await dependency(
                    request=request, db=MagicMock(spec=AsyncSession), identity=identity
                )

        assert exc_info.value.kind is AuthorizationErrorKind.FORBIDDEN

    @pytest.mark.anyio
    async def test_returns_context(self, identity):
        request = MagicMock(spec=Request)
        dependency = require_role(AppRole.MODERATOR)

        with _patch_role("admin"):
            context = await dependency(
                request=request, db=MagicMock(spec=AsyncSession), identity=identity
            )

        assert context.identity is identity
        assert context.role == "admin"


class TestEnsureRole:
    def test_stricter_minimum_is_rejected(self, identity):
        context = AuthorizationContext(session=MagicMock(), identity=identity, role="admin")

        with pytest.raises(AuthorizationError) as exc_info:
            ensure_role(context, AppRole.ULTRA_ADMIN)

        assert exc_info.value.status_code == 403

    def test_sufficient_role_returns_context(self, identity):
        context = AuthorizationContext(
            session=MagicMock(), identity=identity, role="ultra_admin"
        )

        assert ensure_role(context, AppRole.ULTRA_ADMIN) is context
