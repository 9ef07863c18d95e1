"""Warnings and account blocks issued by admins."""
from __future__ import annotations

import uuid
from datetime import datetime

from fastapi import Request

from ...auth.gate import AuthorizationContext
from ...crud.auth_user import AuthUserRepository
from ...crud.user_warning import UserWarningRepository
from ...errors import NotFoundError, ValidationError
from ...models.user_warning import WARNING_SEVERITIES, ModerationWarning
from ..audit import AuditEntry, AuditService

DEFAULT_SEVERITY = "medium"


def _clean_text(value: object) -> str:
    return value.strip() if isinstance(value, str) else ""


def parse_expires_at(value: object) -> datetime | None:
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        return datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        raise ValidationError("Invalid expiresAt value.") from None


class ModerationService:
    def __init__(self, context: AuthorizationContext):
        self.context = context
        self.session = context.session
        self.auth_users = AuthUserRepository(context.session)
        self.warnings = UserWarningRepository(context.session)
        self.audit_service = AuditService(context.session)

    @property
    def actor_id(self) -> uuid.UUID:
        return self.context.identity.id

    async def _require_user(self, user_id: uuid.UUID) -> None:
        if await self.auth_users.get_by_id(user_id) is None:
            raise NotFoundError("User not found.")

    async def warn(
        self, user_id: uuid.UUID, reason: object, request: Request | None = None
    ) -> None:
        """Record an informal warning; it only exists in the audit trail."""
        await self._require_user(user_id)
        await self.audit_service.record(
            AuditEntry(
                actor_user_id=self.actor_id,
                target_user_id=user_id,
                action="admin.user.warn",
                entity_type="profile",
                entity_id=user_id,
                metadata={"reason": _clean_text(reason)},
            ),
            request,
        )
        await self.session.commit()

    async def set_blocked(
        self, user_id: uuid.UUID, blocked: bool, request: Request | None = None
    ) -> None:
        if blocked:
            updated = await self.auth_users.ban(user_id)
        else:
            updated = await self.auth_users.unban(user_id)
        if not updated:
            raise NotFoundError("User not found.")

        await self.audit_service.record(
            AuditEntry(
                actor_user_id=self.actor_id,
                target_user_id=user_id,
                action="admin.user.block" if blocked else "admin.user.unblock",
                entity_type="profile",
                entity_id=user_id,
            ),
            request,
        )
        await self.session.commit()

    async def list_warnings(
        self, user_id: uuid.UUID, request: Request | None = None
    ) -> list[ModerationWarning]:
        await self._require_user(user_id)
        warnings = await self.warnings.list_for_user(user_id)
        await self.audit_service.record(
            AuditEntry(
                actor_user_id=self.actor_id,
                target_user_id=user_id,
                action="admin.user.warnings.view",
                entity_type="user_warning",
                entity_id=user_id,
                metadata={"count": len(warnings)},
            ),
            request,
        )
        await self.session.commit()
        return warnings

    async def create_warning(
        self,
        user_id: uuid.UUID,
        reason: object,
        severity: object = None,
        expires_at: object = None,
        request: Request | None = None,
    ) -> ModerationWarning:
        """Create a formal warning.

        Raises:
            ValidationError: Missing reason, unknown severity or bad expiry
            NotFoundError: No account for ``user_id``
        """
        clean_reason = _clean_text(reason)
        if not clean_reason:
            raise ValidationError("Warning reason is required.")

        if severity is None:
            severity = DEFAULT_SEVERITY
        if severity not in WARNING_SEVERITIES:
            raise ValidationError("Invalid severity value.")
        assert isinstance(severity, str)

        expiry = parse_expires_at(expires_at)
        await self._require_user(user_id)

        warning = await self.warnings.create(
            user_id=user_id,
            created_by_admin_id=self.actor_id,
            reason=clean_reason,
            severity=severity,
            expires_at=expiry,
        )
        await self.audit_service.record(
            AuditEntry(
                actor_user_id=self.actor_id,
                target_user_id=user_id,
                action="admin.user.warning.create",
                entity_type="user_warning",
                entity_id=warning.id,
                metadata={
                    "severity": severity,
                    "expiresAt": expiry.isoformat() if expiry else None,
                },
            ),
            request,
        )
        await self.session.commit()
        return warning

    async def revoke_warning(
        self,
        user_id: uuid.UUID,
        warning_id: uuid.UUID,
        request: Request | None = None,
    ) -> None:
        deleted = await self.warnings.delete(warning_id, user_id)
        if not deleted:
            raise NotFoundError("Warning not found.")

        await self.audit_service.record(
            AuditEntry(
                actor_user_id=self.actor_id,
                target_user_id=user_id,
                action="admin.user.warning.revoke",
                entity_type="user_warning",
                entity_id=warning_id,
            ),
            request,
        )
        await self.session.commit()
