"""
Role changes for admin accounts.

Only ultra admins reach this service (the router checks for ultra_admin
before calling it). Guards run before any write:

- the requested role must be one of the known roles,
- an ultra admin may not drop their own ultra_admin role.

The current role is read before the update so the audit record carries the
full ``fromRole -> toRole`` transition.
"""
from __future__ import annotations

import uuid

from fastapi import Request

from ...auth.gate import AuthorizationContext
from ...auth.roles import AppRole, normalize_role
from ...crud.profile import ProfileRepository
from ...errors import (
    AuthorizationError,
    AuthorizationErrorKind,
    NotFoundError,
    ValidationError,
)
from ..audit import AuditEntry, AuditService

ROLE_UPDATE_ACTION = "admin.user.role.update"


class RoleAdminService:
    def __init__(self, context: AuthorizationContext):
        self.context = context
        self.session = context.session
        self.profiles = ProfileRepository(context.session)
        self.audit_service = AuditService(context.session)

    async def change_role(
        self,
        target_user_id: uuid.UUID,
        new_role: object,
        request: Request | None = None,
    ) -> str:
        """Set ``target_user_id``'s role and audit the transition.

        Raises:
            ValidationError: Unknown role value
            AuthorizationError: Self-demotion attempt
            NotFoundError: No profile for the target
        """
        role = normalize_role(new_role)
        if role is None:
            raise ValidationError("Invalid role value.")

        actor_id = self.context.identity.id
        if target_user_id == actor_id and role is not AppRole.ULTRA_ADMIN:
            raise AuthorizationError(AuthorizationErrorKind.SELF_DEMOTION)

        found, from_role = await self.profiles.get_role(target_user_id)
        if not found:
            raise NotFoundError("User not found.")

        await self.profiles.update_role(target_user_id, role.value)
        await self.audit_service.record(
            AuditEntry(
                actor_user_id=actor_id,
                target_user_id=target_user_id,
                action=ROLE_UPDATE_ACTION,
                entity_type="profile",
                entity_id=target_user_id,
                metadata={"fromRole": from_role, "toRole": role.value},
            ),
            request,
        )
        await self.session.commit()
        return role.value
