"""
Admin API router.

Every endpoint depends on exactly one gate dependency (``require_moderator``,
``require_admin`` or ``require_ultra_admin``) and hands the resulting
AuthorizationContext to a service. Services perform the operation, record one
audit entry and commit; rejected requests never reach them.

Minimum roles:
- moderator: user detail, warning list
- admin: session, audit logs, user directory, warnings, blocks, connections
- ultra_admin: role changes
"""
from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request

from ..auth.gate import (
    AuthorizationContext,
    ensure_role,
    require_admin,
    require_moderator,
    require_ultra_admin,
)
from ..auth.roles import AppRole
from ..errors import ValidationError
from ..schemas.admin import (
    AdminUserDetailResponse,
    AdminUserList,
    AuditLogPage,
    ConnectionRemoveRequest,
    FriendListResponse,
    MessageResponse,
    RoleChangeRequest,
    RoleChangeResponse,
    SessionResponse,
    UserActionRequest,
    WarningCreateRequest,
    WarningCreateResponse,
    WarningItem,
    WarningListResponse,
)
from ..services.admin import DirectoryService, ModerationService, RoleAdminService

router = APIRouter(prefix="/api/admin", tags=["admin"])


@router.get("/session", response_model=SessionResponse)
async def get_admin_session(
    request: Request,
    ctx: AuthorizationContext = Depends(require_admin),
) -> SessionResponse:
    role = await DirectoryService(ctx).view_session(request)
    return SessionResponse(user_id=ctx.identity.id, role=role)


@router.get("/audit-logs", response_model=AuditLogPage)
async def list_audit_logs(
    request: Request,
    page: str | None = Query(None),
    page_size: str | None = Query(None, alias="pageSize"),
    ctx: AuthorizationContext = Depends(require_admin),
) -> AuditLogPage:
    return await DirectoryService(ctx).list_audit_logs(page, page_size, request)


@router.get("/users", response_model=AdminUserList)
async def list_users(
    request: Request,
    q: str | None = Query(None),
    role: str | None = Query(None),
    status: str | None = Query(None),
    page: str | None = Query(None),
    page_size: str | None = Query(None, alias="pageSize"),
    ctx: AuthorizationContext = Depends(require_admin),
) -> AdminUserList:
    return await DirectoryService(ctx).list_users(
        query=q,
        role=role,
        status=status,
        page=page,
        page_size=page_size,
        request=request,
    )


@router.get("/users/{user_id}", response_model=AdminUserDetailResponse)
async def get_user(
    user_id: UUID,
    request: Request,
    ctx: AuthorizationContext = Depends(require_moderator),
) -> AdminUserDetailResponse:
    user = await DirectoryService(ctx).get_user(user_id, request)
    return AdminUserDetailResponse(user=user)


@router.patch("/users/{user_id}/role", response_model=RoleChangeResponse)
async def change_user_role(
    user_id: UUID,
    payload: RoleChangeRequest,
    request: Request,
    ctx: AuthorizationContext = Depends(require_ultra_admin),
) -> RoleChangeResponse:
    role = await RoleAdminService(ctx).change_role(user_id, payload.role, request)
    return RoleChangeResponse(user_id=user_id, role=role)


@router.post("/users/{user_id}/actions", response_model=MessageResponse)
async def run_user_action(
    user_id: UUID,
    payload: UserActionRequest,
    request: Request,
    ctx: AuthorizationContext = Depends(require_admin),
) -> MessageResponse:
    """Dispatch a moderation action.

    ``warn``, ``block`` and ``unblock`` need admin; ``change_role`` needs
    ultra_admin, checked against the role the gate already resolved.
    """
    action = payload.action if isinstance(payload.action, str) else ""

    if action == "warn":
        await ModerationService(ctx).warn(user_id, payload.reason, request)
        return MessageResponse(message="Warning logged.")

    if action in ("block", "unblock"):
        blocked = action == "block"
        await ModerationService(ctx).set_blocked(user_id, blocked, request)
        return MessageResponse(message="User blocked." if blocked else "User unblocked.")

    if action == "change_role":
        ensure_role(ctx, AppRole.ULTRA_ADMIN)
        await RoleAdminService(ctx).change_role(user_id, payload.role, request)
        return MessageResponse(message="Role updated.")

    raise ValidationError("Invalid action.")


@router.get("/users/{user_id}/warnings", response_model=WarningListResponse)
async def list_user_warnings(
    user_id: UUID,
    request: Request,
    ctx: AuthorizationContext = Depends(require_moderator),
) -> WarningListResponse:
    warnings = await ModerationService(ctx).list_warnings(user_id, request)
    return WarningListResponse(
        warnings=[WarningItem.model_validate(warning) for warning in warnings]
    )


@router.post("/users/{user_id}/warnings", response_model=WarningCreateResponse)
async def create_user_warning(
    user_id: UUID,
    payload: WarningCreateRequest,
    request: Request,
    ctx: AuthorizationContext = Depends(require_admin),
) -> WarningCreateResponse:
    warning = await ModerationService(ctx).create_warning(
        user_id,
        reason=payload.reason,
        severity=payload.severity,
        expires_at=payload.expires_at,
        request=request,
    )
    return WarningCreateResponse(warning=WarningItem.model_validate(warning))


@router.delete("/users/{user_id}/warnings/{warning_id}", response_model=MessageResponse)
async def revoke_user_warning(
    user_id: UUID,
    warning_id: UUID,
    request: Request,
    ctx: AuthorizationContext = Depends(require_admin),
) -> MessageResponse:
    await ModerationService(ctx).revoke_warning(user_id, warning_id, request)
    return MessageResponse(message="Warning revoked.")


@router.get("/users/{user_id}/friends", response_model=FriendListResponse)
async def list_user_friends(
    user_id: UUID,
    request: Request,
    ctx: AuthorizationContext = Depends(require_admin),
) -> FriendListResponse:
    friends = await DirectoryService(ctx).list_friends(user_id, request)
    return FriendListResponse(friends=friends)


@router.delete("/users/{user_id}/friends", response_model=MessageResponse)
async def remove_user_connection(
    user_id: UUID,
    payload: ConnectionRemoveRequest,
    request: Request,
    ctx: AuthorizationContext = Depends(require_admin),
) -> MessageResponse:
    await DirectoryService(ctx).remove_connection(
        user_id, payload.friend_user_id, request
    )
    return MessageResponse(message="Connection removed.")
