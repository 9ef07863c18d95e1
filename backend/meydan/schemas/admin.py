import uuid
from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# Request bodies keep their fields loosely typed: shape problems are reported
# as 400s with a specific message by the services, not as schema errors.


class RoleChangeRequest(CamelModel):
    role: Any = None


class UserActionRequest(CamelModel):
    action: Any = None
    reason: Any = None
    role: Any = None


class WarningCreateRequest(CamelModel):
    reason: Any = None
    severity: Any = None
    expires_at: Any = None


class ConnectionRemoveRequest(CamelModel):
    friend_user_id: Any = None


UserStatus = Literal["active", "pending", "suspended", "blocked"]


class MessageResponse(CamelModel):
    ok: bool = True
    message: str


class SessionResponse(CamelModel):
    ok: bool = True
    user_id: uuid.UUID
    role: str


class RoleChangeResponse(CamelModel):
    ok: bool = True
    user_id: uuid.UUID
    role: str


class AuditLogItem(CamelModel):
    id: uuid.UUID
    created_at: datetime
    actor_user_id: uuid.UUID
    target_user_id: uuid.UUID | None = None
    action: str
    entity_type: str
    entity_id: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)


class AuditLogPage(CamelModel):
    ok: bool = True
    logs: list[AuditLogItem]
    page: int
    page_size: int
    total: int
    total_pages: int


class AdminUserListItem(CamelModel):
    id: uuid.UUID
    email: str | None = None
    name: str | None = None
    avatar_url: str | None = None
    role: str
    status: UserStatus
    created_at: datetime | None = None
    last_seen: datetime | None = None


class AdminUserList(CamelModel):
    ok: bool = True
    users: list[AdminUserListItem]
    page: int
    page_size: int
    total: int
    total_pages: int


class ProfileDetail(CamelModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True
    )

    id: uuid.UUID
    username: str | None = None
    full_name: str | None = None
    avatar_url: str | None = None
    role: str | None = None
    is_verified: bool = False
    is_blocked: bool = False
    blocked_reason: str | None = None
    blocked_at: datetime | None = None
    blocked_by: uuid.UUID | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class AdminUserDetail(CamelModel):
    id: uuid.UUID
    email: str | None = None
    created_at: datetime | None = None
    last_seen: datetime | None = None
    status: UserStatus
    profile: ProfileDetail | None = None


class AdminUserDetailResponse(CamelModel):
    ok: bool = True
    user: AdminUserDetail


class WarningItem(CamelModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True
    )

    id: uuid.UUID
    user_id: uuid.UUID
    created_at: datetime | None = None
    created_by_admin_id: uuid.UUID
    reason: str
    severity: str
    expires_at: datetime | None = None


class WarningListResponse(CamelModel):
    ok: bool = True
    warnings: list[WarningItem]


class WarningCreateResponse(CamelModel):
    ok: bool = True
    warning: WarningItem
    message: str = "Warning created."


class FriendItem(CamelModel):
    user_id: uuid.UUID
    username: str | None = None
    full_name: str | None = None
    avatar_url: str | None = None
    followed_at: datetime | None = None


class FriendListResponse(CamelModel):
    ok: bool = True
    friends: list[FriendItem]
