"""Read-side admin views: own session, user directory, connections, audit trail.

Views are audited too. Their record is written after the data has been
fetched, in the same request, so a failed audit write fails the view.
"""
from __future__ import annotations

import logging
import math
import uuid
from datetime import datetime, timezone
from typing import Any

from fastapi import Request

from ...auth.gate import AuthorizationContext
from ...auth.roles import AppRole
from ...crud.audit_log import AuditLogRepository
from ...crud.auth_user import AuthUserRepository
from ...crud.follow import FollowRepository
from ...crud.profile import ProfileRepository
from ...errors import NotFoundError, ValidationError
from ...models.auth_user import AuthUser
from ...models.profile import Profile
from ...schemas.admin import (
    AdminUserDetail,
    AdminUserList,
    AdminUserListItem,
    AuditLogItem,
    AuditLogPage,
    FriendItem,
    ProfileDetail,
)
from ..audit import AuditEntry, AuditService

logger = logging.getLogger(__name__)

AUDIT_LOG_PAGE_SIZE = (20, 100)  # default, max
USER_PAGE_SIZE = (10, 50)
# Upper bound on accounts scanned per directory request
USER_SCAN_LIMIT = 1000


def parse_positive_int(value: str | None, default: int) -> int:
    """Lenient query-string integer: anything unusable becomes ``default``."""
    if value is None:
        return default
    try:
        parsed = int(float(value))
    except (TypeError, ValueError, OverflowError):
        return default
    return parsed or default


def page_params(
    page: str | None, page_size: str | None, sizes: tuple[int, int]
) -> tuple[int, int]:
    default_size, max_size = sizes
    return (
        max(parse_positive_int(page, 1), 1),
        min(max(parse_positive_int(page_size, default_size), 1), max_size),
    )


def total_pages(total: int, page_size: int) -> int:
    return max(math.ceil(total / page_size), 1)


def _as_utc(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def derive_status(
    user: AuthUser, profile: Profile | None, now: datetime | None = None
) -> str:
    if profile is not None and profile.is_blocked:
        return "blocked"
    now = now or datetime.now(timezone.utc)
    if user.banned_until is not None and _as_utc(user.banned_until) > now:
        return "suspended"
    if user.email_confirmed_at is None:
        return "pending"
    return "active"


def _metadata_text(metadata: dict[str, Any] | None, *keys: str) -> str | None:
    for key in keys:
        value = (metadata or {}).get(key)
        if isinstance(value, str):
            return value
    return None


def to_list_item(user: AuthUser, profile: Profile | None) -> AdminUserListItem:
    name = None
    avatar_url = None
    role = AppRole.USER.value
    if profile is not None:
        name = profile.full_name or profile.username
        avatar_url = profile.avatar_url
        if isinstance(profile.role, str):
            role = profile.role
    return AdminUserListItem(
        id=user.id,
        email=user.email,
        name=name or _metadata_text(user.user_metadata, "full_name", "name"),
        avatar_url=avatar_url or _metadata_text(user.user_metadata, "avatar_url"),
        role=role,
        status=derive_status(user, profile),
        created_at=user.created_at,
        last_seen=user.last_sign_in_at,
    )


class DirectoryService:
    def __init__(self, context: AuthorizationContext):
        self.context = context
        self.session = context.session
        self.audit_logs = AuditLogRepository(context.session)
        self.auth_users = AuthUserRepository(context.session)
        self.follows = FollowRepository(context.session)
        self.profiles = ProfileRepository(context.session)
        self.audit_service = AuditService(context.session)

    @property
    def actor_id(self) -> uuid.UUID:
        return self.context.identity.id

    async def _audit_view(self, entry: AuditEntry, request: Request | None) -> None:
        await self.audit_service.record(entry, request)
        await self.session.commit()

    async def view_session(self, request: Request | None = None) -> str:
        await self._audit_view(
            AuditEntry(
                actor_user_id=self.actor_id,
                action="admin.session.view",
                entity_type="admin_session",
                entity_id=self.actor_id,
                metadata={"role": self.context.role},
            ),
            request,
        )
        return self.context.role

    async def list_audit_logs(
        self,
        page: str | None = None,
        page_size: str | None = None,
        request: Request | None = None,
    ) -> AuditLogPage:
        page_number, size = page_params(page, page_size, AUDIT_LOG_PAGE_SIZE)
        total = await self.audit_logs.count()
        rows = await self.audit_logs.list_page(
            limit=size, offset=(page_number - 1) * size
        )
        logs = [
            AuditLogItem(
                id=row.id,
                created_at=row.created_at,
                actor_user_id=row.actor_user_id,
                target_user_id=row.target_user_id,
                action=row.action,
                entity_type=row.entity_type,
                entity_id=row.entity_id,
                metadata=row.metadata_ or {},
            )
            for row in rows
        ]

        await self._audit_view(
            AuditEntry(
                actor_user_id=self.actor_id,
                action="admin.audit_logs.view",
                entity_type="admin_audit_log",
                metadata={"page": page_number, "pageSize": size},
            ),
            request,
        )
        return AuditLogPage(
            logs=logs,
            page=page_number,
            page_size=size,
            total=total,
            total_pages=total_pages(total, size),
        )

    async def list_users(
        self,
        query: str | None = None,
        role: str | None = None,
        status: str | None = None,
        page: str | None = None,
        page_size: str | None = None,
        request: Request | None = None,
    ) -> AdminUserList:
        request_id = uuid.uuid4()
        search = (query or "").strip().lower()
        role_filter = (role or "all").strip()
        status_filter = (status or "all").strip()
        page_number, size = page_params(page, page_size, USER_PAGE_SIZE)

        logger.info(
            "admin.users request.start request_id=%s actor=%s role=%s q=%r role_filter=%s status=%s page=%s page_size=%s",
            request_id,
            self.actor_id,
            self.context.role,
            search,
            role_filter,
            status_filter,
            page_number,
            size,
        )

        users = await self.auth_users.list_all(limit=USER_SCAN_LIMIT)
        profiles = await self.profiles.list_by_ids([user.id for user in users])
        profile_by_id = {profile.id: profile for profile in profiles}
        items = [to_list_item(user, profile_by_id.get(user.id)) for user in users]

        filtered = [
            item
            for item in items
            if (
                not search
                or search in (item.email or "").lower()
                or search in (item.name or "").lower()
            )
            and (role_filter == "all" or item.role == role_filter)
            and (status_filter == "all" or item.status == status_filter)
        ]

        total = len(filtered)
        pages = total_pages(total, size)
        safe_page = min(page_number, pages)
        start = (safe_page - 1) * size
        page_items = filtered[start:start + size]

        await self._audit_view(
            AuditEntry(
                actor_user_id=self.actor_id,
                action="admin.users.list.view",
                entity_type="admin_users",
                metadata={
                    "query": search,
                    "roleFilter": role_filter,
                    "statusFilter": status_filter,
                    "page": safe_page,
                    "pageSize": size,
                },
            ),
            request,
        )

        logger.info(
            "admin.users request.success request_id=%s total=%s returned=%s total_pages=%s page=%s",
            request_id,
            total,
            len(page_items),
            pages,
            safe_page,
        )
        return AdminUserList(
            users=page_items,
            page=safe_page,
            page_size=size,
            total=total,
            total_pages=pages,
        )

    async def get_user(
        self, user_id: uuid.UUID, request: Request | None = None
    ) -> AdminUserDetail:
        user = await self.auth_users.get_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found.")
        profile = await self.profiles.get_by_id(user_id)

        await self._audit_view(
            AuditEntry(
                actor_user_id=self.actor_id,
                target_user_id=user_id,
                action="admin.user.view",
                entity_type="profile",
                entity_id=user_id,
            ),
            request,
        )
        return AdminUserDetail(
            id=user.id,
            email=user.email,
            created_at=user.created_at,
            last_seen=user.last_sign_in_at,
            status=derive_status(user, profile),
            profile=ProfileDetail.model_validate(profile) if profile else None,
        )

    async def list_friends(
        self, user_id: uuid.UUID, request: Request | None = None
    ) -> list[FriendItem]:
        follows = await self.follows.list_following(user_id)
        profiles = await self.profiles.list_by_ids([row.following_id for row in follows])
        profile_by_id = {profile.id: profile for profile in profiles}

        friends = []
        for row in follows:
            profile = profile_by_id.get(row.following_id)
            friends.append(
                FriendItem(
                    user_id=row.following_id,
                    username=profile.username if profile else None,
                    full_name=profile.full_name if profile else None,
                    avatar_url=profile.avatar_url if profile else None,
                    followed_at=row.created_at,
                )
            )

        await self._audit_view(
            AuditEntry(
                actor_user_id=self.actor_id,
                target_user_id=user_id,
                action="admin.user.friends.view",
                entity_type="profile",
                entity_id=user_id,
                metadata={"count": len(friends)},
            ),
            request,
        )
        return friends

    async def remove_connection(
        self,
        user_id: uuid.UUID,
        friend_user_id: object,
        request: Request | None = None,
    ) -> None:
        if not isinstance(friend_user_id, str) or not friend_user_id:
            raise ValidationError("friendUserId is required.")
        try:
            following_id = uuid.UUID(friend_user_id)
        except ValueError:
            raise ValidationError("Invalid friendUserId.") from None

        removed = await self.follows.remove(user_id, following_id)
        if not removed:
            raise NotFoundError("Connection not found.")

        await self.audit_service.record(
            AuditEntry(
                actor_user_id=self.actor_id,
                target_user_id=user_id,
                action="admin.user.connection.remove",
                entity_type="follow",
                entity_id=following_id,
                metadata={
                    "followerId": str(user_id),
                    "followingId": str(following_id),
                },
            ),
            request,
        )
        await self.session.commit()
