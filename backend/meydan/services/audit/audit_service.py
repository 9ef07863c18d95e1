"""
Audit Service - durable trail of privileged admin actions.

Every admin route that completes successfully records exactly one entry.
Entries are flushed into the caller's transaction rather than committed on
their own: the route commits the business change and its audit row together,
so a failed audit write rolls the change back instead of leaving an
unaudited mutation behind.
"""
from __future__ import annotations

import ipaddress
import logging
import uuid
from dataclasses import dataclass, field
from typing import Any

from fastapi import Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ...crud.audit_log import AuditLogRepository
from ...errors import AuditWriteError
from ...models.audit_log import AdminAuditLog

logger = logging.getLogger(__name__)

IP_MAX_LENGTH = 45


@dataclass(frozen=True)
class AuditEntry:
    actor_user_id: uuid.UUID
    action: str
    entity_type: str
    target_user_id: uuid.UUID | None = None
    entity_id: str | uuid.UUID | None = None
    metadata: dict[str, Any] = field(default_factory=dict)
    # Explicit provenance for callers without a request; wins over the request
    ip: str | None = None
    user_agent: str | None = None


def normalize_ip(value: str | None) -> str | None:
    """Return ``value`` as a canonical IPv4/IPv6 address, or None if it is not one."""
    if not value:
        return None
    try:
        address = str(ipaddress.ip_address(value.strip()))
    except ValueError:
        return None
    # Scoped IPv6 zone ids are unbounded; the column holds 45 characters
    return address if len(address) <= IP_MAX_LENGTH else None


def request_ip(request: Request | None) -> str | None:
    if request is None:
        return None
    forwarded = request.headers.get("x-forwarded-for")
    if not forwarded:
        return None
    return normalize_ip(forwarded.split(",")[0])


def request_user_agent(request: Request | None) -> str | None:
    if request is None:
        return None
    return request.headers.get("user-agent")


class AuditService:
    """Writes admin audit records through AuditLogRepository."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.audit_repo = AuditLogRepository(session)

    async def record(
        self,
        entry: AuditEntry,
        request: Request | None = None,
    ) -> AdminAuditLog:
        """Append one audit record.

        Args:
            entry: What happened, who did it and to whom
            request: Source of ``ip`` and ``user_agent`` when the entry does not
                carry them; both are None without either

        Raises:
            AuditWriteError: If the insert fails
        """
        entity_id = str(entry.entity_id) if entry.entity_id is not None else None
        try:
            audit_log = await self.audit_repo.create(
                actor_user_id=entry.actor_user_id,
                target_user_id=entry.target_user_id,
                action=entry.action,
                entity_type=entry.entity_type,
                entity_id=entity_id,
                metadata=dict(entry.metadata),
                ip=normalize_ip(entry.ip) or request_ip(request),
                user_agent=entry.user_agent or request_user_agent(request),
            )
        except SQLAlchemyError as exc:
            logger.error(
                "Audit write failed for action %s by %s: %s",
                entry.action,
                entry.actor_user_id,
                exc,
                exc_info=True,
            )
            raise AuditWriteError("Failed to write admin audit log.") from exc

        logger.info(
            "AUDIT action=%s actor=%s target=%s entity=%s:%s",
            entry.action,
            entry.actor_user_id,
            entry.target_user_id,
            entry.entity_type,
            entity_id,
        )
        return audit_log
