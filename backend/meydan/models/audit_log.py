import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, String, Text, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class AdminAuditLog(Base):
    """Append-only record of one privileged action.

    Rows are inserted by AuditService and never updated or deleted by this
    codebase. Actor and target ids are plain columns without foreign keys so
    the trail survives account deletion.
    """

    __tablename__ = "admin_audit_logs"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    actor_user_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)
    target_user_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, index=True)
    action: Mapped[str] = mapped_column(
        String(100), nullable=False, index=True
    )  # e.g., 'admin.user.role.update'
    entity_type: Mapped[str] = mapped_column(
        String(100), nullable=False, index=True
    )  # e.g., 'profile', 'user_warning'
    entity_id: Mapped[str | None] = mapped_column(String(255), index=True)
    # "metadata" is reserved on declarative classes
    metadata_: Mapped[dict[str, Any]] = mapped_column(
        "metadata", JSON, nullable=False, default=dict
    )
    ip: Mapped[str | None] = mapped_column(String(45))  # IPv4/IPv6, validated on write
    user_agent: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False, index=True
    )
