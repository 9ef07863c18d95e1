from .audit_service import (
    AuditEntry,
    AuditService,
    normalize_ip,
    request_ip,
    request_user_agent,
)

__all__ = ["AuditEntry", "AuditService", "normalize_ip", "request_ip", "request_user_agent"]
