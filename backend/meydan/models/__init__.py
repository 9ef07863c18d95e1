from .base import Base
from .auth_user import AuthUser
from .profile import Profile
from .audit_log import AdminAuditLog
from .user_warning import WARNING_SEVERITIES, ModerationWarning
from .follow import Follow

__all__ = [
    "Base",
    "AuthUser",
    "Profile",
    "AdminAuditLog",
    "ModerationWarning",
    "WARNING_SEVERITIES",
    "Follow",
]
