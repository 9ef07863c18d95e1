from .directory_service import DirectoryService
from .moderation_service import ModerationService
from .role_service import RoleAdminService

__all__ = ["DirectoryService", "ModerationService", "RoleAdminService"]
