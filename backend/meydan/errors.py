from enum import Enum
from typing import Any

from fastapi import status


class AppError(Exception):
    code: str = "APP_ERROR"
    message: str = "Application error"
    status_code: int = status.HTTP_400_BAD_REQUEST
    details: Any | None = None

    def __init__(
        self,
        message: str | None = None,
        *,
        code: str | None = None,
        status_code: int | None = None,
        details: Any | None = None,
    ):
        if message is not None:
            self.message = message
        if code is not None:
            self.code = code
        if status_code is not None:
            self.status_code = status_code
        if details is not None:
            self.details = details

        super().__init__(self.message)


class ValidationError(AppError):
    code = "VALIDATION_ERROR"
    message = "Validation error"
    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(AppError):
    code = "NOT_FOUND"
    message = "Resource not found"
    status_code = status.HTTP_404_NOT_FOUND


class AuthError(AppError):
    code = "AUTH_ERROR"
    message = "Authentication required."
    status_code = status.HTTP_401_UNAUTHORIZED


class PermissionError(AppError):  # type: ignore[override]
    code = "PERMISSION_DENIED"
    message = "Insufficient admin privileges."
    status_code = status.HTTP_403_FORBIDDEN


class InternalError(AppError):
    code = "INTERNAL_ERROR"
    message = "Unexpected server error."
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


class AuthorizationErrorKind(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    FORBIDDEN = "forbidden"
    SELF_DEMOTION = "self_demotion"
    RESOLUTION_FAILED = "resolution_failed"


_AUTHORIZATION_DEFAULTS: dict[AuthorizationErrorKind, tuple[int, str, str]] = {
    AuthorizationErrorKind.UNAUTHENTICATED: (
        status.HTTP_401_UNAUTHORIZED,
        AuthError.code,
        "Authentication required.",
    ),
    AuthorizationErrorKind.FORBIDDEN: (
        status.HTTP_403_FORBIDDEN,
        PermissionError.code,
        "Insufficient admin privileges.",
    ),
    AuthorizationErrorKind.SELF_DEMOTION: (
        status.HTTP_400_BAD_REQUEST,
        "SELF_DEMOTION",
        "Ultra admins cannot remove their own ultra_admin role.",
    ),
    AuthorizationErrorKind.RESOLUTION_FAILED: (
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "ROLE_RESOLUTION_FAILED",
        "Unable to resolve current role.",
    ),
}


class AuthorizationError(AppError):
    """Authorization failure whose message is safe to show to the caller."""

    code = PermissionError.code
    message = PermissionError.message
    status_code = status.HTTP_403_FORBIDDEN

    def __init__(self, kind: AuthorizationErrorKind, message: str | None = None):
        self.kind = kind
        status_code, code, default_message = _AUTHORIZATION_DEFAULTS[kind]
        super().__init__(
            message or default_message, code=code, status_code=status_code
        )


class RoleResolutionError(AuthorizationError):
    def __init__(self, message: str | None = None):
        super().__init__(AuthorizationErrorKind.RESOLUTION_FAILED, message)


class AuditWriteError(InternalError):
    code = "AUDIT_WRITE_FAILED"


ERROR_CODE_BY_STATUS: dict[int, str] = {
    status.HTTP_400_BAD_REQUEST: ValidationError.code,
    status.HTTP_401_UNAUTHORIZED: AuthError.code,
    status.HTTP_403_FORBIDDEN: PermissionError.code,
    status.HTTP_404_NOT_FOUND: NotFoundError.code,
    status.HTTP_422_UNPROCESSABLE_ENTITY: ValidationError.code,
}


def error_payload(
    code: str,
    message: str,
    details: Any | None = None,
) -> dict[str, Any]:
    payload: dict[str, Any] = {"ok": False, "error": message, "code": code}
    if details is not None:
        payload["details"] = details
    return payload


def resolve_error_code(status_code: int) -> str:
    if status_code in ERROR_CODE_BY_STATUS:
        return ERROR_CODE_BY_STATUS[status_code]
    if status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        return InternalError.code
    return "UNKNOWN_ERROR"
