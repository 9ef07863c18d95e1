"""
Edge pre-check for admin paths.

Runs before routing and only answers "is there any session at all?". It never
decides on roles: every admin route still goes through the authorization gate,
so this is a shortcut for anonymous traffic, not an enforcement point.
"""
from __future__ import annotations

import logging
from enum import Enum
from urllib.parse import urlencode

from fastapi import Request, Response, status
from fastapi.responses import JSONResponse, RedirectResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.types import ASGIApp

from ..errors import AuthError, error_payload
from .identity import has_session_cookie

logger = logging.getLogger(__name__)

STATIC_PREFIXES: tuple[str, ...] = (
    "/_next/static/",
    "/_next/image/",
    "/images/",
    "/avatars/",
)
STATIC_FILES: frozenset[str] = frozenset({
    "/logo.png",
    "/favicon.ico",
    "/robots.txt",
    "/sitemap.xml",
})
ADMIN_PAGE_PREFIX = "/admin"
ADMIN_API_PREFIX = "/api/admin"


class PathKind(str, Enum):
    STATIC = "static"
    ADMIN_PAGE = "admin_page"
    ADMIN_API = "admin_api"
    OTHER = "other"


def _under(path: str, prefix: str) -> bool:
    return path == prefix or path.startswith(prefix + "/")


def classify_path(path: str) -> PathKind:
    if path in STATIC_FILES or path.startswith(STATIC_PREFIXES):
        return PathKind.STATIC
    if _under(path, ADMIN_API_PREFIX):
        return PathKind.ADMIN_API
    if _under(path, ADMIN_PAGE_PREFIX):
        return PathKind.ADMIN_PAGE
    return PathKind.OTHER


def has_session_artifact(request: Request) -> bool:
    if has_session_cookie(request.cookies):
        return True
    authorization = request.headers.get("authorization", "")
    return authorization.lower().startswith("bearer ")


def login_redirect_url(login_path: str, next_path: str) -> str:
    return f"{login_path}?{urlencode({'redirect': next_path})}"


class AdminSessionPrecheckMiddleware(BaseHTTPMiddleware):
    def __init__(self, app: ASGIApp, login_path: str = "/login") -> None:
        super().__init__(app)
        self.login_path = login_path

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        kind = classify_path(path)

        if kind in (PathKind.STATIC, PathKind.OTHER):
            return await call_next(request)

        if has_session_artifact(request):
            return await call_next(request)

        logger.debug("No session on %s, rejecting at the edge", path)
        if kind is PathKind.ADMIN_API:
            return JSONResponse(
                status_code=status.HTTP_401_UNAUTHORIZED,
                content=error_payload(AuthError.code, AuthError.message),
            )
        return RedirectResponse(
            login_redirect_url(self.login_path, path),
            status_code=status.HTTP_307_TEMPORARY_REDIRECT,
        )
