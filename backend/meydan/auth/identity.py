"""Caller identity as carried by the identity provider's access token."""
from __future__ import annotations

import base64
import binascii
import json
import logging
import uuid
from dataclasses import dataclass
from typing import Any, Mapping

import jwt
from fastapi import Request

from ..config import settings

logger = logging.getLogger(__name__)

SESSION_COOKIE_MARKER = "sb-"
SESSION_COOKIE_SUFFIX = "-auth-token"
_BASE64_PREFIX = "base64-"


class InvalidTokenError(Exception):
    """Raised when a token cannot be parsed, is expired or is malformed."""


@dataclass(frozen=True)
class Identity:
    """An authenticated caller.

    Role hints come from the token claims and are only consulted when the
    profile row carries no role.
    """

    id: uuid.UUID
    email: str | None = None
    app_metadata_role: Any = None
    user_metadata_role: Any = None


def is_session_cookie_name(name: str) -> bool:
    return SESSION_COOKIE_MARKER in name and name.endswith(SESSION_COOKIE_SUFFIX)


def has_session_cookie(cookies: Mapping[str, str]) -> bool:
    return any(is_session_cookie_name(name) for name in cookies)


def _bearer_token(request: Request) -> str | None:
    header = request.headers.get("authorization")
    if not header:
        return None
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def extract_cookie_token(raw_value: str) -> str | None:
    """Pull the access token out of a session cookie value.

    Accepts a bare JWT, a JSON object with ``access_token``, a JSON array whose
    first item is the token, and any of those behind a ``base64-`` prefix.
    """
    value = raw_value.strip()
    if value.startswith(_BASE64_PREFIX):
        encoded = value[len(_BASE64_PREFIX):]
        try:
            value = base64.urlsafe_b64decode(encoded + "=" * (-len(encoded) % 4)).decode()
        except (binascii.Error, UnicodeDecodeError):
            return None

    if not value.startswith(("{", "[")):
        return value or None

    try:
        parsed = json.loads(value)
    except json.JSONDecodeError:
        return None

    if isinstance(parsed, dict):
        token = parsed.get("access_token")
    elif isinstance(parsed, list) and parsed:
        token = parsed[0]
    else:
        token = None
    return token if isinstance(token, str) and token else None


def _session_token(request: Request) -> str | None:
    token = _bearer_token(request)
    if token is not None:
        return token
    for name, value in request.cookies.items():
        if is_session_cookie_name(name):
            return extract_cookie_token(value)
    return None


def decode_access_token(token: str) -> dict[str, Any]:
    options = {"require": ["sub", "exp"]}
    try:
        if settings.jwt_audience:
            return jwt.decode(
                token,
                settings.jwt_secret,
                algorithms=[settings.jwt_algorithm],
                audience=settings.jwt_audience,
                options=options,
            )
        return jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            options={**options, "verify_aud": False},
        )
    except jwt.InvalidTokenError as exc:
        raise InvalidTokenError(str(exc)) from exc


def _metadata_role(claims: Mapping[str, Any], key: str) -> Any:
    metadata = claims.get(key)
    if isinstance(metadata, dict):
        return metadata.get("role")
    return None


def identity_from_claims(claims: Mapping[str, Any]) -> Identity:
    subject = claims.get("sub")
    if not isinstance(subject, str):
        raise InvalidTokenError("invalid-subject-type")
    try:
        user_id = uuid.UUID(subject)
    except ValueError:
        raise InvalidTokenError("invalid-subject") from None

    email = claims.get("email")
    return Identity(
        id=user_id,
        email=email if isinstance(email, str) else None,
        app_metadata_role=_metadata_role(claims, "app_metadata"),
        user_metadata_role=_metadata_role(claims, "user_metadata"),
    )


async def get_current_identity(request: Request) -> Identity | None:
    """Return the caller's identity, or None for anonymous/invalid sessions."""
    token = _session_token(request)
    if token is None:
        return None
    try:
        return identity_from_claims(decode_access_token(token))
    except InvalidTokenError as exc:
        logger.info("Rejected session token on %s: %s", request.url.path, exc)
        return None
