"""Token and account builders shared by the API tests."""
import os
import time
import uuid
from datetime import datetime, timezone

import jwt
from sqlalchemy.ext.asyncio import AsyncSession

from meydan.models import AuthUser, Profile


def make_token(
    user_id: uuid.UUID | str,
    *,
    email: str | None = None,
    app_role: object = None,
    user_role: object = None,
    expires_in: int = 3600,
    audience: str | None = "authenticated",
    secret: str | None = None,
) -> str:
    claims: dict = {
        "sub": str(user_id),
        "exp": int(time.time()) + expires_in,
        "app_metadata": {},
        "user_metadata": {},
    }
    if audience is not None:
        claims["aud"] = audience
    if email is not None:
        claims["email"] = email
    if app_role is not None:
        claims["app_metadata"]["role"] = app_role
    if user_role is not None:
        claims["user_metadata"]["role"] = user_role
    return jwt.encode(claims, secret or os.environ["JWT_SECRET"], algorithm="HS256")


def auth_headers(user_id: uuid.UUID, **kwargs) -> dict[str, str]:
    return {"Authorization": f"Bearer {make_token(user_id, **kwargs)}"}


async def create_account(
    session: AsyncSession,
    *,
    role: str | None = None,
    email: str | None = None,
    username: str | None = None,
    full_name: str | None = None,
    confirmed: bool = True,
    with_profile: bool = True,
) -> uuid.UUID:
    user_id = uuid.uuid4()
    session.add(
        AuthUser(
            id=user_id,
            email=email or f"{user_id.hex[:8]}@example.com",
            email_confirmed_at=datetime.now(timezone.utc) if confirmed else None,
            app_metadata={},
            user_metadata={},
        )
    )
    await session.flush()
    if with_profile:
        session.add(
            Profile(id=user_id, role=role, username=username, full_name=full_name)
        )
    await session.commit()
    return user_id
