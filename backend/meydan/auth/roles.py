"""
Role model - the single ordering every privilege decision is made against.

Roles form a total order::

    user < moderator < admin < ultra_admin

Anything that is not one of these exact strings (including ``None``) weighs
``UNKNOWN_ROLE_WEIGHT`` and therefore loses every comparison. No other module
may compare role strings directly.

The older three-role set (user, moderator, admin) used by content-moderation
pages is the part of this order below ultra_admin, not a separate hierarchy.
"""
from __future__ import annotations

from enum import Enum
from typing import Final


class AppRole(str, Enum):
    USER = "user"
    MODERATOR = "moderator"
    ADMIN = "admin"
    ULTRA_ADMIN = "ultra_admin"


ROLE_WEIGHT: Final[dict[str, int]] = {
    AppRole.USER.value: 0,
    AppRole.MODERATOR.value: 1,
    AppRole.ADMIN.value: 2,
    AppRole.ULTRA_ADMIN.value: 3,
}

UNKNOWN_ROLE_WEIGHT: Final[int] = -1

ALL_ROLES: Final[frozenset[str]] = frozenset(ROLE_WEIGHT)


def role_weight(role: str | AppRole | None) -> int:
    """Return the weight of a role; unknown or missing roles weigh -1."""
    if isinstance(role, AppRole):
        return ROLE_WEIGHT[role.value]
    if not isinstance(role, str):
        return UNKNOWN_ROLE_WEIGHT
    return ROLE_WEIGHT.get(role, UNKNOWN_ROLE_WEIGHT)


def has_minimum_role(current: str | AppRole | None, minimum: str | AppRole) -> bool:
    return role_weight(current) >= role_weight(minimum)


def is_valid_role(value: object) -> bool:
    return isinstance(value, str) and value in ALL_ROLES


def normalize_role(value: object) -> AppRole | None:
    if isinstance(value, AppRole):
        return value
    if is_valid_role(value):
        return AppRole(value)
    return None
