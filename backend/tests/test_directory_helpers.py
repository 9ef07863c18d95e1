"""Tests for paging and account status helpers used by the user directory."""
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest

from meydan.services.admin.directory_service import (
    USER_PAGE_SIZE,
    derive_status,
    page_params,
    parse_positive_int,
    total_pages,
)

NOW = datetime(2026, 5, 1, 12, 0, tzinfo=timezone.utc)


def _user(**overrides):
    values = {"banned_until": None, "email_confirmed_at": NOW}
    values.update(overrides)
    return SimpleNamespace(**values)


@pytest.mark.parametrize(
    "raw, expected",
    [(None, 7), ("3", 3), ("2.9", 2), ("abc", 7), ("0", 7), ("inf", 7), ("-4", -4)],
)
def test_parse_positive_int(raw, expected):
    assert parse_positive_int(raw, 7) == expected


def test_page_params_clamps():
    assert page_params(None, None, USER_PAGE_SIZE) == (1, 10)
    assert page_params("-2", "500", USER_PAGE_SIZE) == (1, 50)
    assert page_params("3", "-1", USER_PAGE_SIZE) == (3, 1)


def test_total_pages_is_at_least_one():
    assert total_pages(0, 10) == 1
    assert total_pages(21, 10) == 3


class TestDeriveStatus:
    def test_blocked_profile_wins(self):
        profile = SimpleNamespace(is_blocked=True)
        assert derive_status(_user(email_confirmed_at=None), profile, NOW) == "blocked"

    def test_active_ban_is_suspended(self):
        user = _user(banned_until=NOW + timedelta(hours=1))
        assert derive_status(user, None, NOW) == "suspended"

    def test_naive_ban_is_treated_as_utc(self):
        user = _user(banned_until=(NOW + timedelta(hours=1)).replace(tzinfo=None))
        assert derive_status(user, None, NOW) == "suspended"

    def test_expired_ban(self):
        user = _user(banned_until=NOW - timedelta(seconds=1))
        assert derive_status(user, None, NOW) == "active"

    def test_unconfirmed_email_is_pending(self):
        assert derive_status(_user(email_confirmed_at=None), None, NOW) == "pending"
