"""Tests for the session pre-check in front of admin paths."""
import pytest

from meydan.auth.edge import PathKind, classify_path, login_redirect_url


@pytest.mark.parametrize(
    "path, kind",
    [
        ("/admin", PathKind.ADMIN_PAGE),
        ("/admin/users/123", PathKind.ADMIN_PAGE),
        ("/administrator", PathKind.OTHER),
        ("/api/admin", PathKind.ADMIN_API),
        ("/api/admin/audit-logs", PathKind.ADMIN_API),
        ("/api/administer", PathKind.OTHER),
        ("/_next/static/chunk.js", PathKind.STATIC),
        ("/images/admin/banner.png", PathKind.STATIC),
        ("/favicon.ico", PathKind.STATIC),
        ("/", PathKind.OTHER),
        ("/login", PathKind.OTHER),
    ],
)
def test_classify_path(path, kind):
    assert classify_path(path) is kind


def test_login_redirect_url_encodes_target():
    assert login_redirect_url("/login", "/admin/users") == "/login?redirect=%2Fadmin%2Fusers"


class TestMiddleware:
    @pytest.mark.anyio
    async def test_admin_page_without_session_redirects(self, client):
        response = await client.get("/admin/users")

        assert response.status_code == 307
        assert response.headers["location"] == "/login?redirect=%2Fadmin%2Fusers"

    @pytest.mark.anyio
    async def test_admin_api_without_session_is_401(self, client):
        response = await client.get("/api/admin/session")

        assert response.status_code == 401
        assert response.json() == {
            "ok": False,
            "error": "Authentication required.",
            "code": "AUTH_ERROR",
        }

    @pytest.mark.anyio
    async def test_session_cookie_passes_to_routing(self, client):
        client.cookies.set("sb-project-auth-token", "anything")

        response = await client.get("/admin/users")

        # No page is served here; reaching the router is what matters.
        assert response.status_code == 404

    @pytest.mark.anyio
    async def test_cookie_presence_is_not_authorization(self, client):
        client.cookies.set("sb-project-auth-token", "not-a-token")

        response = await client.get("/api/admin/session")

        assert response.status_code == 401
        assert response.json()["code"] == "AUTH_ERROR"

    @pytest.mark.anyio
    async def test_non_admin_paths_are_untouched(self, client):
        response = await client.get("/_next/static/chunk.js")

        assert response.status_code == 404
        assert "location" not in response.headers
