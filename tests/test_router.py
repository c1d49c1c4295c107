"""Tests for the FastAPI auth router wired to a GitLabOAuthProvider."""

from unittest.mock import AsyncMock, patch

import httpx
import pytest
from authlib.integrations.starlette_client import OAuthError
from fastapi import FastAPI
from fastapi.responses import RedirectResponse
from fastapi.testclient import TestClient
from starlette.middleware.sessions import SessionMiddleware

from conftest import ACCESS_TOKEN, GROUPS, GROUPS_URL, PROFILE_URL, USER, fake_get, make_response
from gitlab_auth import create_auth_router

TOKEN = {"access_token": ACCESS_TOKEN, "token_type": "bearer"}


@pytest.fixture
def provider(make_provider):
    return make_provider(scope="read_user api")


@pytest.fixture
def client(provider):
    app = FastAPI()
    app.add_middleware(SessionMiddleware, secret_key="test-secret")
    app.include_router(create_auth_router(provider))
    return TestClient(app)


def _ok_routes():
    return {
        PROFILE_URL: make_response(PROFILE_URL, USER),
        GROUPS_URL: make_response(GROUPS_URL, GROUPS),
    }


@pytest.mark.unit
class TestAuthRouter:

    def test_login_redirects_to_gitlab(self, provider, client):
        redirect = RedirectResponse("https://gitlab.com/oauth/authorize?client_id=ABC123")
        with patch.object(provider.client, "authorize_redirect", new=AsyncMock(return_value=redirect)) as authorize:
            response = client.get("/login", follow_redirects=False)

        assert response.status_code == 307
        assert response.headers["location"].startswith("https://gitlab.com/oauth/authorize")
        assert authorize.await_args.args[1] == "http://testserver/auth/callback"

    def test_callback_stores_user_in_session(self, provider, client):
        with patch.object(provider.client, "authorize_access_token", new=AsyncMock(return_value=TOKEN)):
            with patch.object(provider.client, "get", new=fake_get(_ok_routes())):
                response = client.get("/auth/callback?code=abc&state=xyz", follow_redirects=False)

        assert response.status_code == 307
        assert response.headers["location"] == "/me"

        me = client.get("/me")
        assert me.status_code == 200
        assert me.json() == {"user": {"id": "1", "username": "john_smith"}}

    def test_callback_token_exchange_error_returns_401(self, provider, client):
        error = OAuthError(error="mismatching_state", description="CSRF Warning! State not equal in request and response.")
        with patch.object(provider.client, "authorize_access_token", new=AsyncMock(side_effect=error)):
            response = client.get("/auth/callback?code=abc&state=xyz", follow_redirects=False)

        assert response.status_code == 401
        assert "mismatching_state" in response.json()["error"]

    def test_callback_groups_failure_returns_401(self, provider, client):
        routes = _ok_routes()
        routes[GROUPS_URL] = httpx.ConnectError("something went wrong")
        with patch.object(provider.client, "authorize_access_token", new=AsyncMock(return_value=TOKEN)):
            with patch.object(provider.client, "get", new=fake_get(routes)):
                response = client.get("/auth/callback?code=abc&state=xyz", follow_redirects=False)

        assert response.status_code == 401
        assert response.json() == {"error": "Failed to fetch groups of user"}
        assert client.get("/me", follow_redirects=False).status_code == 307

    def test_me_redirects_to_login_when_anonymous(self, client):
        response = client.get("/me", follow_redirects=False)

        assert response.status_code == 307
        assert response.headers["location"] == "/login"

    def test_logout_clears_session(self, provider, client):
        with patch.object(provider.client, "authorize_access_token", new=AsyncMock(return_value=TOKEN)):
            with patch.object(provider.client, "get", new=fake_get(_ok_routes())):
                client.get("/auth/callback?code=abc", follow_redirects=False)

        response = client.get("/logout", follow_redirects=False)

        assert response.status_code == 307
        assert response.headers["location"] == "/"
        assert client.get("/me", follow_redirects=False).headers["location"] == "/login"
