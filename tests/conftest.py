"""Shared fixtures: GitLab response bodies and a fake Authlib GET."""

import json
from unittest.mock import AsyncMock

import httpx
import pytest

from gitlab_auth import GitLabConfig, GitLabOAuthProvider

PROFILE_URL = "https://gitlab.com/api/v4/user"
GROUPS_URL = "https://gitlab.com/api/v4/groups?min_access_level=10"
EMAILS_URL = "https://gitlab.com/api/v4/user/emails"
ACCESS_TOKEN = "token"

USER = {
    "id": 1,
    "name": "John Smith",
    "username": "john_smith",
    "state": "active",
    "avatar_url": "https://gitlab.com/uploads/user/avatar/1/index.jpg",
    "web_url": "https://gitlab.com/u/john_smith",
    "created_at": "2012-05-23T08:00:58Z",
    "is_admin": False,
    "email": "john@example.com",
    "identities": [],
    "two_factor_enabled": True,
}

GROUPS = [
    {"id": 0, "name": "groupA", "path": "groupA", "full_path": "groupA"},
    {"id": 1, "name": "groupB", "path": "groupB", "full_path": "groupB"},
]

EMAILS = [
    {"id": 1, "email": "a@x.com"},
    {"id": 2, "email": "john@example.com"},
]


def make_response(url: str, body, status_code: int = 200) -> httpx.Response:
    """Build a real httpx.Response; dicts/lists are JSON-encoded, strings sent as-is."""
    text = body if isinstance(body, str) else json.dumps(body)
    return httpx.Response(status_code, text=text, request=httpx.Request("GET", url))


def fake_get(routes: dict) -> AsyncMock:
    """
    Stand-in for the Authlib client's get(url, token=...).

    routes maps url -> httpx.Response, or an exception instance to raise.
    Unknown urls and wrong tokens raise, like a provider would reject them.
    """

    async def _get(url, token=None, **kwargs):
        if token != {"access_token": ACCESS_TOKEN, "token_type": "bearer"}:
            raise httpx.ConnectError("incorrect token argument")
        if url not in routes:
            raise httpx.ConnectError(f"incorrect url argument: {url}")
        result = routes[url]
        if isinstance(result, BaseException):
            raise result
        return result

    return AsyncMock(side_effect=_get)


async def _verify(access_token, refresh_token, profile):
    return {"id": profile.id, "username": profile.username}


@pytest.fixture
def make_provider():
    def _make(verify=_verify, **kwargs):
        kwargs.setdefault("client_id", "ABC123")
        kwargs.setdefault("client_secret", "secret")
        return GitLabOAuthProvider(GitLabConfig(**kwargs), verify)

    return _make
