"""
Protocol for OAuth providers used by the auth router.

Implementations (e.g. GitLabOAuthProvider) must support redirecting to the IdP,
handling the callback to return the verified user, and fetching a normalized
profile for an access token.
"""

from typing import Any, Protocol, runtime_checkable

from gitlab_auth.profile import Profile


@runtime_checkable
class OAuthProvider(Protocol):
    """Protocol for an OAuth2 provider (e.g. GitLab)."""

    name: str

    async def login_redirect(self, request, redirect_uri: str):
        """Redirect the user to the identity provider login page."""
        ...

    async def handle_callback(self, request) -> Any:
        """Handle the OAuth callback: exchange code for token, fetch profile, return the verified user."""
        ...

    async def user_profile(self, access_token: str) -> Profile:
        """Fetch and normalize the profile belonging to access_token."""
        ...
