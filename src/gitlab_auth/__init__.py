"""
GitLab OAuth2 adapter.

Exposes the provider (GitLabOAuthProvider), its configuration (GitLabConfig,
SecondaryFetchPolicy), the normalized profile model, the error taxonomy and
the FastAPI auth router factory (create_auth_router).
"""

from .config import GitLabConfig, SecondaryFetchPolicy
from .errors import (
    AuthenticationRejected,
    EmailsFetchError,
    EmailsParseError,
    GitLabAuthError,
    GroupsFetchError,
    GroupsParseError,
    ParseError,
    ProfileFetchError,
    ProfileParseError,
    TransportError,
)
from .gitlab import GitLabOAuthProvider
from .profile import Email, Profile
from .protocol import OAuthProvider
from .router import create_auth_router

__all__ = [
    "GitLabConfig",
    "SecondaryFetchPolicy",
    "GitLabOAuthProvider",
    "OAuthProvider",
    "Profile",
    "Email",
    "GitLabAuthError",
    "TransportError",
    "ParseError",
    "ProfileFetchError",
    "ProfileParseError",
    "GroupsFetchError",
    "GroupsParseError",
    "EmailsFetchError",
    "EmailsParseError",
    "AuthenticationRejected",
    "create_auth_router",
]
