"""
Errors raised while fetching and normalizing a GitLab profile.

TransportError means the authenticated GET itself failed (network, TLS,
non-2xx status, Authlib token error); the original exception is kept on
``oauth_error``. ParseError means a response body was not the JSON shape
expected. There is no validation error: missing fields pass through.
"""

from typing import Optional


class GitLabAuthError(Exception):
    """Base class for every failure surfaced by the adapter."""

    message = "GitLab authentication failed"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.message)


class TransportError(GitLabAuthError):
    def __init__(self, oauth_error: Optional[BaseException] = None, message: Optional[str] = None):
        super().__init__(message)
        self.oauth_error = oauth_error


class ProfileFetchError(TransportError):
    message = "Failed to fetch user profile"


class GroupsFetchError(TransportError):
    message = "Failed to fetch groups of user"


class EmailsFetchError(TransportError):
    message = "Failed to fetch emails of user"


class ParseError(GitLabAuthError):
    pass


class ProfileParseError(ParseError):
    message = "Failed to parse user profile"


class GroupsParseError(ParseError):
    message = "Failed to parse groups of user"


class EmailsParseError(ParseError):
    message = "Failed to parse emails of user"


class AuthenticationRejected(GitLabAuthError):
    """The verify callback declined the authenticated user."""

    message = "User rejected by verify callback"
