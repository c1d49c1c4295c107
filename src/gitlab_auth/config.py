"""
Configuration module for the GitLab OAuth adapter.

GitLabConfig holds the endpoint URLs and scope settings handed to the Authlib
client, plus the switches that control the secondary (groups / emails)
fetches. Endpoint URLs not given explicitly are derived from base_url.
Use GitLabConfig.from_env() to read GITLAB_* environment variables.
"""

import os
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence, Union
from urllib.parse import urljoin

DEFAULT_BASE_URL = "https://gitlab.com"
DEFAULT_SCOPE = "read_user"
DEFAULT_SCOPE_SEPARATOR = ","

# Requesting this scope turns on the group membership fetch.
GROUPS_SCOPE = "api"


class SecondaryFetchPolicy(str, Enum):
    """What happens to a login when the groups or emails fetch fails."""

    STRICT = "strict"
    BEST_EFFORT = "best_effort"

    @classmethod
    def parse(cls, value: Union[str, "SecondaryFetchPolicy"]) -> "SecondaryFetchPolicy":
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            raise ValueError(f"Unknown secondary fetch policy: {value!r}")
        normalized = value.strip().lower().replace("-", "_")
        if normalized == "besteffort":
            normalized = cls.BEST_EFFORT.value
        try:
            return cls(normalized)
        except ValueError:
            raise ValueError(f"Unknown secondary fetch policy: {value!r}") from None


def _env_flag(name: str) -> bool:
    return os.getenv(name, "").strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class GitLabConfig:
    """Immutable adapter configuration; read once at provider construction."""

    client_id: str
    client_secret: Optional[str] = None
    base_url: str = DEFAULT_BASE_URL
    authorization_url: Optional[str] = None
    token_url: Optional[str] = None
    profile_url: Optional[str] = None
    groups_url: Optional[str] = None
    emails_url: Optional[str] = None
    scope: Union[str, Sequence[str]] = DEFAULT_SCOPE
    scope_separator: str = DEFAULT_SCOPE_SEPARATOR
    fetch_all_emails: bool = False
    groups_fetch_policy: SecondaryFetchPolicy = SecondaryFetchPolicy.STRICT
    emails_fetch_policy: SecondaryFetchPolicy = SecondaryFetchPolicy.BEST_EFFORT
    scopes: List[str] = field(init=False)

    def __post_init__(self):
        if not self.client_id:
            raise ValueError("GitLab OAuth requires a client_id")

        base_url = self.base_url or DEFAULT_BASE_URL
        scope_separator = self.scope_separator or DEFAULT_SCOPE_SEPARATOR

        # frozen dataclass: fill derived values through object.__setattr__
        set_ = object.__setattr__
        set_(self, "base_url", base_url)
        set_(self, "scope_separator", scope_separator)
        set_(self, "authorization_url", self.authorization_url or urljoin(base_url, "oauth/authorize"))
        set_(self, "token_url", self.token_url or urljoin(base_url, "oauth/token"))
        set_(self, "profile_url", self.profile_url or urljoin(base_url, "api/v4/user"))
        set_(self, "groups_url", self.groups_url or urljoin(base_url, "api/v4/groups?min_access_level=10"))
        set_(self, "emails_url", self.emails_url or urljoin(base_url, "api/v4/user/emails"))
        set_(self, "groups_fetch_policy", SecondaryFetchPolicy.parse(self.groups_fetch_policy))
        set_(self, "emails_fetch_policy", SecondaryFetchPolicy.parse(self.emails_fetch_policy))
        set_(self, "scopes", _split_scopes(self.scope or DEFAULT_SCOPE, scope_separator))

    @property
    def scope_string(self) -> str:
        """Scopes joined with the configured separator, as sent to the authorize endpoint."""
        return self.scope_separator.join(self.scopes)

    @property
    def fetch_groups(self) -> bool:
        return GROUPS_SCOPE in self.scopes

    @classmethod
    def from_env(cls) -> "GitLabConfig":
        """Build a config from GITLAB_* environment variables."""
        return cls(
            client_id=os.getenv("GITLAB_CLIENT_ID", ""),
            client_secret=os.getenv("GITLAB_CLIENT_SECRET"),
            base_url=os.getenv("GITLAB_BASE_URL", DEFAULT_BASE_URL),
            authorization_url=os.getenv("GITLAB_AUTHORIZATION_URL"),
            token_url=os.getenv("GITLAB_TOKEN_URL"),
            profile_url=os.getenv("GITLAB_PROFILE_URL"),
            groups_url=os.getenv("GITLAB_GROUPS_URL"),
            emails_url=os.getenv("GITLAB_EMAILS_URL"),
            scope=os.getenv("GITLAB_SCOPE", DEFAULT_SCOPE),
            scope_separator=os.getenv("GITLAB_SCOPE_SEPARATOR", DEFAULT_SCOPE_SEPARATOR),
            fetch_all_emails=_env_flag("GITLAB_FETCH_ALL_EMAILS"),
            groups_fetch_policy=os.getenv("GITLAB_GROUPS_FETCH_POLICY", SecondaryFetchPolicy.STRICT.value),
            emails_fetch_policy=os.getenv("GITLAB_EMAILS_FETCH_POLICY", SecondaryFetchPolicy.BEST_EFFORT.value),
        )


def _split_scopes(scope: Union[str, Sequence[str]], separator: str) -> List[str]:
    """Normalize a scope string or sequence into an ordered, de-duplicated token list."""
    if isinstance(scope, str):
        pieces = scope.split(separator)
    else:
        pieces = list(scope)

    scopes: List[str] = []
    for piece in pieces:
        for token in re.split(r"\s+", piece.strip()):
            if token and token not in scopes:
                scopes.append(token)
    return scopes
