"""
GitLab OAuth2 provider.

Uses Authlib for the authorization-code flow and for bearer-authenticated
GETs against the GitLab REST API, then normalizes the /user response (plus
optional group membership and secondary emails) into a Profile.
"""

import inspect
import logging
from typing import Any, Callable, List, Optional

import httpx
from authlib.integrations.starlette_client import OAuth, OAuthError

from gitlab_auth.config import GitLabConfig, SecondaryFetchPolicy
from gitlab_auth.errors import (
    AuthenticationRejected,
    EmailsFetchError,
    GitLabAuthError,
    GroupsFetchError,
    ProfileFetchError,
)
from gitlab_auth.profile import Profile, parse_emails, parse_groups, parse_profile
from gitlab_auth.protocol import OAuthProvider

logger = logging.getLogger(__name__)

# Anything the HTTP layer raises for a failed GET, including non-2xx statuses.
TRANSPORT_ERRORS = (httpx.HTTPError, OAuthError)

# verify(access_token, refresh_token, profile) -> user, or falsy to reject.
# May be a plain function or a coroutine function.
VerifyCallback = Callable[[str, Optional[str], Profile], Any]


class GitLabOAuthProvider(OAuthProvider):
    """OAuth provider that authenticates against GitLab and normalizes its user profile."""

    name: str = "gitlab"

    def __init__(self, config: GitLabConfig, verify: VerifyCallback):
        """Register a private Authlib client for this config; the client is the only HTTP collaborator."""
        self.name = "gitlab"
        self.config = config
        self._verify = verify
        self.oauth = OAuth()
        self.client = self.oauth.register(
            name=self.name,
            client_id=config.client_id,
            client_secret=config.client_secret,
            authorize_url=config.authorization_url,
            access_token_url=config.token_url,
            client_kwargs={"scope": config.scope_string},
        )

    async def login_redirect(self, request, redirect_uri: str):
        """Return RedirectResponse to GitLab's authorize endpoint."""
        return await self.client.authorize_redirect(request, redirect_uri)

    async def handle_callback(self, request) -> Any:
        """Exchange code for token, fetch the profile and run it through verify. Return the verified user."""
        token = await self.client.authorize_access_token(request)
        access_token = token["access_token"]
        profile = await self.user_profile(access_token)

        user = self._verify(access_token, token.get("refresh_token"), profile)
        if inspect.isawaitable(user):
            user = await user
        if not user:
            logger.info("GitLab user id=%s rejected by verify callback", profile.id)
            raise AuthenticationRejected()

        logger.info("GitLab login for user id=%s", profile.id)
        return user

    async def _authenticated_get(self, url: str, access_token: str) -> str:
        """
        GET url with the access token as an Authorization: Bearer header.
        Non-2xx responses raise httpx.HTTPStatusError.
        """
        token = {"access_token": access_token, "token_type": "bearer"}
        response = await self.client.get(url, token=token)
        response.raise_for_status()
        return response.text

    async def user_profile(self, access_token: str) -> Profile:
        """
        Fetch GET /api/v4/user and build the normalized Profile.

        When the "api" scope is configured the user's groups are fetched next;
        when fetch_all_emails is set, the secondary addresses after that. Each
        secondary fetch either fails the whole call or is logged and skipped,
        according to its SecondaryFetchPolicy.
        """
        logger.debug("Fetching GitLab profile from %s", self.config.profile_url)
        try:
            body = await self._authenticated_get(self.config.profile_url, access_token)
        except TRANSPORT_ERRORS as e:
            raise ProfileFetchError(e) from e

        profile = parse_profile(body)

        if self.config.fetch_groups:
            groups = await self._secondary_fetch(
                "groups",
                self.config.groups_url,
                access_token,
                self.config.groups_fetch_policy,
                GroupsFetchError,
                parse_groups,
            )
            if groups is not None:
                profile = profile.with_groups(groups)

        if self.config.fetch_all_emails:
            addresses = await self._secondary_fetch(
                "emails",
                self.config.emails_url,
                access_token,
                self.config.emails_fetch_policy,
                EmailsFetchError,
                parse_emails,
            )
            if addresses is not None:
                profile = profile.with_all_emails(addresses)

        return profile

    async def _secondary_fetch(
        self,
        kind: str,
        url: str,
        access_token: str,
        policy: SecondaryFetchPolicy,
        fetch_error: type,
        parse: Callable[[str], List[Any]],
    ) -> Optional[List[Any]]:
        """Run one dependent GET + parse. Returns None when a best-effort fetch failed."""
        logger.debug("Fetching GitLab %s from %s", kind, url)
        try:
            try:
                body = await self._authenticated_get(url, access_token)
            except TRANSPORT_ERRORS as e:
                raise fetch_error(e) from e
            return parse(body)
        except GitLabAuthError as e:
            if policy is SecondaryFetchPolicy.STRICT:
                raise
            logger.warning("Ignoring failed GitLab %s fetch: %s", kind, e)
            return None
