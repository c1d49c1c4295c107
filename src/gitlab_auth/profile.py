"""
Normalized profile model and the GitLab response parsers feeding it.

The parse_* helpers take a raw response body and raise the matching
ParseError subclass when the body is not the JSON shape GitLab documents.
Individual fields are never validated; a missing key becomes None.
"""

import json
from dataclasses import dataclass, field, replace
from typing import Any, List, Optional, Tuple

from gitlab_auth.errors import EmailsParseError, GroupsParseError, ProfileParseError

PROVIDER_NAME = "gitlab"


@dataclass(frozen=True)
class Email:
    value: Optional[str]
    primary: Optional[bool] = None

    def to_dict(self) -> dict:
        data = {"value": self.value}
        if self.primary is not None:
            data["primary"] = self.primary
        return data


@dataclass(frozen=True)
class Profile:
    """
    Canonical user profile handed to the verify callback.

    emails and groups are stored as tuples so a delivered profile cannot be
    changed. groups is None unless a group membership fetch succeeded;
    to_dict() then leaves the key out entirely. raw is the unparsed /user body
    and json its parsed form, kept for callers needing GitLab-specific fields.
    """

    id: Optional[str]
    username: Optional[str]
    display_name: Optional[str]
    emails: Tuple[Email, ...]
    avatar_url: Optional[str]
    profile_url: Optional[str]
    raw: str = field(repr=False)
    json: dict = field(repr=False)
    groups: Optional[Tuple[str, ...]] = None
    provider: str = PROVIDER_NAME

    def __post_init__(self):
        object.__setattr__(self, "emails", tuple(self.emails))
        if self.groups is not None:
            object.__setattr__(self, "groups", tuple(self.groups))

    def with_groups(self, groups: List[str]) -> "Profile":
        return replace(self, groups=tuple(groups))

    def with_all_emails(self, addresses: List[Optional[str]]) -> "Profile":
        """
        Merge the addresses from /user/emails into the profile.

        An empty list leaves the emails untouched. Otherwise the original entry
        is marked primary and every address is appended, flagged primary only
        when it string-equals the original address.
        """
        if not addresses:
            return self
        primary = self.emails[0].value
        emails = (Email(value=primary, primary=True),) + self.emails[1:]
        emails += tuple(Email(value=address, primary=address == primary) for address in addresses)
        return replace(self, emails=emails)

    def to_dict(self) -> dict:
        data = {
            "provider": self.provider,
            "id": self.id,
            "username": self.username,
            "displayName": self.display_name,
            "emails": [email.to_dict() for email in self.emails],
            "avatarUrl": self.avatar_url,
            "profileUrl": self.profile_url,
            "_raw": self.raw,
            "_json": self.json,
        }
        if self.groups is not None:
            data["groups"] = list(self.groups)
        return data


def _reject_constant(name: str):
    raise ValueError(f"Invalid JSON constant: {name}")


def _loads(body: Any) -> Any:
    # JSON proper has no NaN or Infinity literals.
    if isinstance(body, (bytes, bytearray)):
        body = body.decode("utf-8")
    return json.loads(body, parse_constant=_reject_constant)


def parse_profile(body: str) -> Profile:
    """Map a GET /api/v4/user body onto a Profile."""
    try:
        data = _loads(body)
    except (TypeError, ValueError) as exc:
        raise ProfileParseError() from exc
    if not isinstance(data, dict):
        raise ProfileParseError()

    # GitLab ids are integers; the profile always carries the string form.
    user_id = data.get("id")
    return Profile(
        id=str(user_id) if user_id is not None else None,
        username=data.get("username"),
        display_name=data.get("name"),
        emails=(Email(value=data.get("email")),),
        avatar_url=data.get("avatar_url"),
        profile_url=data.get("web_url"),
        raw=body,
        json=data,
    )


def _parse_list_of_objects(body: str, error_cls) -> List[dict]:
    try:
        data = _loads(body)
    except (TypeError, ValueError) as exc:
        raise error_cls() from exc
    if not isinstance(data, list) or not all(isinstance(item, dict) for item in data):
        raise error_cls()
    return data


def parse_groups(body: str) -> List[str]:
    """Group names from a GET /api/v4/groups body, in response order."""
    return [group.get("name") for group in _parse_list_of_objects(body, GroupsParseError)]


def parse_emails(body: str) -> List[Optional[str]]:
    """Addresses from a GET /api/v4/user/emails body, in response order."""
    return [entry.get("email") for entry in _parse_list_of_objects(body, EmailsParseError)]
