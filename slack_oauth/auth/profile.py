"""Slack profile lookup and normalization."""

import json
import logging
from typing import Any
from urllib.parse import urlencode

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from slack_oauth.auth.errors import ProfileError
from slack_oauth.auth.oauth2 import OAuth2Client
from slack_oauth.auth.reconcile import Grant

logger = logging.getLogger(__name__)

PROVIDER_NAME = "slack"

# Profile of the user that owns a user token
USERS_IDENTITY_URL = "https://slack.com/api/users.identity"
# Profile of any user in the workspace, used for the bot user
USERS_INFO_URL = "https://slack.com/api/users.info"


class SlackProfile(BaseModel):
    """Normalized Slack identity.

    ``provider``, ``id`` and ``displayName`` are always set; every other
    field of the profile response (``user``, ``team``, ...) is kept as an
    extra attribute.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    provider: str = PROVIDER_NAME
    id: str
    display_name: str | None = Field(default=None, alias="displayName")

    @property
    def team_id(self) -> str | None:
        team = getattr(self, "team", None)
        return team.get("id") if isinstance(team, dict) else None


class SlackProfileResolver:
    """Selects the profile endpoint for a grant and fetches the profile."""

    def __init__(
        self,
        oauth2: OAuth2Client,
        profile_url: str | None = None,
        skip_user_profile: bool = False,
    ) -> None:
        self.oauth2 = oauth2
        self.profile_url = profile_url
        self.skip_user_profile = skip_user_profile

    def select_profile_url(self, grant: Grant) -> str | None:
        """Return the profile endpoint for this grant, or None to skip the lookup.

        A configured profile URL is used as-is. Otherwise a user token is
        looked up with users.identity and a bot-only grant with users.info
        for the bot user.
        """
        if self.skip_user_profile:
            return None
        if self.profile_url:
            return self.profile_url
        if grant.user_granted:
            return USERS_IDENTITY_URL
        if not grant.bot_user_id:
            raise ProfileError("No user token and no bot_user_id to look up")
        return f"{USERS_INFO_URL}?{urlencode({'user': grant.bot_user_id})}"

    async def fetch_profile(self, access_token: str, grant: Grant) -> SlackProfile | None:
        """Fetch and normalize the profile for the canonical access token.

        Args:
            access_token: Canonical access token.
            grant: Credentials granted by the token exchange.

        Returns:
            The normalized profile, or None when profile lookup is disabled.

        Raises:
            TransportError: The request failed.
            ProfileError: The body was not JSON or Slack reported a failure.
        """
        url = self.select_profile_url(grant)
        if url is None:
            return None

        logger.debug(f"Fetching Slack profile from {url.split('?')[0]} for {grant.kind} grant")
        # The token goes in the Authorization header only, never also in the query string
        response = await self.oauth2.get(url, headers={"Authorization": f"Bearer {access_token}"})
        return parse_profile(response.text)


def parse_profile(body: str) -> SlackProfile:
    """Map a users.identity / users.info body to a SlackProfile.

    Raises:
        ProfileError: The body was not JSON, ``ok`` was false or no ``user``
            object with a usable id and name was returned.
    """
    try:
        data: Any = json.loads(body)
    except ValueError as e:
        raise ProfileError(f"Profile response is not valid JSON: {e}", body=body) from e

    if not isinstance(data, dict) or not data.get("ok"):
        error = data.get("error") if isinstance(data, dict) else None
        logger.warning(f"Slack profile lookup failed: {error or 'unknown error'}")
        raise ProfileError(f"Slack profile lookup failed: {error or 'unknown error'}", body=body)

    user = data.get("user")
    if not isinstance(user, dict) or "id" not in user:
        raise ProfileError("Profile response has no user object", body=body)

    data.pop("ok")
    data["provider"] = PROVIDER_NAME
    data["id"] = user["id"]
    data["displayName"] = user.get("name")
    try:
        return SlackProfile.model_validate(data)
    except ValidationError as e:
        logger.warning(f"Slack profile has unexpected field types: {e.error_count()} error(s)")
        raise ProfileError("Profile response has an unexpected user id or name", body=body) from e
