"""Reconcile Slack's oauth.v2.access response into a single credential.

Slack's v2 token endpoint can grant a bot token and a user token in the same
response. The bot credential sits at the root of the JSON object and the user
credential is nested under ``authed_user``::

    {
        "ok": true,
        "access_token": "xoxb-...",
        "token_type": "bot",
        "scope": "users:read",
        "bot_user_id": "U0KRQLJ9H",
        "team": {"id": "T9TK3CUKW", "name": "Slack Softworks"},
        "authed_user": {
            "id": "U1234",
            "scope": "identity.basic",
            "access_token": "xoxp-...",
            "token_type": "user"
        }
    }

Sign-in is about the user, so when a user token was granted it becomes the
canonical credential and is lifted to the root, while the bot credential is
moved under ``authed_bot``. Every field this module does not know about is
passed through untouched.
"""

import copy
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from slack_oauth.auth.errors import ReconciliationError

logger = logging.getLogger(__name__)

CREDENTIAL_FIELDS = ("scope", "token_type", "access_token", "refresh_token")


@dataclass(frozen=True)
class Grant:
    """Which credentials Slack actually issued for one token exchange."""

    user_granted: bool
    bot_granted: bool = False
    bot_user_id: str | None = None

    @property
    def kind(self) -> str:
        if self.user_granted and self.bot_granted:
            return "user+bot"
        if self.user_granted:
            return "user"
        return "bot" if self.bot_granted else "none"


@dataclass(frozen=True)
class ReconciledToken:
    """Canonical tokens plus the normalized token response."""

    access_token: str | None
    refresh_token: str | None
    params: dict[str, Any]
    grant: Grant


def reconcile_token_response(
    access_token: str | None,
    refresh_token: str | None,
    params: Any,
) -> ReconciledToken:
    """Pick the canonical credential out of an oauth.v2.access response.

    Args:
        access_token: Access token parsed from the response root by the
            generic OAuth2 exchange (the bot token when one was granted).
        refresh_token: Refresh token parsed from the response root.
        params: Decoded token response.

    Returns:
        The canonical tokens and a new, normalized copy of ``params``. When a
        user token was granted it overrides the candidate tokens; otherwise
        the candidates are returned as given.

    Raises:
        ReconciliationError: ``params`` is not an object or ``authed_user``
            is missing or malformed.
    """
    try:
        if not isinstance(params, Mapping):
            raise TypeError(f"expected a JSON object, got {type(params).__name__}")

        authed_user = params["authed_user"]
        if not isinstance(authed_user, Mapping):
            raise TypeError(f"authed_user must be an object, got {type(authed_user).__name__}")
        if "id" not in authed_user:
            raise KeyError("authed_user.id")

        bundle = copy.deepcopy(dict(params))
        bundle.pop("bot_user_id", None)

        authed_bot: dict[str, Any] = {}
        bot_user_id = params.get("bot_user_id")
        if params.get("token_type") == "bot":
            # expires_in stays at the root only
            authed_bot["id"] = bot_user_id
            for field in CREDENTIAL_FIELDS:
                authed_bot[field] = params.get(field)
        bundle["authed_bot"] = authed_bot

        user_granted = authed_user.get("token_type") == "user"
        if user_granted:
            access_token = authed_user.get("access_token")
            refresh_token = authed_user.get("refresh_token")

            bundle["id"] = authed_user["id"]
            for field in CREDENTIAL_FIELDS:
                bundle[field] = authed_user.get(field)
        else:
            bundle["id"] = bot_user_id
    except (KeyError, TypeError, AttributeError) as e:
        logger.warning(f"Malformed oauth.v2.access response: {type(e).__name__}: {e}")
        raise ReconciliationError(f"Unexpected token response structure: {e}") from e

    grant = Grant(
        user_granted=user_granted,
        bot_granted=bool(authed_bot),
        bot_user_id=bot_user_id,
    )
    logger.debug(f"Reconciled token response: grant={grant.kind} team={_team_id(bundle)}")
    return ReconciledToken(access_token, refresh_token, bundle, grant)


def _team_id(params: Mapping[str, Any]) -> str | None:
    team = params.get("team")
    return team.get("id") if isinstance(team, Mapping) else None
