"""Slack sign-in routes."""

import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Annotated
from urllib.parse import urlencode

from fastapi import APIRouter, HTTPException, Query, status
from fastapi.responses import RedirectResponse
from pydantic import BaseModel

from slack_oauth.api.dependencies import SlackProviderDep
from slack_oauth.auth.errors import (
    ProfileError,
    ReconciliationError,
    SlackAuthError,
    TransportError,
    VerificationFailed,
)
from slack_oauth.config import settings

logger = logging.getLogger(__name__)

router = APIRouter()

# OAuth state storage (in production, use Redis or database)
_oauth_states: dict[str, dict] = {}

STATE_TTL = timedelta(minutes=10)

# Shown to the user on the login page; the exception detail stays in the log
FAILURE_MESSAGES: dict[type[SlackAuthError], str] = {
    TransportError: "Could not reach Slack",
    ReconciliationError: "Slack returned an unexpected token response",
    ProfileError: "Could not load your Slack profile",
    VerificationFailed: "Sign-in was not allowed",
}
DEFAULT_FAILURE_MESSAGE = "Slack sign-in failed"


# ============================================================================
# Schemas
# ============================================================================


class SlackLoginResponse(BaseModel):
    """Identity established by a completed Slack sign-in."""

    user_id: str | None
    display_name: str | None = None
    team_id: str | None = None
    team_name: str | None = None
    scope: str | None = None
    token_type: str | None = None
    bot_user_id: str | None = None


# ============================================================================
# Helpers
# ============================================================================


def _failure_redirect(error: str, message: str) -> RedirectResponse:
    query = urlencode({"error": error, "message": message})
    return RedirectResponse(url=f"{settings.frontend_url}/login?{query}")


def _evict_expired_states() -> None:
    now = datetime.now(timezone.utc)
    expired = [key for key, data in _oauth_states.items() if now - data["created_at"] > STATE_TTL]
    for key in expired:
        del _oauth_states[key]


def _pop_state(state: str) -> dict | None:
    state_data = _oauth_states.pop(state, None)
    if state_data and datetime.now(timezone.utc) - state_data["created_at"] > STATE_TTL:
        return None
    return state_data


# ============================================================================
# Slack OAuth
# ============================================================================


@router.get("")
async def slack_login(
    provider: SlackProviderDep,
    team: Annotated[str | None, Query()] = None,
    user_scope: Annotated[str | None, Query()] = None,
) -> RedirectResponse:
    """
    Initiate Slack sign-in.

    Redirects the user to Slack's authorization page. ``team`` and
    ``user_scope`` override the configured defaults for this request.
    """
    _evict_expired_states()

    # Generate state for CSRF protection
    state = secrets.token_urlsafe(32)
    _oauth_states[state] = {
        "provider": provider.name,
        "created_at": datetime.now(timezone.utc),
    }

    overrides = {key: value for key, value in (("team", team), ("user_scope", user_scope)) if value}
    return RedirectResponse(url=provider.get_authorization_url(state, **overrides))


@router.get("/callback", response_model=SlackLoginResponse)
async def slack_callback(
    provider: SlackProviderDep,
    state: Annotated[str, Query()],
    code: Annotated[str | None, Query()] = None,
    error: Annotated[str | None, Query()] = None,
):
    """
    Handle the OAuth callback from Slack.

    Exchanges the code, reconciles the bot/user token response, resolves the
    profile and runs the verify callback. Failures redirect to the frontend
    login page with the error.
    """
    state_data = _pop_state(state)
    if not state_data or state_data["provider"] != provider.name:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid OAuth state",
        )

    if error or not code:
        # e.g. the user pressed "Cancel" on Slack's consent screen
        return _failure_redirect(error or "missing_code", "Slack did not return an authorization code")

    try:
        result = await provider.authenticate(code)
    except SlackAuthError as e:
        logger.warning(f"Slack sign-in failed: {type(e).__name__}: {e}")
        message = FAILURE_MESSAGES.get(type(e), DEFAULT_FAILURE_MESSAGE)
        return _failure_redirect("oauth_failed", message)

    params = result.params
    team = params.get("team") if isinstance(params.get("team"), dict) else {}
    return SlackLoginResponse(
        user_id=params.get("id"),
        display_name=result.profile.display_name if result.profile else None,
        team_id=team.get("id"),
        team_name=team.get("name"),
        scope=params.get("scope"),
        token_type=params.get("token_type"),
        bot_user_id=params.get("authed_bot", {}).get("id"),
    )
