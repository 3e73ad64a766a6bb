"""FastAPI dependencies."""

from functools import lru_cache
from typing import Annotated, Any

from fastapi import Depends

from slack_oauth.auth.profile import SlackProfile
from slack_oauth.auth.providers import SlackProvider, SlackProviderOptions
from slack_oauth.config import settings


def accept_slack_identity(
    access_token: str, refresh_token: str | None, profile: SlackProfile | None
) -> Any:
    """Default verify callback: accept every identity Slack vouches for."""
    return profile if profile is not None else True


@lru_cache
def get_slack_provider() -> SlackProvider:
    """Get the process-wide Slack provider built from settings."""
    return SlackProvider(SlackProviderOptions.from_settings(settings), accept_slack_identity)


SlackProviderDep = Annotated[SlackProvider, Depends(get_slack_provider)]
