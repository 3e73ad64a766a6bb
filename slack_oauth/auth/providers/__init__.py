"""OAuth provider implementations."""

from slack_oauth.auth.providers.base import AuthResult, OAuthProvider
from slack_oauth.auth.providers.slack import SlackProvider, SlackProviderOptions

__all__ = [
    "AuthResult",
    "OAuthProvider",
    "SlackProvider",
    "SlackProviderOptions",
]
