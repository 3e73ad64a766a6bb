"""Errors raised while authenticating with Slack."""

from typing import Any


class SlackAuthError(Exception):
    """Base class for Slack authentication failures."""

    pass


class TransportError(SlackAuthError):
    """An HTTP call to Slack failed (network, TLS or non-2xx status)."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ReconciliationError(SlackAuthError):
    """The oauth.v2.access response did not have the expected structure."""

    pass


class ProfileError(SlackAuthError):
    """The profile lookup returned an unusable or unsuccessful body."""

    def __init__(self, message: str, body: str | None = None) -> None:
        super().__init__(message)
        self.body = body


class VerificationFailed(SlackAuthError):
    """The application's verify callback rejected the authenticated user."""

    def __init__(self, message: str = "User rejected by verify callback", info: Any = None) -> None:
        super().__init__(message)
        self.info = info
