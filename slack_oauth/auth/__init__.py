"""Slack authentication: token reconciliation and profile resolution."""

from slack_oauth.auth.errors import (
    ProfileError,
    ReconciliationError,
    SlackAuthError,
    TransportError,
    VerificationFailed,
)
from slack_oauth.auth.params import authorization_params
from slack_oauth.auth.profile import SlackProfile, SlackProfileResolver
from slack_oauth.auth.reconcile import Grant, ReconciledToken, reconcile_token_response

__all__ = [
    "Grant",
    "ProfileError",
    "ReconciledToken",
    "ReconciliationError",
    "SlackAuthError",
    "SlackProfile",
    "SlackProfileResolver",
    "TransportError",
    "VerificationFailed",
    "authorization_params",
    "reconcile_token_response",
]
