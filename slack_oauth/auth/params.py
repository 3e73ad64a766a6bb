"""Slack-specific authorization request parameters."""

from collections.abc import Mapping, Sequence
from typing import Any


def authorization_params(
    options: Mapping[str, Any] | None = None,
    *,
    team: str | None = None,
    user_scope: str | Sequence[str] | None = None,
    scope_separator: str = ",",
) -> dict[str, str]:
    """Return the extra query parameters for Slack's authorize URL.

    Per-request ``options`` win over the provider-wide defaults.

    Args:
        options: Per-request overrides (``team``, ``user_scope``).
        team: Default workspace to restrict sign-in to.
        user_scope: Default scopes requested for the user token.
        scope_separator: Separator used to join scope lists.

    Returns:
        ``team`` and ``user_scope`` entries, each only when set.
    """
    options = options or {}
    params: dict[str, str] = {}

    selected_team = options.get("team") or team
    if selected_team:
        params["team"] = selected_team

    selected_user_scope = options.get("user_scope") or user_scope
    if selected_user_scope:
        if not isinstance(selected_user_scope, str):
            selected_user_scope = scope_separator.join(selected_user_scope)
        params["user_scope"] = selected_user_scope

    return params
