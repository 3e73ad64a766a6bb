"""Pytest configuration and fixtures."""

import json
import os
from collections.abc import Callable

import httpx
import pytest

# Set test environment
os.environ["APP_ENV"] = "development"
os.environ["SLACK_CLIENT_ID"] = "client-id"
os.environ["SLACK_CLIENT_SECRET"] = "client-secret"


@pytest.fixture
def user_token_response():
    """oauth.v2.access response granting only a user token."""
    return {
        "ok": True,
        "app_id": "A0KRD7HC3",
        "authed_user": {
            "id": "user-id",
            "scope": "identity.basic,identity.email",
            "token_type": "user",
            "access_token": "user-access-token",
            "refresh_token": "user-refresh-token",
            "expires_in": 43200,
        },
        "team": {"id": "team-id", "name": "team-name"},
        "enterprise": None,
        "is_enterprise_install": False,
    }


@pytest.fixture
def bot_token_response():
    """oauth.v2.access response granting only a bot token."""
    return {
        "ok": True,
        "access_token": "bot-token",
        "token_type": "bot",
        "scope": "bot-scope-1,bot-scope-2",
        "expires_in": 43200,
        "bot_user_id": "bot-user-id",
        "app_id": "A0KRD7HC3",
        "team": {"id": "team-id", "name": "team-name"},
        "enterprise": None,
        "authed_user": {"id": "user-id"},
        "is_enterprise_install": False,
    }


@pytest.fixture
def dual_token_response(bot_token_response, user_token_response):
    """oauth.v2.access response granting both a bot and a user token."""
    return {**bot_token_response, "authed_user": dict(user_token_response["authed_user"])}


@pytest.fixture
def identity_body():
    """users.identity success body."""
    return {
        "ok": True,
        "user": {"name": "Sonny Whether", "id": "user-id", "email": "sonny@example.com"},
        "team": {"id": "team-id"},
    }


@pytest.fixture
def slack_transport() -> Callable[..., httpx.MockTransport]:
    """Build a MockTransport answering Slack endpoints from a route table.

    Routes map a URL path to a JSON-serializable body, a string body, or an
    ``httpx.Response``. Every request is recorded on ``transport.requests``.
    """

    def _build(routes: dict) -> httpx.MockTransport:
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            answer = routes.get(request.url.path)
            if answer is None:
                return httpx.Response(404, text="not found")
            if isinstance(answer, httpx.Response):
                return answer
            if isinstance(answer, str):
                return httpx.Response(200, text=answer)
            return httpx.Response(200, text=json.dumps(answer))

        transport = httpx.MockTransport(handler)
        transport.requests = requests
        return transport

    return _build
