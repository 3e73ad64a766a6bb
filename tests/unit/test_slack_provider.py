"""Tests for the Slack OAuth provider."""

from collections import namedtuple
from unittest.mock import AsyncMock, MagicMock
from urllib.parse import parse_qs, urlparse

import httpx
import pytest

from slack_oauth.auth.errors import (
    ProfileError,
    ReconciliationError,
    TransportError,
    VerificationFailed,
)
from slack_oauth.auth.providers import SlackProvider, SlackProviderOptions

TOKEN_PATH = "/api/oauth.v2.access"
Account = namedtuple("Account", ["id", "email", "team"])
BOT_PROFILE = {"ok": True, "user": {"id": "bot-user-id", "name": "deploybot"}}


def _provider(transport=None, verify=None, **options) -> SlackProvider:
    http = httpx.AsyncClient(transport=transport) if transport else None
    return SlackProvider(
        SlackProviderOptions(client_id="clientId", client_secret="clientSecret", callback_url="/cb", **options),
        verify or MagicMock(return_value={"user": "ok"}),
        http=http,
    )


class TestProviderProperties:
    """Tests for provider metadata."""

    def test_name_defaults_to_slack(self):
        """Test the default strategy name."""
        assert _provider().name == "slack"

    def test_custom_name(self):
        """Test that the strategy name can be overridden."""
        assert _provider(name="slack-workspace").name == "slack-workspace"

    def test_endpoints(self):
        """Test the default Slack endpoints."""
        provider = _provider()

        assert provider.authorization_url == "https://slack.com/oauth/v2/authorize"
        assert provider.token_url == "https://slack.com/api/oauth.v2.access"
        assert provider.scopes == ["users:read"]


class TestAuthorizationUrl:
    """Tests for the Slack authorize redirect."""

    def test_includes_scope_and_user_scope(self):
        """Test that bot and user scopes are requested separately."""
        url = _provider().get_authorization_url("state-1")
        query = parse_qs(urlparse(url).query)

        assert query["scope"] == ["users:read"]
        assert query["user_scope"] == ["identity.basic,identity.email,identity.team,identity.avatar"]
        assert query["state"] == ["state-1"]
        assert query["redirect_uri"] == ["/cb"]
        assert "team" not in query

    def test_default_team(self):
        """Test that the configured workspace is requested."""
        url = _provider(team="T123").get_authorization_url("s")

        assert parse_qs(urlparse(url).query)["team"] == ["T123"]

    def test_per_request_overrides(self):
        """Test per-request scope, team and user_scope overrides."""
        url = _provider(team="T123").get_authorization_url(
            "s", scope=["chat:write"], team="T999", user_scope=["identity.basic"]
        )
        query = parse_qs(urlparse(url).query)

        assert query["scope"] == ["chat:write"]
        assert query["team"] == ["T999"]
        assert query["user_scope"] == ["identity.basic"]


class TestAuthenticateUserGrant:
    """Tests for sign-in with a user token."""

    @pytest.mark.asyncio
    async def test_verify_receives_user_credential(self, slack_transport, user_token_response, identity_body):
        """Test that verify gets the user token and users.identity profile."""
        transport = slack_transport({TOKEN_PATH: user_token_response, "/api/users.identity": identity_body})
        verify = MagicMock(return_value={"user": "ok"})

        result = await _provider(transport, verify).authenticate("code")

        access_token, refresh_token, profile = verify.call_args.args
        assert access_token == "user-access-token"
        assert refresh_token == "user-refresh-token"
        assert profile.id == "user-id"
        assert profile.display_name == "Sonny Whether"
        assert result.user == {"user": "ok"}
        assert result.params["id"] == "user-id"
        assert result.params["authed_bot"] == {}

    @pytest.mark.asyncio
    async def test_dual_grant_uses_users_identity(self, slack_transport, dual_token_response, identity_body):
        """Test that a dual grant signs in the user, not the bot."""
        transport = slack_transport({TOKEN_PATH: dual_token_response, "/api/users.identity": identity_body})

        result = await _provider(transport).authenticate("code")

        profile_request = transport.requests[1]
        assert profile_request.url.path == "/api/users.identity"
        assert profile_request.headers["Authorization"] == "Bearer user-access-token"
        assert result.access_token == "user-access-token"
        assert result.params["authed_bot"]["access_token"] == "bot-token"

    @pytest.mark.asyncio
    async def test_async_verify(self, slack_transport, user_token_response, identity_body):
        """Test that an async verify callback is awaited."""
        transport = slack_transport({TOKEN_PATH: user_token_response, "/api/users.identity": identity_body})
        verify = AsyncMock(return_value="account-42")

        result = await _provider(transport, verify).authenticate("code")

        verify.assert_awaited_once()
        assert result.user == "account-42"

    @pytest.mark.asyncio
    async def test_pass_token_response(self, slack_transport, user_token_response, identity_body):
        """Test that verify can receive the reconciled token response."""
        transport = slack_transport({TOKEN_PATH: user_token_response, "/api/users.identity": identity_body})
        verify = MagicMock(return_value="account-42")

        await _provider(transport, verify, pass_token_response=True).authenticate("code")

        _, _, params, profile = verify.call_args.args
        assert params["team"] == {"id": "team-id", "name": "team-name"}
        assert profile.id == "user-id"


class TestAuthenticateBotGrant:
    """Tests for sign-in with only a bot token."""

    @pytest.mark.asyncio
    async def test_looks_up_bot_user(self, slack_transport, bot_token_response):
        """Test that the bot user is looked up with the bot token."""
        transport = slack_transport({TOKEN_PATH: bot_token_response, "/api/users.info": BOT_PROFILE})
        verify = MagicMock(return_value="bot-account")

        result = await _provider(transport, verify).authenticate("code")

        profile_request = transport.requests[1]
        assert profile_request.url.params["user"] == "bot-user-id"
        assert profile_request.headers["Authorization"] == "Bearer bot-token"
        assert result.access_token == "bot-token"
        assert result.params["id"] == "bot-user-id"
        assert verify.call_args.args[2].id == "bot-user-id"

    @pytest.mark.asyncio
    async def test_custom_profile_url(self, slack_transport, bot_token_response):
        """Test that a configured profile URL is used for a bot grant."""
        transport = slack_transport({TOKEN_PATH: bot_token_response, "/custom": BOT_PROFILE})

        await _provider(transport, profile_url="https://slack.com/custom").authenticate("code")

        assert transport.requests[1].url.path == "/custom"

    @pytest.mark.asyncio
    async def test_skip_user_profile(self, slack_transport, bot_token_response):
        """Test that verify gets no profile when lookup is disabled."""
        transport = slack_transport({TOKEN_PATH: bot_token_response})
        verify = MagicMock(return_value="bot-account")

        await _provider(transport, verify, skip_user_profile=True).authenticate("code")

        assert len(transport.requests) == 1
        assert verify.call_args.args == ("bot-token", None, None)


class TestAuthenticateFailures:
    """Tests for failed sign-in attempts."""

    @pytest.mark.asyncio
    async def test_token_exchange_failure(self, slack_transport):
        """Test that exchange errors surface as TransportError."""
        transport = slack_transport({TOKEN_PATH: httpx.Response(502, text="bad gateway")})

        with pytest.raises(TransportError):
            await _provider(transport).authenticate("code")

    @pytest.mark.asyncio
    async def test_invalid_code(self, slack_transport):
        """Test that Slack's ok=false token response is rejected."""
        transport = slack_transport({TOKEN_PATH: {"ok": False, "error": "invalid_code"}})

        with pytest.raises(ReconciliationError):
            await _provider(transport).authenticate("code")

    @pytest.mark.asyncio
    async def test_no_access_token_granted(self, slack_transport):
        """Test that a response without any token is rejected."""
        transport = slack_transport({TOKEN_PATH: {"ok": True, "authed_user": {"id": "user-id"}}})

        with pytest.raises(ReconciliationError) as exc_info:
            await _provider(transport).authenticate("code")

        assert "No access token" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_profile_failure(self, slack_transport, user_token_response):
        """Test that a failed profile lookup aborts the attempt."""
        transport = slack_transport(
            {TOKEN_PATH: user_token_response, "/api/users.identity": {"ok": False, "error": "invalid_auth"}}
        )
        verify = MagicMock()

        with pytest.raises(ProfileError):
            await _provider(transport, verify).authenticate("code")

        verify.assert_not_called()

    @pytest.mark.asyncio
    async def test_verify_returns_falsy(self, slack_transport, user_token_response, identity_body):
        """Test that a falsy user from verify fails the attempt."""
        transport = slack_transport({TOKEN_PATH: user_token_response, "/api/users.identity": identity_body})
        verify = MagicMock(return_value=None)

        with pytest.raises(VerificationFailed) as exc_info:
            await _provider(transport, verify).authenticate("code")

        assert exc_info.value.info is None

    @pytest.mark.asyncio
    async def test_verify_raises_with_info(self, slack_transport, user_token_response, identity_body):
        """Test that verify can reject with details by raising VerificationFailed."""
        transport = slack_transport({TOKEN_PATH: user_token_response, "/api/users.identity": identity_body})
        verify = AsyncMock(side_effect=VerificationFailed(info={"message": "not invited"}))

        with pytest.raises(VerificationFailed) as exc_info:
            await _provider(transport, verify).authenticate("code")

        assert exc_info.value.info == {"message": "not invited"}


class TestVerifyReturnValue:
    """Tests that whatever verify returns is passed through as the user."""

    @pytest.mark.asyncio
    async def test_namedtuple_user(self, slack_transport, user_token_response, identity_body):
        """Test that a namedtuple user record is not unpacked."""
        transport = slack_transport({TOKEN_PATH: user_token_response, "/api/users.identity": identity_body})
        account = Account("u1", "sonny@example.com", "team-id")

        result = await _provider(transport, MagicMock(return_value=account)).authenticate("code")

        assert result.user is account

    @pytest.mark.asyncio
    async def test_pair_user(self, slack_transport, user_token_response, identity_body):
        """Test that a two-field tuple user is returned whole."""
        transport = slack_transport({TOKEN_PATH: user_token_response, "/api/users.identity": identity_body})

        result = await _provider(transport, MagicMock(return_value=("u1", "admin"))).authenticate("code")

        assert result.user == ("u1", "admin")
