"""Slack OAuth provider ("Sign in with Slack" over oauth.v2)."""

import inspect
import logging
from typing import Any

import httpx
from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from slack_oauth.auth.errors import ReconciliationError, VerificationFailed
from slack_oauth.auth.oauth2 import OAuth2Client
from slack_oauth.auth.params import authorization_params
from slack_oauth.auth.profile import PROVIDER_NAME, SlackProfile, SlackProfileResolver
from slack_oauth.auth.providers.base import AuthResult, OAuthProvider, VerifyCallback
from slack_oauth.auth.reconcile import Grant, ReconciledToken, reconcile_token_response
from slack_oauth.config import Settings

logger = logging.getLogger(__name__)

DEFAULT_AUTHORIZATION_URL = "https://slack.com/oauth/v2/authorize"
DEFAULT_TOKEN_URL = "https://slack.com/api/oauth.v2.access"
DEFAULT_SCOPE = ["users:read"]
DEFAULT_USER_SCOPE = ["identity.basic", "identity.email", "identity.team", "identity.avatar"]


class SlackProviderOptions(BaseModel):
    """Construction-time configuration for SlackProvider.

    Accepts both snake_case names and the camelCase spellings commonly used
    in strategy configuration (``clientId``, ``callbackUrl``, ``teamId``...).
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    client_id: str = Field(validation_alias=AliasChoices("client_id", "clientId", "clientID"))
    client_secret: str = Field(validation_alias=AliasChoices("client_secret", "clientSecret"))
    callback_url: str | None = Field(
        default=None, validation_alias=AliasChoices("callback_url", "callbackUrl", "callbackURL")
    )
    authorization_url: str = Field(
        default=DEFAULT_AUTHORIZATION_URL,
        validation_alias=AliasChoices("authorization_url", "authorizationUrl", "authorizationURL"),
    )
    token_url: str = Field(
        default=DEFAULT_TOKEN_URL,
        validation_alias=AliasChoices("token_url", "tokenUrl", "tokenURL"),
    )
    # bot scope
    scope: list[str] = Field(default_factory=lambda: list(DEFAULT_SCOPE))
    # user scope
    user_scope: list[str] = Field(
        default_factory=lambda: list(DEFAULT_USER_SCOPE),
        validation_alias=AliasChoices("user_scope", "userScope"),
    )
    profile_url: str | None = Field(
        default=None, validation_alias=AliasChoices("profile_url", "profileUrl", "profileURL")
    )
    skip_user_profile: bool = Field(
        default=False, validation_alias=AliasChoices("skip_user_profile", "skipUserProfile")
    )
    team: str | None = Field(default=None, validation_alias=AliasChoices("team", "teamId"))
    name: str = PROVIDER_NAME
    scope_separator: str = Field(
        default=",", validation_alias=AliasChoices("scope_separator", "scopeSeparator")
    )
    pass_token_response: bool = False

    @classmethod
    def from_settings(cls, settings: Settings) -> "SlackProviderOptions":
        """Build options from application settings."""
        return cls(
            client_id=settings.slack_client_id or "",
            client_secret=settings.slack_client_secret or "",
            callback_url=settings.slack_redirect_uri,
            scope=settings.slack_scope,
            user_scope=settings.slack_user_scope,
            team=settings.slack_team,
            profile_url=settings.slack_profile_url,
            skip_user_profile=settings.slack_skip_user_profile,
        )


class SlackProvider(OAuthProvider):
    """Slack OAuth 2.0 v2 provider.

    Runs the authorization-code exchange, reconciles the bot/user token
    response, looks up the profile matching the granted credential and hands
    the result to the application's ``verify`` callback.

    Example::

        async def verify(access_token, refresh_token, profile):
            return await users.find_or_create(slack_id=profile.id)

        provider = SlackProvider(
            SlackProviderOptions(
                client_id="123-456-789",
                client_secret="shhh-its-a-secret",
                callback_url="https://www.example.net/auth/slack/callback",
            ),
            verify,
        )
    """

    def __init__(
        self,
        options: SlackProviderOptions,
        verify: VerifyCallback,
        *,
        http: httpx.AsyncClient | None = None,
    ) -> None:
        self.options = options
        self.verify = verify
        self.oauth2 = OAuth2Client(
            options.client_id,
            options.client_secret,
            options.authorization_url,
            options.token_url,
            http=http,
            scope_separator=options.scope_separator,
        )
        self.profile_resolver = SlackProfileResolver(
            self.oauth2,
            profile_url=options.profile_url,
            skip_user_profile=options.skip_user_profile,
        )

    @property
    def name(self) -> str:
        return self.options.name

    @property
    def authorization_url(self) -> str:
        return self.options.authorization_url

    @property
    def token_url(self) -> str:
        return self.options.token_url

    @property
    def scopes(self) -> list[str]:
        return list(self.options.scope)

    def authorization_params(self, **options: Any) -> dict[str, str]:
        """Slack-specific parameters for the authorization request."""
        return authorization_params(
            options,
            team=self.options.team,
            user_scope=self.options.user_scope,
            scope_separator=self.options.scope_separator,
        )

    def get_authorization_url(self, state: str, **options: Any) -> str:
        """Generate Slack authorization URL.

        ``scope``, ``team`` and ``user_scope`` may be overridden per request.
        """
        scope = options.pop("scope", None) or self.scopes
        return self.oauth2.get_authorization_url(
            self.options.callback_url,
            scope=scope,
            state=state,
            extra_params=self.authorization_params(**options),
        )

    async def exchange_code(self, code: str) -> ReconciledToken:
        """Exchange the code and reconcile Slack's token response."""
        access_token, refresh_token, params = await self.oauth2.exchange_code(
            code, self.options.callback_url
        )
        reconciled = reconcile_token_response(access_token, refresh_token, params)
        if not reconciled.access_token:
            error = params.get("error") if isinstance(params, dict) else None
            raise ReconciliationError(f"No access token granted: {error or 'missing access_token'}")
        return reconciled

    async def load_user_profile(self, access_token: str, grant: Grant) -> SlackProfile | None:
        """Retrieve the normalized Slack profile for the canonical token."""
        return await self.profile_resolver.fetch_profile(access_token, grant)

    async def authenticate(self, code: str) -> AuthResult:
        """Run one authentication attempt for an authorization code.

        Raises:
            TransportError: The token exchange or profile request failed.
            ReconciliationError: The token response was malformed.
            ProfileError: Slack refused or garbled the profile lookup.
            VerificationFailed: The verify callback rejected the user.
        """
        token = await self.exchange_code(code)
        profile = await self.load_user_profile(token.access_token, token.grant)

        # verify returns the user as-is; it rejects by returning a falsy value
        # or by raising VerificationFailed(info=...)
        try:
            if self.options.pass_token_response:
                user = self.verify(token.access_token, token.refresh_token, token.params, profile)
            else:
                user = self.verify(token.access_token, token.refresh_token, profile)
            if inspect.isawaitable(user):
                user = await user
            if not user:
                raise VerificationFailed()
        except VerificationFailed:
            logger.info(f"Slack sign-in rejected by verify callback ({token.grant.kind} grant)")
            raise

        return AuthResult(
            user=user,
            access_token=token.access_token,
            refresh_token=token.refresh_token,
            profile=profile,
            params=token.params,
        )
