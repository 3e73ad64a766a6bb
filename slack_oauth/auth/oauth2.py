"""Generic OAuth 2.0 authorization-code client."""

import logging
from collections.abc import AsyncIterator, Sequence
from contextlib import asynccontextmanager
from typing import Any
from urllib.parse import urlencode

import httpx

from slack_oauth.auth.errors import TransportError

logger = logging.getLogger(__name__)


class OAuth2Client:
    """Minimal OAuth 2.0 client for the authorization-code grant.

    Knows nothing about any particular provider. The token endpoint's
    decoded body is returned untouched so that provider-specific code can
    post-process it.
    """

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        authorization_url: str,
        token_url: str,
        *,
        http: httpx.AsyncClient | None = None,
        scope_separator: str = " ",
    ) -> None:
        self.client_id = client_id
        self.client_secret = client_secret
        self.authorization_url = authorization_url
        self.token_url = token_url
        self.scope_separator = scope_separator
        self._http = http

    @asynccontextmanager
    async def _client(self) -> AsyncIterator[httpx.AsyncClient]:
        if self._http is not None:
            yield self._http
            return
        async with httpx.AsyncClient() as client:
            yield client

    def join_scope(self, scope: str | Sequence[str] | None) -> str | None:
        """Serialize a scope list using this client's separator."""
        if scope is None or isinstance(scope, str):
            return scope or None
        return self.scope_separator.join(scope) or None

    def get_authorization_url(
        self,
        redirect_uri: str | None,
        scope: str | Sequence[str] | None = None,
        state: str | None = None,
        extra_params: dict[str, str] | None = None,
    ) -> str:
        """Build the URL the user agent is redirected to.

        Args:
            redirect_uri: Callback URL registered with the provider.
            scope: Scope list or pre-joined scope string.
            state: CSRF protection state parameter.
            extra_params: Provider-specific query parameters.

        Returns:
            Full authorization URL.
        """
        params: dict[str, str] = {
            "response_type": "code",
            "client_id": self.client_id,
        }
        if redirect_uri:
            params["redirect_uri"] = redirect_uri
        joined_scope = self.join_scope(scope)
        if joined_scope:
            params["scope"] = joined_scope
        if state:
            params["state"] = state
        if extra_params:
            params.update(extra_params)
        return f"{self.authorization_url}?{urlencode(params)}"

    async def exchange_code(
        self, code: str, redirect_uri: str | None = None
    ) -> tuple[str | None, str | None, Any]:
        """Exchange an authorization code for tokens.

        Args:
            code: Authorization code from the OAuth callback.
            redirect_uri: Callback URL used in the authorization request.

        Returns:
            ``(access_token, refresh_token, params)`` where ``params`` is the
            decoded token response. The tokens are read from the top level of
            the response and may be ``None``.

        Raises:
            TransportError: The request failed or the body was not JSON.
        """
        data = {
            "grant_type": "authorization_code",
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "code": code,
        }
        if redirect_uri:
            data["redirect_uri"] = redirect_uri

        async with self._client() as client:
            try:
                response = await client.post(
                    self.token_url,
                    data=data,
                    headers={"Accept": "application/json"},
                )
                response.raise_for_status()
            except httpx.HTTPStatusError as e:
                logger.warning(f"Token exchange failed with status {e.response.status_code}")
                raise TransportError(
                    f"Token endpoint returned {e.response.status_code}",
                    status_code=e.response.status_code,
                ) from e
            except httpx.HTTPError as e:
                logger.warning(f"Token exchange request failed: {type(e).__name__}")
                raise TransportError(f"Token request failed: {e}") from e

        try:
            params = response.json()
        except ValueError as e:
            raise TransportError(
                "Token endpoint returned a non-JSON body",
                status_code=response.status_code,
            ) from e

        if isinstance(params, dict):
            return params.get("access_token"), params.get("refresh_token"), params
        return None, None, params

    async def get(self, url: str, headers: dict[str, str] | None = None) -> httpx.Response:
        """Issue a GET with exactly the headers given.

        No credential is added to the URL or the headers; the caller decides
        how the access token travels.

        Raises:
            TransportError: The request failed or returned a non-2xx status.
        """
        async with self._client() as client:
            try:
                response = await client.get(url, headers=headers or {})
                response.raise_for_status()
            except httpx.HTTPStatusError as e:
                raise TransportError(
                    f"GET {e.request.url.path} returned {e.response.status_code}",
                    status_code=e.response.status_code,
                ) from e
            except httpx.HTTPError as e:
                raise TransportError(f"GET request failed: {e}") from e
        return response
