"""Base OAuth provider class."""

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any

# verify(access_token, refresh_token, profile) or
# verify(access_token, refresh_token, params, profile); may be async
VerifyCallback = Callable[..., Any | Awaitable[Any]]


@dataclass
class AuthResult:
    """Outcome of a successful authentication attempt."""

    user: Any
    access_token: str
    refresh_token: str | None = None
    profile: Any = None
    params: dict[str, Any] = field(default_factory=dict)


class OAuthProvider(ABC):
    """Abstract base class for OAuth authentication strategies."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Strategy name (e.g., 'slack')."""
        pass

    @property
    @abstractmethod
    def authorization_url(self) -> str:
        """OAuth authorization URL."""
        pass

    @property
    @abstractmethod
    def token_url(self) -> str:
        """OAuth token exchange URL."""
        pass

    @property
    @abstractmethod
    def scopes(self) -> list[str]:
        """Requested OAuth scopes."""
        pass

    @abstractmethod
    def get_authorization_url(self, state: str, **options: Any) -> str:
        """Generate the authorization URL for the OAuth flow.

        Args:
            state: CSRF protection state parameter.
            **options: Per-request overrides of provider defaults.

        Returns:
            Full authorization URL to redirect user to.
        """
        pass

    @abstractmethod
    async def authenticate(self, code: str) -> AuthResult:
        """Complete the flow for an authorization code.

        Args:
            code: Authorization code from OAuth callback.

        Returns:
            The verified user with the tokens and profile it was derived from.
        """
        pass
