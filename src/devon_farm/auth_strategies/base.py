# auth_strategies/base.py

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class ProviderSession:
    """What the core needs to know about a provider-held session."""

    external_id: str
    credential: str
    expires_at: datetime | None = None
    email: str | None = None
    name: str | None = None


class MagicLinkProvider(ABC):
    """
    Capability contract for a passwordless magic-link identity provider.

    Implementations are constructed once at startup and shared by every
    request; they must not be mutated per request.
    """

    def __init__(self, name: str):
        self.name = name

    @abstractmethod
    async def send_login_link(self, email: str) -> str:
        """
        Send (or idempotently re-send) a login link to ``email``.

        Returns:
            The provider's subject id for that email, available before the
            link is clicked.

        Raises:
            ProviderError: If the link could not be sent
        """

    @abstractmethod
    async def exchange_callback_token(self, token: str) -> ProviderSession:
        """
        Exchange the one-time token from the link for a session.

        Raises:
            InvalidTokenError: If the token is unknown, used or expired
            ProviderError: If the provider could not be reached
        """

    @abstractmethod
    async def validate_session(self, credential: str) -> ProviderSession:
        """
        Validate a session credential and return a refreshed one.

        Raises:
            SessionExpiredError / InvalidTokenError: If the session is gone
            ProviderError: If the provider could not be reached
        """

    @abstractmethod
    async def revoke_session(self, credential: str) -> None:
        """Revoke a session. Callers treat failures as non-fatal."""

    async def aclose(self) -> None:
        """Release network resources held by the provider."""
        return None
