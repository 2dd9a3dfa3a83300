from collections.abc import AsyncGenerator

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from devon_farm.auth_strategies.base import MagicLinkProvider
from devon_farm.core.config import settings
from devon_farm.core.exceptions import ConfigurationError
from devon_farm.core.postgres import AsyncSessionLocal
from devon_farm.services.session_service import SessionAuthenticator


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with AsyncSessionLocal() as session:
        yield session


def get_provider(request: Request) -> MagicLinkProvider:
    provider: MagicLinkProvider | None = getattr(request.app.state, "provider", None)
    if provider is None:
        raise ConfigurationError("Magic-link provider is not initialized")
    return provider


def get_authenticator(
    provider: MagicLinkProvider = Depends(get_provider),
) -> SessionAuthenticator:
    return SessionAuthenticator(provider, timeout_seconds=settings.PROVIDER_TIMEOUT_SECONDS)
