# auth_strategies/factory.py

from devon_farm.auth_strategies.base import MagicLinkProvider
from devon_farm.auth_strategies.stytch import StytchConfig, StytchProvider
from devon_farm.core.config import Settings


def get_magic_link_provider(settings: Settings) -> MagicLinkProvider:
    """
    Build the process-wide magic-link provider.

    Called once from the application lifespan; the result is shared by
    every request.
    """
    return StytchProvider(StytchConfig.from_settings(settings))
