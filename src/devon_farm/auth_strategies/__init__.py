from .base import MagicLinkProvider, ProviderSession

__all__ = ["MagicLinkProvider", "ProviderSession"]
