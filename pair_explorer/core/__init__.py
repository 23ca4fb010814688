from .provider import ProviderFactory, create_provider, provider_factory

__all__ = ["ProviderFactory", "create_provider", "provider_factory"]
