"""Provider adapters: one ``DataProvider`` per external data service."""

from polygon_insight.providers.base import (
    CredentialMissingError,
    DataProvider,
    ProviderAuthError,
    ProviderEmptyError,
    ProviderError,
    ProviderMalformedError,
    ProviderTimeoutError,
    ProviderUnavailableError,
)
from polygon_insight.providers.factory import (
    build_providers,
    get_provider,
    list_providers,
    provider_category,
    register_provider,
)

__all__ = [
    "CredentialMissingError",
    "DataProvider",
    "ProviderAuthError",
    "ProviderEmptyError",
    "ProviderError",
    "ProviderMalformedError",
    "ProviderTimeoutError",
    "ProviderUnavailableError",
    "build_providers",
    "get_provider",
    "list_providers",
    "provider_category",
    "register_provider",
]
