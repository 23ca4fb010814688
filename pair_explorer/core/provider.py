"""
Node connection factory.

Timeouts and transport tuning belong to the provider, so any
``request_kwargs`` are handed straight to ``AsyncHTTPProvider``.
"""

import logging
from typing import Any, Callable, Dict, Optional

from web3 import AsyncWeb3
from web3.providers import AsyncHTTPProvider

from ..batchers.errors import ProviderUnavailableError

logger = logging.getLogger(__name__)

ProviderFactory = Callable[[], AsyncWeb3]


def create_provider(
    rpc_url: Optional[str], request_kwargs: Optional[Dict[str, Any]] = None
) -> AsyncWeb3:
    """
    Build a read-only AsyncWeb3 connection.

    Args:
        rpc_url: HTTP(S) endpoint of the node
        request_kwargs: Extra options for the HTTP provider, e.g. ``timeout``

    Returns:
        AsyncWeb3 instance

    Raises:
        ProviderUnavailableError: If no URL is configured or construction fails
    """
    if not rpc_url:
        raise ProviderUnavailableError("Failed to initialize provider: RPC URL not configured")

    if not rpc_url.startswith(("http://", "https://")):
        raise ProviderUnavailableError(
            f"Failed to initialize provider: unsupported RPC URL scheme in {rpc_url!r}"
        )

    try:
        w3 = AsyncWeb3(AsyncHTTPProvider(rpc_url, request_kwargs=request_kwargs))
    except Exception as e:
        logger.error(f"Failed to initialize provider: {e}")
        raise ProviderUnavailableError(f"Failed to initialize provider: {e}") from e

    logger.info("Provider initialized successfully")
    return w3


def provider_factory(
    rpc_url: Optional[str], request_kwargs: Optional[Dict[str, Any]] = None
) -> ProviderFactory:
    """Bind ``create_provider`` to one endpoint for later, lazy use."""

    def factory() -> AsyncWeb3:
        return create_provider(rpc_url, request_kwargs)

    return factory
