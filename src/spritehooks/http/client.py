"""Shared async HTTP client with connection pooling.

Outbound calls are never retried: a dispatch is attempted exactly once.
"""

import logging
from dataclasses import dataclass, field

import httpx

logger = logging.getLogger(__name__)

# Global client instance
_async_client: httpx.AsyncClient | None = None


@dataclass
class HTTPClientConfig:
    """Configuration for HTTP clients.

    Attributes:
        pool_connections: Keep-alive connections to retain
        pool_maxsize: Maximum concurrent connections
        timeout: Default timeout in seconds
        headers: Headers sent with every request
    """

    pool_connections: int = 10
    pool_maxsize: int = 50
    timeout: float = 30.0
    headers: dict[str, str] = field(default_factory=dict)


# Default config
_default_config = HTTPClientConfig()


def configure_http_client(config: HTTPClientConfig) -> None:
    """Configure the default HTTP client settings.

    Must be called before first client access.
    """
    global _default_config
    _default_config = config


def _create_async_client(config: HTTPClientConfig) -> httpx.AsyncClient:
    """Create a new httpx AsyncClient with connection pooling."""
    limits = httpx.Limits(
        max_keepalive_connections=config.pool_connections,
        max_connections=config.pool_maxsize,
        keepalive_expiry=30.0,
    )

    timeout = httpx.Timeout(config.timeout, connect=10.0)

    return httpx.AsyncClient(
        limits=limits,
        timeout=timeout,
        transport=httpx.AsyncHTTPTransport(retries=0),
        headers=config.headers,
    )


async def get_shared_async_client(
    config: HTTPClientConfig | None = None,
) -> httpx.AsyncClient:
    """Get or create the shared async HTTP client.

    The client lives until close_async_client() is called.
    """
    global _async_client

    if _async_client is None:
        cfg = config or _default_config
        _async_client = _create_async_client(cfg)
        logger.info(f"Created async HTTP client (max_connections={cfg.pool_maxsize})")

    return _async_client


async def close_async_client() -> None:
    """Close the shared async HTTP client and release resources."""
    global _async_client

    if _async_client is not None:
        await _async_client.aclose()
        _async_client = None
        logger.info("Closed async HTTP client")
