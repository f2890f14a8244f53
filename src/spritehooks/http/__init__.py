"""HTTP client module with connection pooling.

Usage:
    from spritehooks.http import get_shared_async_client
    client = await get_shared_async_client()
    response = await client.post("https://api.example.com/data")
"""

from spritehooks.http.client import (
    HTTPClientConfig,
    close_async_client,
    configure_http_client,
    get_shared_async_client,
)

__all__ = [
    "get_shared_async_client",
    "close_async_client",
    "configure_http_client",
    "HTTPClientConfig",
]
