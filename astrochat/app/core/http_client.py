"""Shared HTTP client management for connection pooling.

The client is created in the application lifespan and handed to the LLM
provider, so every outbound call reuses one connection pool.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import httpx

from astrochat.app.core.config import Settings, settings as default_settings


def build_timeout(config: Settings) -> httpx.Timeout:
    # - connect: time to establish the socket
    # - read: time to read response data (model replies can be slow)
    # - write: time to send request data
    # - pool: time to acquire a connection from the pool
    return httpx.Timeout(
        connect=config.httpx_connect_timeout,
        read=config.httpx_read_timeout,
        write=config.httpx_write_timeout,
        pool=config.httpx_pool_timeout,
    )


@asynccontextmanager
async def init_http_client(
    config: Settings | None = None,
) -> AsyncGenerator[httpx.AsyncClient, None]:
    """Create the shared HTTP client and close it on exit.

    Used from the FastAPI lifespan:

        async with init_http_client() as http_client:
            app.state.http_client = http_client
            yield
    """
    config = config or default_settings

    limits = httpx.Limits(
        max_connections=config.httpx_max_connections,
        max_keepalive_connections=config.httpx_max_keepalive_connections,
        keepalive_expiry=config.httpx_keepalive_expiry,
    )
    client = httpx.AsyncClient(timeout=build_timeout(config), limits=limits)
    try:
        yield client
    finally:
        await client.aclose()
