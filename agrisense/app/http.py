import logging
from typing import Optional

import httpx

from agrisense.app.config import settings

log = logging.getLogger("agrisense.http")

# Shared client for Nominatim and Open-Meteo, owned by the app lifespan
client: Optional[httpx.AsyncClient] = None

# Nominatim's public instance can take several seconds under load
TIMEOUT = httpx.Timeout(connect=5.0, read=settings.HTTP_READ_TIMEOUT_SEC, write=5.0, pool=10.0)
# Nominatim asks for at most one request per second, so keep the pool small
LIMITS = httpx.Limits(max_connections=10, max_keepalive_connections=5, keepalive_expiry=30)


def _http2_supported() -> bool:
    try:
        import h2  # noqa: F401
    except ImportError:
        log.warning("h2 not installed; using HTTP/1.1 (pip install 'httpx[http2]')")
        return False
    return True


async def init_http():
    global client
    if client is not None:
        return
    client = httpx.AsyncClient(
        timeout=TIMEOUT,
        limits=LIMITS,
        http2=_http2_supported(),
        headers={"User-Agent": settings.GEOCODE_USER_AGENT, "Accept": "application/json"},
    )


async def close_http():
    global client
    if client is not None:
        await client.aclose()
        client = None


def get_http_client() -> httpx.AsyncClient:
    if client is None:
        raise RuntimeError("HTTP client not initialized. Call init_http() first.")
    return client
