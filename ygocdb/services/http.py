"""
Shared HTTP transport configuration.

Every outbound request carries the client's User-Agent. Small requests use
the default timeout; the bulk archive transfer passes ``settings.bulk_timeout``
per request.
"""

import httpx

from ygocdb.config import Settings, settings


def create_client(
    config: Settings | None = None,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """
    Create the AsyncClient shared by all services.

    Args:
        config: Settings to read timeouts and User-Agent from
        transport: Optional transport override (tests)

    Returns:
        A configured client. The caller owns it and must close it.
    """
    config = config or settings
    return httpx.AsyncClient(
        headers={"User-Agent": config.user_agent},
        timeout=httpx.Timeout(config.request_timeout),
        follow_redirects=True,
        transport=transport,
    )


def describe_http_error(e: httpx.HTTPError) -> str:
    """Short description of an httpx error for messages and logs."""
    if isinstance(e, httpx.HTTPStatusError):
        return f"HTTP {e.response.status_code}"
    if isinstance(e, httpx.TimeoutException):
        return f"timeout ({type(e).__name__})"
    return str(e) or type(e).__name__
