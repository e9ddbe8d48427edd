import httpx
import logging
from typing import Optional, Dict

# Default timeout configuration (in seconds)
DEFAULT_TIMEOUT = 10.0
DEFAULT_CONNECT_TIMEOUT = 5.0

async def fetch_text(
    url: str,
    timeout: Optional[float] = None,
    connect_timeout: Optional[float] = None,
    headers: Optional[Dict[str, str]] = None,
) -> str:
    """
    Fetches a text resource (e.g. a signature catalog script) over HTTP.

    Args:
        url: The URL to fetch
        timeout: Total request timeout in seconds (default: 10s)
        connect_timeout: Connection timeout in seconds (default: 5s)
        headers: Optional dictionary of HTTP headers

    Returns:
        The response body as text

    Raises:
        httpx.HTTPStatusError: on a non-2xx response
    """
    logger = logging.getLogger(__name__)
    logger.debug(f"HTTP GET {url} (timeout: {timeout or DEFAULT_TIMEOUT}s)")

    timeout_config = httpx.Timeout(
        timeout=timeout or DEFAULT_TIMEOUT,
        connect=connect_timeout or DEFAULT_CONNECT_TIMEOUT
    )

    try:
        async with httpx.AsyncClient(timeout=timeout_config, follow_redirects=True) as client:
            response = await client.get(url, headers=headers)
            logger.debug(f"HTTP {response.status_code} {url} ({len(response.text)} bytes)")
            response.raise_for_status()
            return response.text
    except httpx.TimeoutException as e:
        logger.warning(f"HTTP timeout for {url}: {e}")
        raise
    except httpx.RequestError as e:
        logger.warning(f"HTTP request error for {url}: {e}")
        raise
