"""Remote fetching for exercise-manifest."""

import httpx

from errors import (
    ParseError,
    TooManyRedirects,
    UpstreamHttpError,
    UpstreamTimeout,
    UpstreamTransportError,
)

DEFAULT_TIMEOUT = 10.0
MAX_REDIRECTS = 5


def create_client(transport: httpx.AsyncBaseTransport | None = None) -> httpx.AsyncClient:
    """Create the shared HTTP client used for all upstream requests."""
    return httpx.AsyncClient(
        follow_redirects=True,
        max_redirects=MAX_REDIRECTS,
        timeout=DEFAULT_TIMEOUT,
        transport=transport,
    )


async def _get(client: httpx.AsyncClient, url: str, params: dict | None, timeout: float) -> httpx.Response:
    """GET a URL, translating httpx failures into upstream errors.

    Redirects are followed by the client (at most MAX_REDIRECTS hops when the
    client comes from create_client()).
    """
    try:
        response = await client.get(
            url, params=params, timeout=timeout, follow_redirects=True
        )
    except httpx.TimeoutException as e:
        raise UpstreamTimeout(f"Timed out after {timeout}s fetching {url}", url=url) from e
    except httpx.TooManyRedirects as e:
        raise TooManyRedirects(f"Too many redirects fetching {url}", url=url) from e
    except httpx.RequestError as e:
        raise UpstreamTransportError(f"Error fetching {url}: {e}", url=url) from e
    except httpx.InvalidURL as e:
        raise UpstreamTransportError(f"Invalid URL {url}: {e}", url=url) from e

    try:
        response.raise_for_status()
    except httpx.HTTPStatusError as e:
        raise UpstreamHttpError(response.status_code, url=str(response.url)) from e

    return response


async def fetch_text(
    client: httpx.AsyncClient,
    url: str,
    timeout: float = DEFAULT_TIMEOUT,
) -> str:
    """Fetch a URL and return its body decoded as UTF-8."""
    response = await _get(client, url, None, timeout)
    return response.content.decode("utf-8-sig", errors="replace")


async def fetch_json(
    client: httpx.AsyncClient,
    url: str,
    params: dict | None = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> dict | list:
    """Fetch a URL and return its body parsed as JSON."""
    response = await _get(client, url, params, timeout)
    try:
        return response.json()
    except ValueError as e:
        raise ParseError(f"Invalid JSON from {url}: {e}") from e
