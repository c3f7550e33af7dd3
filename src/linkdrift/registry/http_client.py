"""Async HTTP client utilities for registry metadata requests.

Provides a thin wrapper around ``httpx.AsyncClient`` with a standard
user-agent header and the error mapping the checker relies on: HTTP 404
becomes ``PackageNotFoundError``, every other failure ``RegistryError``.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from linkdrift import __version__
from linkdrift.exceptions import PackageNotFoundError, RegistryError

logger = logging.getLogger(__name__)

# User-Agent sent with every request.
USER_AGENT: str = f"linkdrift/{__version__}"

# Abbreviated metadata lacks gitHead, so ask for the full document.
ACCEPT: str = "application/json"


async def fetch_json(
    url: str,
    *,
    package_name: str,
    headers: dict[str, str] | None = None,
    timeout: float | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> dict[str, Any]:
    """Fetch a registry document and parse it as a JSON object.

    Args:
        url: The URL to fetch.
        package_name: Package the document describes (used for 404 errors).
        headers: Extra request headers, e.g. ``Authorization``.
        timeout: Request timeout in seconds. None waits indefinitely.
        transport: Optional transport override (used by tests).

    Returns:
        The parsed JSON object.

    Raises:
        PackageNotFoundError: If the registry responds with 404.
        RegistryError: On any other HTTP error, transport fault or a body
            that is not a JSON object.
    """
    request_headers = {"User-Agent": USER_AGENT, "Accept": ACCEPT}
    request_headers.update(headers or {})
    logger.debug("GET %s", url)
    try:
        async with httpx.AsyncClient(
            timeout=timeout,
            headers=request_headers,
            follow_redirects=True,
            transport=transport,
        ) as client:
            resp = await client.get(url)
            resp.raise_for_status()
            data = resp.json()
    except httpx.HTTPStatusError as exc:
        status = exc.response.status_code
        if status == 404:
            raise PackageNotFoundError(package_name) from exc
        raise RegistryError(f"HTTP {status} from {url}", status) from exc
    except httpx.RequestError as exc:
        raise RegistryError(f"Request error for {url}: {exc}") from exc
    except ValueError as exc:
        raise RegistryError(f"Invalid JSON from {url}: {exc}") from exc

    if not isinstance(data, dict):
        raise RegistryError(f"Unexpected metadata document from {url}")
    return data
