"""HTTP helpers shared by the API clients."""

from typing import Any

import httpx

from vk_relay.errors import RequestTimeoutError, TransportError


async def send_request(
    method: str,
    url: str,
    timeout: float,
    **kwargs: Any,
) -> httpx.Response:
    """Perform one request, mapping httpx failures to relay errors.

    Status codes are not checked here; API clients read the error payload first.
    """
    try:
        async with httpx.AsyncClient(timeout=timeout) as client:
            return await client.request(method, url, **kwargs)
    except httpx.TimeoutException as e:
        raise RequestTimeoutError(f"{method} {_safe_url(url)} timed out after {timeout}s") from e
    except httpx.RequestError as e:
        raise TransportError(f"{method} {_safe_url(url)} failed: {e.__class__.__name__}") from e


def parse_json(response: httpx.Response) -> Any:
    """Decode a JSON body or fail with TransportError."""
    try:
        return response.json()
    except ValueError as e:
        raise TransportError(
            f"Unexpected non-JSON response with status {response.status_code}"
        ) from e


def _safe_url(url: str) -> str:
    # Bot API URLs embed the token in the path
    if "/bot" in url:
        prefix, _, rest = url.partition("/bot")
        return f"{prefix}/bot***/{rest.split('/', 1)[-1]}"
    return url
