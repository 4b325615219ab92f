"""httpx-backed request handler."""

from __future__ import annotations

import logging
from typing import Any, Mapping

import httpx

from rateguard.core.config import settings

logger = logging.getLogger(__name__)


class HttpxRequestHandler:
    """Async handler issuing ``GET url`` with params as the query string.

    Usable directly as the handler of a guard keyed by URL:

        >>> async with HttpxRequestHandler() as fetch:
        ...     response = await guard.guard(url, fetch, {"page": 2})

    The response is returned as-is; HTTP error statuses are not raised.
    Transport errors (timeouts, connection failures) propagate to the caller.
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        *,
        timeout_seconds: float | None = None,
    ) -> None:
        """Initialize the handler.

        Args:
            client: Optional pre-configured client (not closed by aclose()).
            timeout_seconds: Timeout for an owned client; defaults to
                settings.http.timeout_seconds.
        """
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(
            timeout=timeout_seconds if timeout_seconds is not None else settings.http.timeout_seconds,
        )

    async def __call__(
        self, url: str, params: Mapping[str, Any] | None = None
    ) -> httpx.Response:
        response = await self.client.get(url, params=params)
        logger.debug(
            "http_handler.response",
            extra={"status_code": response.status_code, "elapsed_ms": _elapsed_ms(response)},
        )
        return response

    async def aclose(self) -> None:
        if self._owns_client:
            await self.client.aclose()

    async def __aenter__(self) -> "HttpxRequestHandler":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()


def _elapsed_ms(response: httpx.Response) -> float | None:
    # elapsed is only available once the response has been read
    try:
        return round(response.elapsed.total_seconds() * 1000, 2)
    except RuntimeError:
        return None
