"""HTTP client adapter used as the tracker transport."""

import logging
from collections.abc import Mapping
from types import TracebackType
from typing import Any

import aiohttp
from aiohttp import ClientResponse

__all__ = ["HttpClient"]

logger = logging.getLogger(__name__)

DEFAULT_METHOD = "GET"


class HttpClient:
    """aiohttp session wrapper exposing a fetch-style call.

    Features:
    - Context manager for proper resource cleanup.
    - Options mapping: ``method`` selects the verb, ``body`` is sent as
      ``data``; any other key is passed to ``ClientSession.request``.
    """

    def __init__(self) -> None:
        self.session: aiohttp.ClientSession | None = None

    async def __aenter__(self) -> "HttpClient":
        """Enter async context manager (start session).

        Returns:
            Self for use in async with statement.
        """
        self.session = aiohttp.ClientSession()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        """Exit async context manager (close session).

        Args:
            exc_type: Exception type if raised in context.
            exc: Exception instance if raised in context.
            tb: Traceback if raised in context.
        """
        if self.session:
            await self.session.close()

    async def fetch(self, url: str, options: Mapping[str, Any]) -> ClientResponse:
        """Send one HTTP request.

        The response body is not consumed here; ``ClientResponse.text()``
        caches it, so the tracker and the caller can both read it.

        Args:
            url: Target URL.
            options: Request options (method, headers, body, params, ...).

        Returns:
            HTTP response, whatever its status.

        Raises:
            RuntimeError: If session not initialized.
            aiohttp exceptions: Network errors.
        """
        if self.session is None:
            raise RuntimeError("Session not initialized; use 'async with' context manager")

        kwargs = dict(options)
        method = str(kwargs.pop("method", DEFAULT_METHOD)).upper()
        if "body" in kwargs:
            kwargs["data"] = kwargs.pop("body")

        logger.debug(f"{method} {url}")
        return await self.session.request(method, url, **kwargs)
