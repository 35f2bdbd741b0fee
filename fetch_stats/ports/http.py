"""HTTP port definition (transport interface)."""

from collections.abc import Awaitable, Callable, Mapping
from typing import Any, Protocol

__all__ = ["ResponsePort", "RequestFn", "BODY_OPTION_KEYS"]

# Request options carrying a payload; never kept in recorded stats
BODY_OPTION_KEYS = frozenset({"body", "data", "json"})


class ResponsePort(Protocol):
    """Minimal view of an HTTP response needed by the tracker.

    ``aiohttp.ClientResponse`` satisfies it: ``text()`` caches the body, so
    the caller can read it again after the tracker captured it.
    """

    status: int

    async def text(self) -> str:
        """Return the response body decoded as text."""
        ...

    def release(self) -> Any:
        """Return the underlying connection to the pool.

        Called on responses that settle after their timeout was reported,
        since no caller will ever read them.
        """
        ...


RequestFn = Callable[[str, Mapping[str, Any]], Awaitable[Any]]
