"""Stats port definition (DTOs and handler interface)."""

from __future__ import annotations

import time
from collections.abc import Awaitable
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from fetch_stats.core.history import ActiveStats

__all__ = ["StatCategory", "FetchStat", "GlobalStats", "StatsHandler"]


class StatCategory(str, Enum):
    """Mutually exclusive outcome classes of a tracked request."""

    ERRORS = "errors"
    OK = "ok"
    NOT_OK = "not_ok"
    TIMEOUTS = "timeouts"


@dataclass(slots=True, frozen=True)
class FetchStat:
    """Immutable snapshot of a single tracked request outcome.

    Attributes:
        url: Requested URL.
        options: Request options used, without any request body.
        status: HTTP status code when a response arrived; None otherwise.
        body_text: Response text, only captured for non-success responses.
        error: Timeout or transport exception; None when a response arrived.
        recorded_at: Epoch seconds when the outcome was classified.
    """

    url: str
    options: dict[str, Any] = field(default_factory=dict)
    status: int | None = None
    body_text: str | None = None
    error: BaseException | None = None
    recorded_at: float = field(default_factory=time.time)


@dataclass(slots=True)
class GlobalStats:
    """Cumulative counters for the tracker lifetime.

    ``count`` always equals the sum of the four category counters.
    """

    count: int = 0
    errors: int = 0
    ok: int = 0
    not_ok: int = 0
    timeouts: int = 0
    last_stat: FetchStat | None = None


class StatsHandler(Protocol):
    """Callback invoked after every completed tracked request.

    Returning (or resolving to) a truthy value resets the bounded history.
    """

    def __call__(
        self, global_stats: GlobalStats, active_stats: ActiveStats, /
    ) -> bool | Awaitable[bool]:
        ...
