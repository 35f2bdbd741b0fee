"""Stats handler that logs a one-line summary after every request."""

from __future__ import annotations

import logging

from fetch_stats.core.history import ActiveStats
from fetch_stats.ports.stats import GlobalStats

__all__ = ["LoggingStatsHandler", "summarize"]

logger = logging.getLogger(__name__)


def summarize(global_stats: GlobalStats, active_stats: ActiveStats) -> str:
    """Return human-readable one-line summary for logging.

    Args:
        global_stats: Cumulative counters.
        active_stats: Current bounded history.

    Returns:
        Formatted stats string.
    """
    if not global_stats.count:
        return "FetchStats: waiting for data …"

    fail_pct = ((global_stats.count - global_stats.ok) / global_stats.count) * 100
    last = global_stats.last_stat
    last_status = "---" if last is None or last.status is None else f"{last.status:3d}"

    return (
        f"total={global_stats.count} | "
        f"ok={global_stats.ok} | "
        f"notOk={global_stats.not_ok} | "
        f"errors={global_stats.errors} | "
        f"timeouts={global_stats.timeouts} | "
        f"fail={fail_pct:5.1f}% | "
        f"last={last_status} | "
        f"win={len(active_stats)}"
    )


class LoggingStatsHandler:
    """Log the tracker state and optionally reset the history periodically.

    Usable as ``StatTracker.register_handler(LoggingStatsHandler())``.
    """

    def __init__(self, *, reset_every: int | None = None, level: int = logging.INFO) -> None:
        """Initialize handler.

        Args:
            reset_every: Ask for a history reset every N calls; never when None.
            level: Log level of the summary line.
        """
        self.reset_every = reset_every
        self.level = level
        self.calls = 0

    def __call__(self, global_stats: GlobalStats, active_stats: ActiveStats) -> bool:
        self.calls += 1
        logger.log(self.level, f"Fetch stats: {summarize(global_stats, active_stats)}")
        return bool(self.reset_every) and self.calls % self.reset_every == 0
