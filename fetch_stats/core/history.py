"""Bounded newest-first history of tracked request outcomes."""

from __future__ import annotations

from dataclasses import dataclass, field

from fetch_stats.ports.stats import FetchStat, StatCategory

__all__ = ["ActiveStats"]


@dataclass(slots=True)
class ActiveStats:
    """Recent records per outcome category, most recent at index 0.

    Each list is kept at most ``limit`` long by ``push``; callers that lower
    the limit must call ``truncate`` to enforce it on existing entries.
    """

    errors: list[FetchStat] = field(default_factory=list)
    ok: list[FetchStat] = field(default_factory=list)
    not_ok: list[FetchStat] = field(default_factory=list)
    timeouts: list[FetchStat] = field(default_factory=list)

    def of(self, category: StatCategory) -> list[FetchStat]:
        """Return the live list for a category."""
        return getattr(self, category.value)

    def push(self, category: StatCategory, stat: FetchStat, limit: int) -> None:
        """Prepend a record and drop the oldest ones beyond ``limit``."""
        records = self.of(category)
        records.insert(0, stat)
        del records[limit:]

    def truncate(self, limit: int) -> None:
        """Drop records beyond ``limit`` in every category.

        Args:
            limit: Maximum records kept per category.
        """
        for category in StatCategory:
            del self.of(category)[limit:]

    def copy(self) -> ActiveStats:
        """Return a snapshot whose lists are independent of this one."""
        return ActiveStats(
            errors=list(self.errors),
            ok=list(self.ok),
            not_ok=list(self.not_ok),
            timeouts=list(self.timeouts),
        )

    def __len__(self) -> int:
        return sum(len(self.of(category)) for category in StatCategory)
