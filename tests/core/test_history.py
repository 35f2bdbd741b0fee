"""Tests for the bounded outcome history."""

from fetch_stats.core.history import ActiveStats
from fetch_stats.ports.stats import FetchStat, StatCategory

__all__ = []


def test_push_prepends_and_caps_length() -> None:
    """push() should keep the newest records first and drop the oldest."""
    active = ActiveStats()

    for i in range(4):
        active.push(StatCategory.TIMEOUTS, FetchStat(url=f"http://test/{i}"), limit=2)

    assert [stat.url for stat in active.timeouts] == ["http://test/3", "http://test/2"]
    assert active.ok == active.not_ok == active.errors == []


def test_truncate_applies_to_every_category() -> None:
    """truncate() should cap all four lists."""
    active = ActiveStats()
    for category in StatCategory:
        for i in range(3):
            active.push(category, FetchStat(url=f"http://test/{i}"), limit=10)

    active.truncate(1)

    assert len(active) == 4
    assert all(len(active.of(category)) == 1 for category in StatCategory)


def test_copy_is_independent() -> None:
    """copy() should not share lists with the original."""
    active = ActiveStats()
    active.push(StatCategory.OK, FetchStat(url="http://test"), limit=5)

    snapshot = active.copy()
    snapshot.ok.clear()

    assert len(active.ok) == 1
