"""Percentile tiers for the chatter ranking."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from typing import TypeVar

T = TypeVar("T")

# (cumulative percent, tier) checked top-down; anything beyond is tier 1.
TIER_THRESHOLDS: tuple[tuple[int, int], ...] = (
    (10, 5),
    (30, 4),
    (60, 3),
    (85, 2),
)


def tier_for_rank(rank: int, total: int) -> int:
    """Tier of the entity at zero-based *rank* among *total*.

    ``(rank + 1) / total <= pct / 100`` is compared in integers so that
    e.g. rank 9 of 100 lands exactly on the 10% boundary.
    """
    if total <= 0:
        return 1
    for pct, tier in TIER_THRESHOLDS:
        if (rank + 1) * 100 <= pct * total:
            return tier
    return 1


def assign_tiers(items: Iterable[T], key: Callable[[T], float]) -> list[tuple[T, int]]:
    """Sort *items* by *key* descending and pair each with its tier.

    The sort is stable: items with equal keys keep their input order, and
    that order decides who falls on which side of a threshold.
    """
    ranked: Sequence[T] = sorted(items, key=key, reverse=True)
    total = len(ranked)
    return [(item, tier_for_rank(i, total)) for i, item in enumerate(ranked)]
