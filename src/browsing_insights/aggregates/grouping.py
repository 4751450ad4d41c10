"""Group-by / aggregate / rank helpers shared by the aggregate builders."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Hashable, Iterable, TypeVar

T = TypeVar("T")
K = TypeVar("K", bound=Hashable)


@dataclass
class Ranked:
    """One group of a ranking: its key, aggregate value and 1-based rank."""

    key: Hashable
    value: float
    rank: int


def group_sum(
    items: Iterable[T],
    key: Callable[[T], K],
    value: Callable[[T], float],
) -> dict[K, float]:
    """Sum ``value`` per ``key``. Keys keep the order they were first seen in."""
    totals: dict[K, float] = {}
    for item in items:
        k = key(item)
        totals[k] = totals.get(k, 0) + value(item)
    return totals


def group_count(items: Iterable[T], key: Callable[[T], K]) -> dict[K, int]:
    return group_sum(items, key, lambda _: 1)


def rank_desc(totals: dict[K, float], limit: int) -> list[Ranked]:
    """Highest totals first, at most ``limit`` of them.

    The sort is stable, so equal totals stay in first-seen order; no other
    tie-break is applied.
    """
    ordered = sorted(totals.items(), key=lambda kv: kv[1], reverse=True)[:limit]
    return [Ranked(key=k, value=v, rank=i) for i, (k, v) in enumerate(ordered, start=1)]
