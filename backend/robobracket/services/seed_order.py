"""
Standard single-elimination seed order.

Consecutive pairs of the returned list are the round-1 matchups, arranged so
that if chalk holds the top two seeds only meet in the final:
  4-entry -> [1, 4, 2, 3]              -> (1v4), (2v3)
  8-entry -> [1, 8, 4, 5, 2, 7, 3, 6]  -> (1v8), (4v5), (2v7), (3v6)
"""

from __future__ import annotations

from typing import List


def is_power_of_two(n: int) -> bool:
    return n >= 1 and (n & (n - 1)) == 0


def next_power_of_two(count: int) -> int:
    """Smallest power of two >= count, never below 2 (a bracket needs a final)."""
    size = 2
    while size < count:
        size *= 2
    return size


def seed_order(n: int) -> List[int]:
    """Seed numbers 1..n in bracket position order. *n* must be a power of two."""
    if not is_power_of_two(n):
        raise ValueError(f"bracket size must be a power of two, got {n}")
    if n == 1:
        return [1]

    order = [1, 2]
    while len(order) < n:
        width = len(order) * 2
        expanded: List[int] = []
        for seed in order:
            expanded.append(seed)
            expanded.append(width + 1 - seed)
        order = expanded
    return order
