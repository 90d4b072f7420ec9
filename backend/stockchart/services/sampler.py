# backend/stockchart/services/sampler.py
from __future__ import annotations

from typing import List, Sequence, TypeVar

T = TypeVar("T")

DEFAULT_BUDGET = 50


def _sampled_len(n: int, step: int) -> int:
    count = (n - 1) // step + 1
    return count if (n - 1) % step == 0 else count + 1


def sample_series(series: Sequence[T], budget: int = DEFAULT_BUDGET) -> List[T]:
    """
    Reduce `series` to at most `budget + 1` evenly spaced points.

    Starts from step = len // budget and widens it only while the result
    (every step-th point plus the final one) would exceed budget + 1.
    Index 0 is always kept and so is the final point; a series that already
    fits (len <= budget + 1) comes back unchanged.
    """
    budget = max(1, int(budget))
    n = len(series)
    if n <= budget + 1:
        return list(series)

    step = max(1, n // budget)
    while _sampled_len(n, step) > budget + 1:
        step += 1

    out = [series[i] for i in range(0, n, step)]
    if (n - 1) % step != 0:
        out.append(series[-1])
    return out
