# backend/stockchart/services/series_fetcher.py
from __future__ import annotations

import math
from typing import Iterable, List, Optional

from stockchart.core.errors import EmptySeriesError
from stockchart.logger import get_logger
from stockchart.schemas.series import CleanPoint, RawPoint
from stockchart.services.history_sources import HistorySource, get_source
from stockchart.services.ranges import ResolvedRange

log = get_logger(__name__)


def _usable(price) -> bool:
    if price is None or isinstance(price, bool):
        return False
    try:
        return math.isfinite(float(price))
    except (TypeError, ValueError):
        return False


def clean_series(raw: Iterable[RawPoint]) -> List[CleanPoint]:
    """
    Drop null/NaN prices, round survivors to 2 dp and sort ascending by date.
    Upstream order is not guaranteed, so the sort always runs.
    """
    out = [CleanPoint(date=p.timestamp, price=round(float(p.price), 2)) for p in raw if _usable(p.price)]
    out.sort(key=lambda p: p.date)
    return out


def fetch_series(
    symbol: str,
    resolved: ResolvedRange,
    source: Optional[HistorySource] = None,
) -> List[CleanPoint]:
    """
    Fetch and clean one symbol's history.
    Raises UpstreamError on provider failure, EmptySeriesError when nothing usable is left.
    """
    sym = symbol.strip().upper()
    src = source or get_source()
    raw = src(sym, resolved)
    series = clean_series(raw)
    if not series:
        raise EmptySeriesError(f"No price data available for {sym}")
    log.info(
        "series symbol=%s range=%s raw=%d clean=%d",
        sym, resolved.token.value, len(raw), len(series),
    )
    return series
