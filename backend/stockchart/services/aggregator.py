# backend/stockchart/services/aggregator.py
from __future__ import annotations

import asyncio
from typing import Callable, Dict, List, Optional

from stockchart.core.errors import ChartApiError, NoValidDataError
from stockchart.logger import get_logger
from stockchart.schemas.series import AggregateResult, CleanPoint, SymbolFailure, SymbolSeries
from stockchart.services.ranges import ResolvedRange
from stockchart.services.series_fetcher import fetch_series

log = get_logger(__name__)

Fetcher = Callable[[str, ResolvedRange], List[CleanPoint]]


def _error_message(exc: BaseException) -> str:
    if isinstance(exc, ChartApiError):
        return exc.message
    return str(exc) or exc.__class__.__name__


async def fetch_all(
    symbols: List[str],
    resolved: ResolvedRange,
    fetcher: Optional[Fetcher] = None,
    rejected: Optional[Dict[str, str]] = None,
) -> AggregateResult:
    """
    Fetch every symbol concurrently and wait for all of them to settle.

    One symbol failing never cancels the others. Symbols listed in
    `rejected` are not fetched and go straight to the failures with their
    message. Both partitions keep the request order. Raises
    NoValidDataError when nothing succeeded.
    """
    fetch = fetcher or fetch_series
    rejected = rejected or {}
    to_fetch = [s for s in symbols if s not in rejected]
    fetched = await asyncio.gather(
        *(asyncio.to_thread(fetch, s, resolved) for s in to_fetch),
        return_exceptions=True,
    )
    outcomes = dict(zip(to_fetch, fetched))

    result = AggregateResult()
    for symbol in symbols:
        if symbol in rejected:
            result.failures.append(SymbolFailure(symbol=symbol, error=rejected[symbol]))
            continue
        outcome = outcomes[symbol]
        if isinstance(outcome, Exception):
            log.warning("fetch failed for %s: %s", symbol, outcome)
            result.failures.append(SymbolFailure(symbol=symbol, error=_error_message(outcome)))
        elif isinstance(outcome, BaseException):
            raise outcome
        else:
            result.successes.append(SymbolSeries(symbol=symbol, series=list(outcome)))

    if not result.successes:
        raise NoValidDataError([f.to_dict() for f in result.failures])
    return result
