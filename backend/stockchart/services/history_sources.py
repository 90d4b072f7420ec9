# backend/stockchart/services/history_sources.py
"""
Upstream price-history adapters.

Every source takes (symbol, ResolvedRange) and returns raw points in whatever
order the provider sent them, nulls included. Cleaning happens later.
Failures are raised as UpstreamError.
"""
from __future__ import annotations

import math
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional

import requests

from stockchart.core.config import settings
from stockchart.core.errors import UpstreamError
from stockchart.logger import get_logger
from stockchart.schemas.series import RawPoint
from stockchart.services.ranges import ResolvedRange

log = get_logger(__name__)

HistorySource = Callable[[str, ResolvedRange], List[RawPoint]]


def _ts(x) -> Optional[datetime]:
    """Unix seconds to UTC datetime; None for null, non-numeric or out-of-range values."""
    if x is None or isinstance(x, bool):
        return None
    try:
        f = float(x)
        if not math.isfinite(f):
            return None
        return datetime.fromtimestamp(int(f), tz=timezone.utc)
    except (TypeError, ValueError, OverflowError, OSError):
        return None


def _as_list(x) -> list:
    return x if isinstance(x, list) else []


def _pair(timestamps, prices) -> List[RawPoint]:
    """Zip timestamp/price arrays, skipping entries whose timestamp is unusable."""
    out: List[RawPoint] = []
    for t, p in zip(_as_list(timestamps), _as_list(prices)):
        ts = _ts(t)
        if ts is not None:
            out.append(RawPoint(timestamp=ts, price=p))
    return out


def _dict(x) -> dict:
    return x if isinstance(x, dict) else {}


def _get_json(url: str, params: Dict, provider: str) -> tuple:
    try:
        r = requests.get(
            url,
            params=params,
            headers={"User-Agent": settings.HTTP_USER_AGENT},
            timeout=settings.HTTP_TIMEOUT_SECONDS,
        )
    except requests.Timeout:
        raise UpstreamError(f"{provider} request timed out after {settings.HTTP_TIMEOUT_SECONDS:g}s")
    except requests.RequestException as e:
        log.warning("%s request for %s failed: %s", provider, url, e)
        raise UpstreamError(f"{provider} request failed: {e.__class__.__name__}")

    try:
        data = r.json()
    except ValueError:
        data = None
    return r, data


def yahoo_chart_history(symbol: str, resolved: ResolvedRange) -> List[RawPoint]:
    """Yahoo Finance v8 chart API: paired `timestamp` / `indicators.quote[0].close` arrays."""
    url = f"{settings.YAHOO_CHART_URL}/{symbol}"
    params = {
        "period1": resolved.start_ts,
        "period2": resolved.end_ts,
        "interval": resolved.granularity.yahoo_interval,
    }
    r, data = _get_json(url, params, "Yahoo")

    chart = _dict(_dict(data).get("chart"))
    err = chart.get("error")
    if err:
        msg = err.get("description") if isinstance(err, dict) else str(err)
        raise UpstreamError(msg or "Failed to fetch data")
    if not r.ok or data is None:
        raise UpstreamError(f"Yahoo returned status {r.status_code}")
    if not isinstance(data, dict):
        raise UpstreamError("Yahoo returned an unexpected payload")

    results = _as_list(chart.get("result"))
    if not results:
        return []
    res = _dict(results[0])
    quotes = _as_list(_dict(res.get("indicators")).get("quote"))
    closes = _dict(quotes[0]).get("close") if quotes else None
    return _pair(res.get("timestamp"), closes)


def finnhub_candle_history(symbol: str, resolved: ResolvedRange) -> List[RawPoint]:
    """Finnhub /stock/candle: `{s, t[], c[]}`; `s == "no_data"` means an empty window."""
    key = settings.FINNHUB_API_KEY or ""
    if not key:
        raise UpstreamError("FINNHUB_API_KEY is missing. Put it in backend/.env as FINNHUB_API_KEY=...")

    url = f"{settings.FINNHUB_BASE_URL}/stock/candle"
    params = {
        "symbol": symbol,
        "resolution": resolved.granularity.finnhub_resolution,
        "from": resolved.start_ts,
        "to": resolved.end_ts,
        "token": key,
    }
    r, data = _get_json(url, params, "Finnhub")

    if r.status_code in (401, 403):
        raise UpstreamError(f"Finnhub denied access ({r.status_code}).")
    if isinstance(data, dict) and data.get("error"):
        raise UpstreamError(str(data["error"]))
    if not r.ok or not isinstance(data, dict):
        raise UpstreamError(f"Finnhub returned status {r.status_code}")

    status = data.get("s")
    if status == "no_data":
        return []
    if status != "ok":
        raise UpstreamError(f"Finnhub returned status {status!r}")
    return _pair(data.get("t"), data.get("c"))


def yfinance_history(symbol: str, resolved: ResolvedRange) -> List[RawPoint]:
    import pandas as pd
    import yfinance as yf

    try:
        df = yf.Ticker(symbol).history(
            start=resolved.start,
            end=resolved.end,
            interval=resolved.granularity.yahoo_interval,
            auto_adjust=False,
            timeout=settings.HTTP_TIMEOUT_SECONDS,
        )
    except Exception as e:
        raise UpstreamError(f"yfinance history failed: {e}")

    if df is None or getattr(df, "empty", True) or "Close" not in df.columns:
        return []

    out: List[RawPoint] = []
    for ts, close in df["Close"].items():
        t = pd.Timestamp(ts)
        t = t.tz_localize("UTC") if t.tzinfo is None else t.tz_convert("UTC")
        out.append(RawPoint(timestamp=t.to_pydatetime(), price=None if pd.isna(close) else float(close)))
    return out


SOURCES: Dict[str, HistorySource] = {
    "yahoo": yahoo_chart_history,
    "finnhub": finnhub_candle_history,
    "yfinance": yfinance_history,
}


def get_source(name: Optional[str] = None) -> HistorySource:
    return SOURCES[(name or settings.HISTORY_PROVIDER).lower()]
