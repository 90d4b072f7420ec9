# backend/stockchart/services/finnhub_client.py
from __future__ import annotations

from typing import Any, Dict, Tuple

import requests

from stockchart.core.config import settings
from stockchart.core.errors import UpstreamError, ValidationError
from stockchart.logger import get_logger

log = get_logger(__name__)

# endpoint name -> (path, extra params)
ENDPOINTS: Dict[str, Tuple[str, Dict[str, str]]] = {
    "quote": ("/quote", {}),
    "profile": ("/stock/profile2", {}),
    "metrics": ("/stock/metric", {"metric": "all"}),
}


def _ensure_api_key() -> str:
    key = settings.FINNHUB_API_KEY or ""
    if not key:
        raise UpstreamError("FINNHUB_API_KEY is missing. Put it in backend/.env as FINNHUB_API_KEY=...")
    return key


def fetch_quote_data(symbol: str, endpoint: str = "quote") -> Tuple[int, Any]:
    """
    Proxy a Finnhub symbol lookup.
    Returns (status_code, json_payload) so callers can pass both through untouched.
    """
    name = (endpoint or "quote").strip().lower()
    if name not in ENDPOINTS:
        raise ValidationError(
            f"Unknown endpoint {endpoint!r}",
            allowed=sorted(ENDPOINTS),
        )
    path, extra = ENDPOINTS[name]
    params = {"symbol": symbol.upper(), "token": _ensure_api_key(), **extra}

    try:
        r = requests.get(f"{settings.FINNHUB_BASE_URL}{path}", params=params, timeout=settings.HTTP_TIMEOUT_SECONDS)
    except requests.Timeout:
        raise UpstreamError(f"Finnhub {name} timed out after {settings.HTTP_TIMEOUT_SECONDS:g}s")
    except requests.RequestException as e:
        log.exception("Finnhub request failed")
        raise UpstreamError(f"Finnhub {name} failed: {e.__class__.__name__}")

    try:
        data = r.json()
    except ValueError:
        raise UpstreamError(f"Finnhub {name} returned a non-JSON body ({r.status_code})")

    if not r.ok:
        log.warning("Finnhub %s for %s returned %s", name, symbol, r.status_code)
    return r.status_code, data
