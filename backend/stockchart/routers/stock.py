# backend/stockchart/routers/stock.py
import asyncio
from typing import Any, Dict, Optional

from fastapi import APIRouter, Query, Request, Response
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError

from stockchart.core.errors import ValidationError
from stockchart.schemas.chart import HistoryResponse, StockDataRequest
from stockchart.services.finnhub_client import fetch_quote_data
from stockchart.services.ranges import resolve_range
from stockchart.services.series_fetcher import fetch_series
from stockchart.utils.validators import validate_ticker

router = APIRouter(tags=["stock"])


async def _request_params(request: Request) -> StockDataRequest:
    """Query string first, then a JSON object body (POST) on top of it."""
    params: Dict[str, Any] = dict(request.query_params)
    if request.method == "POST":
        try:
            body = await request.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            params.update({k: v for k, v in body.items() if v is not None})
    try:
        return StockDataRequest(
            symbol=params.get("symbol"),
            endpoint=params.get("endpoint") or "quote",
        )
    except PydanticValidationError:
        raise ValidationError("symbol and endpoint must be strings")


@router.options("/stock-data", include_in_schema=False)
@router.options("/stock-history", include_in_schema=False)
def stock_preflight():
    return Response(status_code=200)


@router.api_route("/stock-data", methods=["GET", "POST"])
async def stock_data(request: Request):
    """Proxy a Finnhub quote/profile/metrics lookup; body and status pass through."""
    p = await _request_params(request)
    if not p.symbol:
        raise ValidationError("Stock symbol required. Usage: ?symbol=AAPL")
    symbol = validate_ticker(p.symbol)
    status, data = await asyncio.to_thread(fetch_quote_data, symbol, p.endpoint)
    return JSONResponse(content=data, status_code=status)


@router.get("/stock-history", response_model=HistoryResponse)
async def stock_history(
    symbol: Optional[str] = Query(None, max_length=30),
    range: Optional[str] = Query(None, description="1M, 3M, 6M, 1Y or 5Y"),
):
    if not symbol:
        raise ValidationError("Stock symbol required. Usage: ?symbol=AAPL&range=1Y")
    sym = validate_ticker(symbol)
    resolved = resolve_range(range)

    series = await asyncio.to_thread(fetch_series, sym, resolved)
    return HistoryResponse(
        s="ok",
        t=[int(p.date.timestamp()) for p in series],
        c=[p.price for p in series],
        symbol=sym,
        range=resolved.token.value,
    )
