# backend/stockchart/routers/chart.py
import asyncio
from typing import Any, Dict, List

from fastapi import APIRouter, Response

from stockchart.core.config import settings
from stockchart.logger import get_logger
from stockchart.schemas.chart import ChartRequest, ChartResponse
from stockchart.schemas.series import AggregateResult, SymbolSeries
from stockchart.services.aggregator import fetch_all
from stockchart.services.chart_builder import build_chart_config
from stockchart.services.ranges import resolve_range
from stockchart.services.renderer import render_chart, to_data_uri
from stockchart.services.sampler import sample_series
from stockchart.services.series_fetcher import fetch_series
from stockchart.utils.validators import validate_symbols

router = APIRouter(tags=["chart"])
log = get_logger(__name__)


def _debug_entries(symbols: List[str], agg: AggregateResult, sampled: List[SymbolSeries]) -> List[Dict[str, Any]]:
    ok = {s.symbol: s for s in agg.successes}
    sampled_by_sym = {s.symbol: s for s in sampled}
    failed = {f.symbol: f for f in agg.failures}
    out = []
    for sym in symbols:
        if sym in ok:
            out.append({
                "symbol": sym,
                "status": "ok",
                "points": len(ok[sym].series),
                "sampled": len(sampled_by_sym[sym].series),
            })
        elif sym in failed:
            out.append({"symbol": sym, "status": "error", "error": failed[sym].error})
    return out


@router.options("/generate-chart", include_in_schema=False)
def generate_chart_preflight():
    return Response(status_code=200)


@router.post("/generate-chart", response_model=ChartResponse)
async def generate_chart(body: ChartRequest):
    """
    Fetch 1..MAX_SYMBOLS histories, sample them and render a line chart.
    Symbols that are malformed or fail upstream are listed in `debug` and
    left out of the chart.
    """
    symbols, rejected = validate_symbols(body.symbols, settings.MAX_SYMBOLS)
    resolved = resolve_range(body.range)

    agg = await fetch_all(symbols, resolved, fetcher=fetch_series, rejected=rejected)
    sampled = [
        SymbolSeries(symbol=s.symbol, series=sample_series(s.series, settings.SAMPLE_BUDGET))
        for s in agg.successes
    ]
    config = build_chart_config(sampled, resolved, pad_factor=settings.PAD_FACTOR)
    image = await asyncio.to_thread(render_chart, config)

    log.info(
        "chart rendered symbols=%s range=%s failed=%d bytes=%d",
        ",".join(s.symbol for s in sampled), resolved.token.value, len(agg.failures), len(image),
    )
    return ChartResponse(
        success=True,
        image=to_data_uri(image, settings.CHART_FORMAT),
        symbols=[s.symbol for s in sampled],
        range=resolved.token.value,
        debug=_debug_entries(symbols, agg, sampled),
    )
