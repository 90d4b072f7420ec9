# backend/stockchart/services/chart_builder.py
from __future__ import annotations

from typing import Any, Dict, List, Sequence

from stockchart.schemas.series import CleanPoint, SymbolSeries
from stockchart.services.ranges import Granularity, ResolvedRange

COLORS = [
    (255, 99, 132),   # red
    (54, 162, 235),   # blue
    (75, 192, 192),   # teal
    (255, 206, 86),   # yellow
    (153, 102, 255),  # purple
]

DEFAULT_PAD_FACTOR = 0.1


def _rgb(c) -> str:
    return "rgb(%d, %d, %d)" % c


def _rgba(c, alpha: float) -> str:
    return "rgba(%d, %d, %d, %s)" % (c[0], c[1], c[2], alpha)


def _x(p: CleanPoint, granularity: Granularity) -> str:
    if granularity == Granularity.HOURLY:
        return p.date.isoformat()
    return p.date.date().isoformat()


def percent_change(series: Sequence[CleanPoint]) -> List[float]:
    """Each price as % change from the first one, 2 dp. A zero base gives zeros."""
    if not series:
        return []
    base = series[0].price
    if not base:
        return [0.0 for _ in series]
    return [round((p.price - base) / base * 100, 2) for p in series]


def padded_range(values: Sequence[float], pad_factor: float = DEFAULT_PAD_FACTOR) -> Dict[str, float]:
    lo, hi = min(values), max(values)
    pad = (hi - lo) * pad_factor
    return {"min": round(lo - pad, 2), "max": round(hi + pad, 2)}


def _dataset(label: str, xs: List[str], ys: List[float], color, fill: bool) -> Dict[str, Any]:
    return {
        "label": label,
        "data": [{"x": x, "y": y} for x, y in zip(xs, ys)],
        "borderColor": _rgb(color),
        "backgroundColor": _rgba(color, 0.2),
        "borderWidth": 2,
        "fill": fill,
        "tension": 0.1,
        "pointRadius": 0,
        "pointHoverRadius": 5,
    }


def _placeholder(resolved: ResolvedRange) -> Dict[str, Any]:
    return {
        "type": "line",
        "data": {"datasets": []},
        "options": {
            "plugins": {
                "legend": {"display": False},
                "title": {"display": True, "text": f"No data available ({resolved.token.value})"},
            },
        },
    }


def build_chart_config(
    series_list: Sequence[SymbolSeries],
    resolved: ResolvedRange,
    pad_factor: float = DEFAULT_PAD_FACTOR,
) -> Dict[str, Any]:
    """
    Build a Chart.js line configuration from already-sampled series.

    More than one series switches to comparison mode: every dataset is
    normalized to % change from its own first point and keeps its own x
    values. A single series is plotted as absolute price with a padded
    y-axis range.
    """
    if not series_list:
        return _placeholder(resolved)

    rng = resolved.token.value
    is_comparison = len(series_list) > 1
    datasets: List[Dict[str, Any]] = []
    y_scale: Dict[str, Any] = {
        "title": {"display": True, "font": {"size": 12}},
        "grid": {"color": "rgba(0, 0, 0, 0.1)"},
    }

    if is_comparison:
        for i, s in enumerate(series_list):
            xs = [_x(p, resolved.granularity) for p in s.series]
            datasets.append(_dataset(s.symbol, xs, percent_change(s.series), COLORS[i % len(COLORS)], False))
        title = f"Stock Comparison - % Change ({rng})"
        y_scale["title"]["text"] = "Percentage Change (%)"
    else:
        s = series_list[0]
        xs = [_x(p, resolved.granularity) for p in s.series]
        ys = [p.price for p in s.series]
        datasets.append(_dataset(s.symbol, xs, ys, COLORS[0], True))
        title = f"{s.symbol} Price Chart ({rng})"
        y_scale["title"]["text"] = "Price ($)"
        if ys:
            y_scale.update(padded_range(ys, pad_factor))

    return {
        "type": "line",
        "data": {"datasets": datasets},
        "options": {
            "responsive": True,
            "plugins": {
                "legend": {
                    "display": True,
                    "position": "top",
                    "labels": {"font": {"size": 14}, "usePointStyle": True},
                },
                "title": {
                    "display": True,
                    "text": title,
                    "font": {"size": 16, "weight": "bold"},
                },
            },
            "scales": {
                "x": {
                    "type": "time",
                    "time": {"unit": resolved.time_unit},
                    "title": {"display": True, "text": "Date", "font": {"size": 12}},
                    "grid": {"display": False},
                },
                "y": y_scale,
            },
            "interaction": {"mode": "nearest", "axis": "x", "intersect": False},
        },
    }
