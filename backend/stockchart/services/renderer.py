# backend/stockchart/services/renderer.py
from __future__ import annotations

import base64
from typing import Any, Dict

import requests

from stockchart.core.config import settings
from stockchart.core.errors import RendererError
from stockchart.logger import get_logger

log = get_logger(__name__)


def render_chart(config: Dict[str, Any]) -> bytes:
    """
    POST a chart configuration to QuickChart and return the image bytes.
    Raises RendererError on transport failure or a non-2xx answer.
    """
    payload = {
        "chart": config,
        "width": settings.CHART_WIDTH,
        "height": settings.CHART_HEIGHT,
        "devicePixelRatio": settings.CHART_PIXEL_RATIO,
        "backgroundColor": settings.CHART_BACKGROUND,
        "format": settings.CHART_FORMAT,
    }
    try:
        r = requests.post(settings.QUICKCHART_URL, json=payload, timeout=settings.HTTP_TIMEOUT_SECONDS)
    except requests.RequestException as e:
        log.exception("QuickChart request failed")
        raise RendererError(f"Failed to generate chart from QuickChart: {e.__class__.__name__}")

    if not r.ok:
        log.error("QuickChart returned %s: %s", r.status_code, r.text[:200])
        raise RendererError(f"Failed to generate chart from QuickChart ({r.status_code})")
    return r.content


def to_data_uri(image: bytes, fmt: str = "png") -> str:
    return f"data:image/{fmt};base64,{base64.b64encode(image).decode('ascii')}"
