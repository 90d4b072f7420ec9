# backend/tests/conftest.py
import os
from datetime import datetime, timedelta, timezone

import pytest

# configure before the app (and its settings) are imported
os.environ["FINNHUB_API_KEY"] = "test-key"
os.environ["HISTORY_PROVIDER"] = "yahoo"
os.environ["LOG_LEVEL"] = "WARNING"

T0 = datetime(2024, 1, 2, 21, 0, tzinfo=timezone.utc)


def make_series(n, start=100.0, step=1.0, t0=T0):
    """n daily CleanPoints with a linear price ramp."""
    from stockchart.schemas.series import CleanPoint

    return [
        CleanPoint(date=t0 + timedelta(days=i), price=round(start + i * step, 2))
        for i in range(n)
    ]


def make_raw(prices, t0=T0):
    from stockchart.schemas.series import RawPoint

    return [RawPoint(timestamp=t0 + timedelta(days=i), price=p) for i, p in enumerate(prices)]


@pytest.fixture
def client():
    from fastapi.testclient import TestClient
    from stockchart.main import app

    # context manager so lifespan startup/shutdown run
    with TestClient(app) as c:
        yield c


@pytest.fixture
def rendered(monkeypatch):
    """Replace QuickChart with a stub; collects every chart config it receives."""
    import stockchart.routers.chart as chart_router

    configs = []

    def _fake_render(config):
        configs.append(config)
        return b"PNGDATA"

    monkeypatch.setattr(chart_router, "render_chart", _fake_render)
    return configs
