# backend/tests/test_generate_chart.py
import base64

import pytest

from stockchart.core.errors import UpstreamError
from conftest import make_raw, make_series


@pytest.fixture
def mock_history(monkeypatch):
    """Route every Series Fetcher call to canned raw points, per symbol."""
    import stockchart.services.series_fetcher as fetcher_svc

    canned = {}

    def _source(symbol, resolved):
        value = canned.get(symbol)
        if value is None:
            raise UpstreamError("Failed to fetch data")
        if isinstance(value, Exception):
            raise value
        return make_raw(value)

    monkeypatch.setattr(fetcher_svc, "get_source", lambda name=None: _source)
    return canned


def test_single_symbol_one_year(client, mock_history, rendered):
    prices = [150.0 + i * 0.25 for i in range(252)]
    for i in (5, 50, 150):
        prices[i] = None
    mock_history["AAPL"] = prices

    r = client.post("/api/generate-chart", json={"symbols": ["aapl"], "range": "1Y"})
    assert r.status_code == 200
    data = r.json()
    assert data["success"] is True
    assert data["symbols"] == ["AAPL"]
    assert data["range"] == "1Y"
    assert data["image"] == "data:image/png;base64," + base64.b64encode(b"PNGDATA").decode()
    assert data["debug"] == [{"symbol": "AAPL", "status": "ok", "points": 249, "sampled": 51}]

    cfg = rendered[0]
    ds = cfg["data"]["datasets"]
    assert len(ds) == 1
    assert len(ds[0]["data"]) <= 51
    assert ds[0]["data"][0]["y"] == 150.0
    assert ds[0]["data"][-1]["y"] == prices[-1]
    assert "$" in cfg["options"]["scales"]["y"]["title"]["text"]


def test_three_symbols_comparison(client, mock_history, rendered):
    mock_history["AAPL"] = [100.0 + i for i in range(120)]
    mock_history["GOOGL"] = [200.0 - i * 0.5 for i in range(120)]
    mock_history["MSFT"] = [300.0] * 120

    r = client.post("/api/generate-chart", json={"symbols": ["AAPL", "GOOGL", "MSFT"], "range": "6M"})
    assert r.status_code == 200
    assert r.json()["symbols"] == ["AAPL", "GOOGL", "MSFT"]

    cfg = rendered[0]
    ds = cfg["data"]["datasets"]
    assert len(ds) == 3
    for d in ds:
        assert d["data"][0]["y"] == 0.0
        assert len(d["data"]) <= 51
    assert ds[0]["data"][-1]["y"] == round((219.0 - 100.0) / 100.0 * 100, 2)
    assert all(p["y"] == 0.0 for p in ds[2]["data"])
    assert "%" in cfg["options"]["scales"]["y"]["title"]["text"]


def test_partial_failure_still_renders(client, mock_history, rendered):
    mock_history["AAPL"] = [100.0, 101.0, 102.0]

    r = client.post("/api/generate-chart", json={"symbols": ["AAPL", "ZZZZINVALID"]})
    assert r.status_code == 200
    data = r.json()
    assert data["symbols"] == ["AAPL"]
    assert data["range"] == "1Y"
    assert {"symbol": "ZZZZINVALID", "status": "error", "error": "Failed to fetch data"} in data["debug"]
    # one surviving symbol is charted as absolute price
    assert len(rendered[0]["data"]["datasets"]) == 1


def test_all_symbols_fail(client, mock_history, rendered):
    r = client.post("/api/generate-chart", json={"symbols": ["NOPE1", "NOPE2"]})
    assert r.status_code == 404
    data = r.json()
    assert data["error"] == "No valid stock data found"
    assert [d["symbol"] for d in data["details"]] == ["NOPE1", "NOPE2"]
    assert rendered == []


def test_empty_series_counts_as_failure(client, mock_history, rendered):
    mock_history["AAPL"] = [None, None]
    r = client.post("/api/generate-chart", json={"symbols": ["AAPL"]})
    assert r.status_code == 404
    assert "No price data" in r.json()["details"][0]["error"]


def test_unknown_range_falls_back_to_one_year(client, mock_history, rendered):
    mock_history["AAPL"] = [1.0, 2.0]
    r = client.post("/api/generate-chart", json={"symbols": ["AAPL"], "range": "10Y"})
    assert r.status_code == 200
    assert r.json()["range"] == "1Y"


@pytest.mark.parametrize("body", [
    {"symbols": []},
    {"range": "1Y"},
    {"symbols": ["A", "B", "C", "D", "E", "F"]},
    {"symbols": "AAPL"},
    {"symbols": ["AAPL!!", "BRK/B"]},
])
def test_bad_symbols_rejected(client, rendered, body):
    r = client.post("/api/generate-chart", json=body)
    assert r.status_code == 400
    assert "error" in r.json()
    assert rendered == []


def test_over_limit_message(client, rendered):
    r = client.post("/api/generate-chart", json={"symbols": ["A", "B", "C", "D", "E", "F"]})
    assert r.json()["error"] == "Maximum 5 symbols allowed for comparison"


def test_missing_body_rejected(client):
    r = client.post("/api/generate-chart")
    assert r.status_code == 400


def test_wrong_method(client):
    r = client.get("/api/generate-chart")
    assert r.status_code == 405
    assert r.json() == {"error": "Method not allowed"}


def test_options_preflight(client):
    r = client.options("/api/generate-chart")
    assert r.status_code == 200
    assert r.content == b""


def test_cors_preflight(client):
    r = client.options(
        "/api/generate-chart",
        headers={"Origin": "https://example.com", "Access-Control-Request-Method": "POST"},
    )
    assert r.status_code == 200
    assert r.headers["access-control-allow-origin"] in ("*", "https://example.com")


def test_renderer_failure(client, monkeypatch):
    import stockchart.routers.chart as chart_router
    from stockchart.core.errors import RendererError

    monkeypatch.setattr(chart_router, "fetch_series", lambda symbol, resolved: make_series(5))

    def _boom(config):
        raise RendererError("Failed to generate chart from QuickChart (503)")

    monkeypatch.setattr(chart_router, "render_chart", _boom)

    r = client.post("/api/generate-chart", json={"symbols": ["AAPL"]})
    assert r.status_code == 500
    assert "QuickChart" in r.json()["error"]


def test_duplicate_symbols_collapse(client, mock_history, rendered):
    mock_history["AAPL"] = [1.0, 2.0, 3.0]
    r = client.post("/api/generate-chart", json={"symbols": ["AAPL", "aapl"]})
    assert r.status_code == 200
    assert r.json()["symbols"] == ["AAPL"]
    assert len(rendered[0]["data"]["datasets"]) == 1


def test_invalid_symbol_reported_per_symbol(client, mock_history, rendered):
    mock_history["AAPL"] = [100.0, 101.0, 102.0]

    r = client.post("/api/generate-chart", json={"symbols": ["BRK/B", "AAPL"]})
    assert r.status_code == 200
    data = r.json()
    assert data["symbols"] == ["AAPL"]
    assert data["debug"][0] == {"symbol": "BRK/B", "status": "error", "error": "Invalid ticker format"}
    assert data["debug"][1]["symbol"] == "AAPL"
    assert len(rendered[0]["data"]["datasets"]) == 1


def test_all_invalid_symbols_rejected(client, rendered):
    r = client.post("/api/generate-chart", json={"symbols": ["AAPL!!", "BRK/B"]})
    assert r.status_code == 400
    data = r.json()
    assert data["error"] == "Invalid ticker format"
    assert [d["symbol"] for d in data["details"]] == ["AAPL!!", "BRK/B"]


def test_invalid_and_failed_symbols_give_404(client, mock_history, rendered):
    r = client.post("/api/generate-chart", json={"symbols": ["BRK/B", "NOPE"]})
    assert r.status_code == 404
    assert r.json()["details"] == [
        {"symbol": "BRK/B", "error": "Invalid ticker format"},
        {"symbol": "NOPE", "error": "Failed to fetch data"},
    ]
