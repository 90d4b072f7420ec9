# backend/tests/test_app.py
from fastapi.testclient import TestClient


def test_unhandled_error_returns_500(monkeypatch):
    import stockchart.routers.stock as stock_router
    from stockchart.main import app

    def _boom(symbol, resolved):
        raise RuntimeError("kaboom")

    monkeypatch.setattr(stock_router, "fetch_series", _boom)

    with TestClient(app, raise_server_exceptions=False) as c:
        r = c.get("/api/stock-history", params={"symbol": "AAPL"})
    assert r.status_code == 500
    assert r.json() == {"error": "Internal server error", "message": "kaboom"}


def test_cors_header_on_simple_request(client):
    r = client.get("/health", headers={"Origin": "https://example.com"})
    assert r.status_code == 200
    assert r.headers["access-control-allow-origin"] in ("*", "https://example.com")


def test_cors_header_on_error_response(client):
    r = client.post(
        "/api/generate-chart",
        json={"symbols": []},
        headers={"Origin": "https://example.com"},
    )
    assert r.status_code == 400
    assert r.headers["access-control-allow-origin"] in ("*", "https://example.com")


def test_unknown_route_error_shape(client):
    r = client.get("/api/nope")
    assert r.status_code == 404
    assert r.json() == {"error": "Not Found"}
