# backend/stockchart/main.py
from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from stockchart import __version__
from stockchart.core.config import settings
from stockchart.core.errors import ChartApiError, MethodNotAllowedError
from stockchart.logger import get_logger
from stockchart.middleware.request_logger import RequestLoggerMiddleware
from stockchart.routers import chart, stock

log = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    log.info("Starting Stock Chart API %s (env=%s)", __version__, settings.ENV)
    log.info("History provider: %s", settings.HISTORY_PROVIDER)
    if not settings.FINNHUB_API_KEY:
        log.warning("FINNHUB_API_KEY is not set; /stock-data will answer 502")
    yield
    log.info("Stock Chart API shutdown complete")


app = FastAPI(
    title="Stock Chart API",
    version=__version__,
    lifespan=lifespan,
)

# add_middleware prepends: CORS is added last so it runs outermost
app.add_middleware(RequestLoggerMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type"],
)


# ========== ERROR HANDLERS ==========
@app.exception_handler(ChartApiError)
async def chart_api_error_handler(request: Request, exc: ChartApiError):
    if exc.status_code >= 500:
        log.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=jsonable_encoder(exc.to_dict()))


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content={"error": "Invalid request", "details": jsonable_encoder(exc.errors())},
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 405:
        err = MethodNotAllowedError()
        return JSONResponse(status_code=err.status_code, content=err.to_dict(), headers=exc.headers)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail}, headers=exc.headers)


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    log.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error", "message": str(exc)},
    )


# ========== ROUTERS ==========
app.include_router(chart.router, prefix=settings.API_PREFIX)
app.include_router(stock.router, prefix=settings.API_PREFIX)


@app.get("/health")
async def health_check():
    """Health check endpoint for monitoring"""
    return {
        "status": "healthy",
        "version": __version__,
        "provider": settings.HISTORY_PROVIDER,
    }


def run():
    import uvicorn

    uvicorn.run(
        "stockchart.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.RELOAD,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    run()
