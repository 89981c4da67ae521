"""FastAPI application entry point.

Run with: uvicorn src.main:app --reload --port 8000
"""

# ruff: noqa: E402  -- uvloop.install() must run before other imports

import uvloop

uvloop.install()

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from config.settings import settings
from src.at_auction.api.router import router as auction_router
from src.at_bidding.api.router import router as bid_router
from src.at_common.database import check_connection, engine
from src.at_common.datetime_utils import seconds_until, utc_now
from src.at_common.errors import AppError, RateLimitError
from src.at_common.response import error_response
from src.at_gateway.middleware.request_log import RequestLogMiddleware
from src.at_notify.dispatcher import get_dispatcher
from src.at_sweep.api.router import router as cron_router

logger = logging.getLogger(__name__)

VERSION = "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: verify DB connection. Shutdown: flush pending mail, dispose pool."""
    if not await check_connection():
        logger.warning("Database unreachable at startup; requests will fail until it is up")
    yield
    await get_dispatcher().drain()
    await engine.dispose()


app = FastAPI(
    title=settings.APP_NAME,
    version=VERSION,
    lifespan=lifespan,
)


app.add_middleware(RequestLogMiddleware)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    resp = error_response(exc.code, exc.message, exc.details, request)
    headers: dict[str, str] = {}
    if isinstance(exc, RateLimitError):
        headers["Retry-After"] = str(seconds_until(exc.reset_time, utc_now()))
    if exc.http_status >= 500:
        logger.error("%s [%d] %s", request.url.path, exc.code, exc.message)
    return JSONResponse(
        status_code=exc.http_status,
        content=resp.model_dump(),
        headers=headers,
    )


app.include_router(auction_router, prefix="/api/v1")
app.include_router(bid_router, prefix="/api/v1")
app.include_router(cron_router, prefix="/api/v1")


@app.get("/health")
async def health() -> dict[str, Any]:
    return {
        "status": "healthy",
        "version": VERSION,
        "timestamp": utc_now().isoformat(),
        "database": "connected" if await check_connection() else "disconnected",
    }
