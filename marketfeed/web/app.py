"""
FastAPI application factory
"""

import uuid
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from marketfeed import __version__
from marketfeed.core.client import MarketFeedClient
from marketfeed.core.exceptions import MarketFeedError
from marketfeed.core.logging import configure_logging, get_logger
from marketfeed.web.models import ErrorResponse
from marketfeed.web.routes import data_router, health_router, metrics_router

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Create the client on startup unless one was injected, close it on shutdown."""
    owned = getattr(app.state, "marketfeed_client", None) is None
    if owned:
        client = MarketFeedClient()
        settings = client.config.logging
        configure_logging(level=settings.level, file_output=settings.file is not None, file_path=settings.file)
        app.state.marketfeed_client = client

    yield

    if owned:
        await app.state.marketfeed_client.aclose()
        app.state.marketfeed_client = None


def create_app(client: MarketFeedClient | None = None) -> FastAPI:
    """Create the FastAPI application.

    Args:
        client: client serving the routes; created in the lifespan when omitted
    """
    app = FastAPI(
        title="marketfeed",
        description="Market quotes and OHLCV bars with caching, source failover and synthetic fallback",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.marketfeed_client = client

    _setup_middleware(app)
    _setup_routes(app)
    _setup_exception_handlers(app)

    return app


def _setup_middleware(app: FastAPI) -> None:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=1000)


def _setup_routes(app: FastAPI) -> None:
    app.include_router(data_router, prefix="/api/v1", tags=["data"])
    app.include_router(health_router, tags=["health"])
    app.include_router(metrics_router)


def _error_payload(error: str, message: str, details: dict, request: Request) -> dict:
    return ErrorResponse(
        error=error,
        message=message,
        details=details,
        request_id=request.headers.get("X-Request-ID") or str(uuid.uuid4()),
    ).model_dump(mode="json")


def _setup_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(MarketFeedError)
    async def marketfeed_exception_handler(request: Request, exc: MarketFeedError) -> JSONResponse:
        return JSONResponse(
            status_code=400,
            content=_error_payload(
                exc.__class__.__name__,
                exc.message,
                {"error_code": exc.error_code, "context": exc.details},
                request,
            ),
        )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_payload("HTTPException", str(exc.detail), {"status_code": exc.status_code}, request),
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error serving {}", request.url.path)
        return JSONResponse(
            status_code=500,
            content=_error_payload("InternalServerError", "Internal server error", {"type": type(exc).__name__}, request),
        )


app = create_app()
