"""FastAPI application serving indexed Runes protocol state."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Dict

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_client import make_asgi_app
from starlette.exceptions import HTTPException as StarletteHTTPException

from runes_api.api.http import router
from runes_api.api.schemas import ErrorResponse, NotFoundResponse
from runes_api.config import load_settings
from runes_api.metrics import track_chain_tip
from runes_api.runes.errors import NotFoundError, ParseError, StoreError
from runes_api.runes.store import create_store_engine

LOGGER = logging.getLogger(__name__)

API_PREFIXES = ("/runes/v1", "/runes")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Create the pooled store engine on startup and dispose of it on shutdown.
    Tests can point ``RUNES_DATABASE_URL`` at a scratch database.
    """

    settings = load_settings()
    engine = create_store_engine(settings)
    app.state.settings = settings
    app.state.engine = engine
    if settings.metrics_enabled:
        track_chain_tip(engine)
    LOGGER.info("Runes API ready", extra={"pool_size": settings.pool_size})
    try:
        yield
    finally:
        engine.dispose()
        LOGGER.info("Store engine disposed")


app = FastAPI(title="Runes API", lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["GET"],
    allow_headers=["*"],
    expose_headers=["ETag"],
)

if load_settings().metrics_enabled:
    metrics_app = make_asgi_app()
    app.mount("/metrics", metrics_app)

for prefix in API_PREFIXES:
    app.include_router(router, prefix=prefix)


def _error_response(status_code: int, error: str, detail: list | None = None) -> JSONResponse:
    body = ErrorResponse(error=error, detail=detail)
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return _error_response(400, "Bad request", jsonable_encoder(exc.errors()))


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    return JSONResponse(status_code=404, content=NotFoundResponse().model_dump())


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == 404:
        return JSONResponse(status_code=404, content=NotFoundResponse().model_dump())
    return _error_response(exc.status_code, str(exc.detail))


@app.exception_handler(StoreError)
@app.exception_handler(ParseError)
async def internal_error_handler(request: Request, exc: Exception) -> JSONResponse:
    # log_operation has already recorded the traceback for routed operations.
    LOGGER.error("Request failed: %s", exc, extra={"path": request.url.path})
    return _error_response(500, "Internal server error")


@app.get("/health", include_in_schema=False)
def health() -> Dict[str, str]:
    """Return a simple status payload for health checks."""

    return {"status": "ok"}


__all__ = ["API_PREFIXES", "app", "lifespan"]
