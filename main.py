"""
Teapot API — Application
Teapots, teas, brews and steeps over HTTP, held in memory.

Usage:
    pip install -e .
    uvicorn main:app --reload --port 8000

Then:
    curl -X POST http://localhost:8000/teapots \
      -H "Content-Type: application/json" \
      -d '{"name": "Kyusu", "material": "clay", "capacityMl": 350, "style": "kyusu"}'
"""

import logging
import time
import uuid
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from config import API_PREFIX, API_VERSION, LOG_LEVEL
from errors import ApiError, ValidationFailed
from routes import router
from schemas import flatten_errors
from store import Store


# ── Structured logging ────────────────────────────────────────────────────────

structlog.configure(
    processors=[
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.add_log_level,
        structlog.processors.JSONRenderer(),
    ],
    wrapper_class=structlog.make_filtering_bound_logger(
        getattr(logging, LOG_LEVEL, logging.INFO)
    ),
)

log = structlog.get_logger()


# ── Middleware ────────────────────────────────────────────────────────────────

class RequestLogMiddleware(BaseHTTPMiddleware):
    """
    Tag every response with a request id and log one line per request.
    A client-supplied X-Request-Id is echoed back unchanged.
    """
    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("x-request-id") or uuid.uuid4().hex
        started = time.perf_counter()

        response = await call_next(request)

        response.headers["X-Request-Id"] = request_id
        log.info("http.request",
            request_id=request_id,
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            duration_ms=round((time.perf_counter() - started) * 1000, 2),
        )
        return response


# ── Error rendering ───────────────────────────────────────────────────────────

async def api_error_handler(request: Request, exc: ApiError):
    log.info("http.api_error",
        path=request.url.path,
        status_code=exc.status_code,
        message=str(exc),
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def request_validation_handler(request: Request, exc: RequestValidationError):
    error = ValidationFailed(flatten_errors(exc.errors()))
    log.info("http.validation_failed", path=request.url.path, fields=sorted(error.errors))
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


# ── App ───────────────────────────────────────────────────────────────────────

@asynccontextmanager
async def lifespan(app: FastAPI):
    log.info("teapot_api.startup",
        version=API_VERSION,
        prefix=API_PREFIX or "/",
        teapots=len(app.state.store.teapots),
        teas=len(app.state.store.teas),
    )
    yield
    log.info("teapot_api.shutdown")


def create_app(store: Store | None = None) -> FastAPI:
    """Build an app that owns `store` (a fresh, empty one by default)."""
    app = FastAPI(
        title="Teapot API",
        description="Teapots, teas, brews and steeps",
        version=API_VERSION,
        lifespan=lifespan,
    )
    app.state.store = store if store is not None else Store()

    app.add_middleware(RequestLogMiddleware)
    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.include_router(router, prefix=API_PREFIX)
    return app


app = create_app()
