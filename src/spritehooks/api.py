"""FastAPI application for spritehooks."""

from __future__ import annotations

import logging
import time
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.middleware.base import BaseHTTPMiddleware

from spritehooks import __version__
from spritehooks import api_state as state
from spritehooks.adapters import default_registry
from spritehooks.api_errors import (
    APIException,
    RateLimitErrorResponse,
    api_exception_handler,
    spritehooks_exception_handler,
)
from spritehooks.api_routes import admin, health, webhooks
from spritehooks.catalog import create_catalog
from spritehooks.config import configure_logging, get_settings
from spritehooks.dispatcher import WebhookDispatcher
from spritehooks.engine.executor import SpriteExecutor
from spritehooks.errors import SpritehooksError
from spritehooks.http import HTTPClientConfig, close_async_client, configure_http_client
from spritehooks.scheduler import CronScheduler

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build components, start the cron scheduler and tear everything down."""
    settings = get_settings()
    configure_logging(
        level=settings.log_level,
        format=settings.log_format,
        sanitize_logs=settings.sanitize_logs,
    )
    configure_http_client(HTTPClientConfig(timeout=settings.http_timeout))

    state.adapters = default_registry()
    state.catalog = create_catalog(settings)
    state.executor = SpriteExecutor.from_settings(settings)
    state.dispatcher = WebhookDispatcher(
        state.adapters, state.catalog, state.executor, settings.webhook_secret
    )
    state.cron_scheduler = CronScheduler(state.catalog, state.executor)

    state.cron_scheduler.start()
    result = await state.cron_scheduler.sync()
    logger.info(
        f"Startup complete: adapters={state.adapters.names()}, "
        f"cron_jobs={result.registered}, cron_failed={result.failed}"
    )

    yield

    logger.info("Shutting down...")
    state.cron_scheduler.shutdown()
    await close_async_client()
    logger.info("Shutdown complete")


app = FastAPI(title="spritehooks", version=__version__, lifespan=lifespan)


# ---------------------------------------------------------------------------
# Middleware
# ---------------------------------------------------------------------------


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log every request with timing and a request ID."""

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())[:8]
        client_ip = request.client.host if request.client else "unknown"
        method = request.method
        path = request.url.path

        start_time = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception as e:
            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.error(
                f"[{request_id}] {method} {path} - 500 ERROR in {duration_ms:.1f}ms - {e}",
                extra={"request_id": request_id, "status_code": 500},
            )
            raise

        duration_ms = (time.perf_counter() - start_time) * 1000
        status_code = response.status_code
        log_level = logging.WARNING if status_code >= 400 else logging.INFO
        logger.log(
            log_level,
            f"[{request_id}] {method} {path} - {status_code} in {duration_ms:.1f}ms"
            f" - client={client_ip}",
            extra={"request_id": request_id, "status_code": status_code},
        )

        response.headers["X-Request-ID"] = request_id
        return response


app.add_middleware(RequestLoggingMiddleware)

# Register rate limiter
app.state.limiter = state.limiter


@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Handle rate limit exceeded errors with structured response."""
    request_id = request.headers.get("X-Request-ID")
    response = RateLimitErrorResponse(
        error={
            "error_code": "RATE_LIMITED",
            "message": "Rate limit exceeded",
            "details": {"limit": str(exc.detail)},
            "request_id": request_id,
        },
        retry_after=60,
    )
    return JSONResponse(
        status_code=429,
        content=response.model_dump(),
        headers={"Retry-After": "60"},
    )


app.add_exception_handler(SpritehooksError, spritehooks_exception_handler)
app.add_exception_handler(APIException, api_exception_handler)


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------

app.include_router(health.router)
app.include_router(webhooks.router)
app.include_router(admin.router)


if __name__ == "__main__":
    import uvicorn

    _settings = get_settings()
    uvicorn.run(app, host=_settings.host, port=_settings.port)
