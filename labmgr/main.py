# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""
FastAPI application factory.

Responsibilities
----------------
* Instantiate the FastAPI app and attach the settings and the
  AuthContext (hasher, credential store, session store, cookie signer)
  to ``app.state``.
* Register CORS and request-logging middleware.
* Translate validation failures to 400 and unhandled errors to 500.
* Mount the feature routers.
* Expose a /health endpoint for container liveness checks.

Run with:
    uvicorn labmgr.main:app
"""

import time
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from starlette.middleware.base import BaseHTTPMiddleware

from labmgr.core.config import Settings, settings as default_settings
from labmgr.core.logger import logger
from labmgr.core.security import AuthContext
from labmgr.database import Base, engine

# Import every ORM model so that Base.metadata knows about all tables.
import labmgr.models.user         # noqa: F401
import labmgr.models.session      # noqa: F401
import labmgr.models.sample       # noqa: F401
import labmgr.models.sensor_data  # noqa: F401
import labmgr.models.protocol     # noqa: F401
import labmgr.models.report       # noqa: F401
import labmgr.models.notification # noqa: F401

from labmgr.auth.router import router as auth_router
from labmgr.samples.router import router as samples_router
from labmgr.sensors.router import router as sensors_router
from labmgr.protocols.router import router as protocols_router
from labmgr.reports.router import router as reports_router
from labmgr.notifications.router import router as notifications_router
from labmgr.dashboard.router import router as dashboard_router
from labmgr.admin.router import router as admin_router


# ---------------------------------------------------------------------------
# Request-logging middleware
# ---------------------------------------------------------------------------
# Logs every inbound request: method, path, client IP, status, latency.
# Bodies (login payload, password fields) are NOT echoed – only the URL and
# metadata are recorded.


class _RequestLogMiddleware(BaseHTTPMiddleware):
    """Log method, path, client IP, response status and latency (ms)."""

    async def dispatch(self, request: Request, call_next) -> Response:
        start = time.perf_counter()
        response: Response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000

        client_ip = request.client.host if request.client else "unknown"

        logger.info(
            "%s %s | client=%s status=%d latency=%.1fms",
            request.method,
            request.url.path,
            client_ip,
            response.status_code,
            elapsed_ms,
        )
        return response


# ---------------------------------------------------------------------------
# Exception handlers
# ---------------------------------------------------------------------------


async def _validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"message": "Invalid request data", "errors": jsonable_encoder(exc.errors())},
    )


async def _unhandled_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"message": "Internal server error", "error": str(exc)},
    )


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or default_settings

    app = FastAPI(title="Lab Manager", version="1.0.0")
    app.state.settings = settings
    app.state.auth = AuthContext.from_settings(settings)

    # Session cookies need credentials; origins must be listed explicitly.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["Content-Type"],
    )
    app.add_middleware(_RequestLogMiddleware)

    app.add_exception_handler(RequestValidationError, _validation_error)
    app.add_exception_handler(Exception, _unhandled_error)

    app.include_router(auth_router)
    app.include_router(samples_router)
    app.include_router(sensors_router)
    app.include_router(protocols_router)
    app.include_router(reports_router)
    app.include_router(notifications_router)
    app.include_router(dashboard_router)
    app.include_router(admin_router)

    @app.on_event("startup")
    async def _on_startup():
        if settings.auto_create_tables:
            Base.metadata.create_all(bind=engine)
            logger.info("Database tables created (AUTO_CREATE_TABLES)")
        logger.info("Lab Manager service starting up")

    @app.on_event("shutdown")
    async def _on_shutdown():
        logger.info("Lab Manager service shutting down")

    @app.get("/health")
    def health():
        return {"status": "ok"}

    return app


app = create_app()
