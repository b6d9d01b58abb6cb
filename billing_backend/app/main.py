"""
Main entrypoint for the Billing Analytics API.

This module assembles the FastAPI application: logging, CORS, error
handlers and the versioned routers.  ``create_app`` builds and
configures the app, which is then instantiated at module import time
as ``app`` so it can be served directly, e.g.::

    DATABASE_URL=bills.db uvicorn billing_backend.app.main:app

The bill store is opened in the application lifespan.  Without a
``DATABASE_URL`` startup fails with ``ConfigurationError`` and the
server never begins serving.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from .api.v1.endpoints import health
from .api.v1.router import router as api_router
from .core.config import Settings, settings as default_settings
from .core.db import get_database_path
from .core.errors import BillingError
from .core.logging_config import setup_logging
from .core.responses import BillingJSONResponse
from .services.analytics_service import BillingAnalyticsEngine
from .services.bill_store import BillStore

logger = logging.getLogger(__name__)


def create_app(app_settings: Optional[Settings] = None, store: Optional[BillStore] = None) -> FastAPI:
    """Create and configure a FastAPI application.

    Parameters
    ----------
    app_settings : Optional[Settings]
        Settings to use; defaults to the module level ``settings``.
    store : Optional[BillStore]
        Pre-built store.  When omitted a ``BillStore`` is opened from
        ``DATABASE_URL`` during startup.  Tests pass their own store
        (or a double) here.

    Returns
    -------
    FastAPI
        A configured FastAPI application instance.
    """
    app_settings = app_settings or default_settings
    setup_logging(app_settings.log_level, app_settings.log_file or None)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        bill_store = store
        if bill_store is None:
            db_path = get_database_path(app_settings.require_database_url())
            bill_store = BillStore(db_path)
            bill_store.initialize()
        app.state.engine = BillingAnalyticsEngine(bill_store, zero_is_missing=app_settings.zero_is_missing)
        logger.info("%s %s ready", app_settings.project_name, app_settings.api_version)
        yield
        logger.info("%s shutting down", app_settings.project_name)

    app = FastAPI(
        title=app_settings.project_name,
        version=app_settings.api_version,
        debug=app_settings.debug,
        default_response_class=BillingJSONResponse,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(BillingError)
    async def billing_error_handler(request: Request, exc: BillingError) -> BillingJSONResponse:
        return BillingJSONResponse(status_code=exc.status_code, content={"message": exc.message})

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError) -> BillingJSONResponse:
        logger.info("Malformed request to %s: %s", request.url.path, exc.errors())
        return BillingJSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"message": "Invalid request."},
        )

    app.include_router(api_router, prefix=app_settings.api_prefix)
    app.include_router(health.router, prefix="/health", tags=["health"])

    @app.get("/", response_model=None)
    async def root() -> dict:
        return {
            "message": f"{app_settings.project_name} is running",
            "version": app_settings.api_version,
        }

    return app


# Create the application instance at import time so that tools such as
# uvicorn can discover it without calling create_app manually.
app = create_app()
