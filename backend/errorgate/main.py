"""errorgate API: FastAPI application entry point (composition root).

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Classifier rule table built here and passed to the dispatcher (no global registry)
    - Error dispatch installed before CORS so error responses carry CORS headers
    - Per-application services live on app.state, created once per app

Design Decisions:
    - create_app() factory: tests build isolated apps with their own settings/clock
    - Lifespan over @app.on_event: FastAPI recommended pattern
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Callable

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from errorgate.api.error_dispatch import ErrorDispatcher, install_error_dispatch
from errorgate.api.framework_rules import build_classifier
from errorgate.api.routes import admin_reports, health, users
from errorgate.config import Settings, get_settings
from errorgate.core.classifier import Classifier
from errorgate.infrastructure.observability import setup_logging
from errorgate.services.admin_reports import AdminReportService
from errorgate.services.user_directory import UserDirectory

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = app.state.settings
    setup_logging(settings.log_level, settings.log_format)
    logger.info(f"{settings.service_name} API started")
    yield
    logger.info(f"{settings.service_name} API shutting down")


def create_app(
    settings: Settings | None = None,
    classifier: Classifier | None = None,
    clock: Callable[[], datetime] | None = None,
) -> FastAPI:
    settings = settings or get_settings()
    app = FastAPI(title="errorgate API", version="1.0.0", lifespan=lifespan)

    app.state.settings = settings
    app.state.user_directory = UserDirectory()
    app.state.admin_reports = AdminReportService(
        settings.admin_token, app.state.user_directory,
    )

    dispatcher = ErrorDispatcher(classifier or build_classifier(), clock=clock)
    app.state.error_dispatcher = dispatcher
    install_error_dispatch(app, dispatcher)

    # CORS - configured from settings, not hardcoded
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Routes - explicit registration
    app.include_router(health.router)
    app.include_router(users.router)
    app.include_router(admin_reports.router)
    return app


app = create_app()
