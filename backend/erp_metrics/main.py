"""FastAPI application entrypoint."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import datetime

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from erp_metrics.api.routes import api_router
from erp_metrics.calculations.industry_profiles import build_catalog
from erp_metrics.config import AppSettings, get_settings
from erp_metrics.core.logging import setup_logging
from erp_metrics.core.telemetry import setup_telemetry
from erp_metrics.db.session import Database

logger = logging.getLogger(__name__)

# Allow common local development origins for the dashboard dev server.
allowed_origins = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
    "http://localhost",
    "http://127.0.0.1",
]


def create_app(database: Database | None = None, settings: AppSettings | None = None) -> FastAPI:
    """Build the application with its database, settings and industry catalog."""

    settings = settings or get_settings()
    database = database or Database(settings.database_url)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await database.create_all()
        logger.info("Database schema ready for %s", settings.app_name)
        yield
        await database.dispose()

    app = FastAPI(title=settings.app_name, version="0.1.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.database = database
    app.state.catalog = build_catalog(settings.default_industry)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_origin_regex=r"^https?://(localhost|127\.0\.0\.1)(:\d+)?$",
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health", tags=["health"])
    async def health() -> dict[str, str]:
        """Return service readiness metadata."""

        return {"status": "ok", "timestamp": datetime.now().isoformat()}

    app.include_router(api_router)
    setup_telemetry(app, settings, engine=database.engine)
    return app


def build_app() -> FastAPI:
    """Entrypoint for ``uvicorn --factory erp_metrics.main:build_app``."""

    settings = get_settings()
    setup_logging(settings.log_level)
    return create_app(settings=settings)


__all__ = ["build_app", "create_app"]
