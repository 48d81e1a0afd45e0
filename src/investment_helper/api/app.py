from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Any

from fastapi import FastAPI

from investment_helper.api import news, reports, testing
from investment_helper.core.config import Settings, get_settings
from investment_helper.core.logging import configure_logging
from investment_helper.services.runtime import Runtime, build_runtime

LOGGER = logging.getLogger(__name__)


def create_app(settings: Settings | None = None, runtime: Runtime | None = None) -> FastAPI:
    settings = settings or (runtime.settings if runtime is not None else get_settings())
    configure_logging(settings)
    runtime = runtime or build_runtime(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if settings.scheduler_enabled:
            runtime.scheduler.start()
            LOGGER.info("Report scheduler started (%s)", settings.scheduler_timezone)
        try:
            yield
        finally:
            runtime.scheduler.shutdown()
            runtime.engine.dispose()

    app = FastAPI(title="Investment Helper", lifespan=lifespan)
    app.state.runtime = runtime
    app.include_router(reports.router)
    app.include_router(news.router)
    app.include_router(testing.router)

    @app.get("/")
    def index() -> str:
        return "Investment Helper API"

    @app.get("/health")
    def health() -> dict[str, Any]:
        services = runtime.diagnostics.system_health()["services"]
        return {
            "status": "ok" if services["database"] else "error",
            "database": services["database"],
            "llmConfigured": services["llmService"],
            "environment": settings.app_env,
            "timestamp": datetime.now(UTC),
        }

    return app
