"""FastAPI application factory.

`create_app()` loads the advisory rule table before the app object exists,
so a rule file that fails strict validation keeps the service from
starting. The database connection is opened in the lifespan handler.

```
uvicorn --factory agrisense.api.app:create_app --port 5001
```
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from agrisense.config import get_settings
from agrisense.database.connection import close_db, init_db
from agrisense.rules.engine import RuleEngine

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    settings = get_settings()

    logger.info(
        f"Starting {settings.app_name} v{settings.app_version} "
        f"with {len(app.state.rule_engine.table)} advisory rules"
    )
    if not settings.openweather_configured:
        logger.warning("OPENWEATHER_API_KEY is not set; /api/weather will return 502")

    await init_db(create=settings.database_create_tables)
    yield
    await close_db()


def create_app(engine: RuleEngine | None = None) -> FastAPI:
    """Build the advisory API.

    Args:
        engine: Rule engine to serve; loaded from settings.rules_path if omitted
    """
    settings = get_settings()

    if engine is None:
        engine = RuleEngine.from_file(settings.rules_path, strict=settings.strict_rules)

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Weather-based farming advisories",
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        openapi_url="/openapi.json" if settings.debug else None,
        lifespan=lifespan,
    )
    app.state.rule_engine = engine

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    from agrisense.api.routes import history, rules, subscribers, weather

    app.include_router(weather.router, prefix="/api/weather", tags=["Weather"])
    app.include_router(history.router, prefix="/api/history", tags=["History"])
    app.include_router(subscribers.router, prefix="/api/subscribers", tags=["Subscribers"])
    app.include_router(rules.router, prefix="/api/rules", tags=["Rules"])

    @app.get("/health", tags=["Health"])
    async def health_check():
        table = app.state.rule_engine.table
        return {
            "status": "healthy",
            "version": settings.app_version,
            "rules": len(table),
            "rules_version": table.version,
            "weather_provider": settings.openweather_configured,
        }

    return app
