from __future__ import annotations

from contextlib import asynccontextmanager
import logging

from fastapi import Depends, FastAPI

from campus_hub.data_scope.registry import register_default_scoped_models
from campus_hub.db import filters as _filters  # noqa: F401  (register SQLAlchemy filters)
from campus_hub.db.init_db import init_db
from campus_hub.errors import register_error_handlers
from campus_hub.logging_config import configure_app_logging
from campus_hub.routers import admin, health, me, notices, roles
from campus_hub.security.config import load_security_config
from campus_hub.security.dependencies import enforce_security
from campus_hub.settings import get_settings

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        settings = get_settings()
        configure_app_logging(settings.log_level)
        logger.info("App startup beginning")

        app.state.security_config = load_security_config(settings.resolved_security_config_path())
        logger.info("Loaded security config: %s", settings.resolved_security_config_path())
        init_db(seed=settings.seed_demo_data)
        logger.info("Database initialized (tables ensured, seed=%s)", settings.seed_demo_data)

        yield

    register_default_scoped_models()

    # Global dependency: applies security with zero changes to route handlers.
    app = FastAPI(dependencies=[Depends(enforce_security)], lifespan=lifespan)
    register_error_handlers(app)

    app.include_router(health.router)
    app.include_router(me.router)
    app.include_router(roles.router)
    app.include_router(notices.router)
    app.include_router(admin.router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("campus_hub.main:app", host="127.0.0.1", port=8000)
