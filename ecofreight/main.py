"""
EcoFreight API
Freight tracking with carbon accounting, role dashboards and a simulated ledger
"""

import os
from contextlib import asynccontextmanager
from pathlib import Path
from alembic import command
from alembic.config import Config
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware

from shared.core import ServiceHealth, setup_logging, RequestLoggingMiddleware, get_logger
from ecofreight import __version__
from ecofreight.core_settings import get_settings
from ecofreight.domain.ledger import get_ledger
from ecofreight.infrastructure.cache import init_cache
from ecofreight.infrastructure.db import engine, init_models
from ecofreight.api import (
    auth, blockchain, dashboards, reviews, route_optimizer, sensors, shipments, suggestions, supply_chain, users,
)

SERVICE_NAME = "ecofreight-api"
SERVICE_VERSION = os.getenv("SERVICE_VERSION", __version__)
SERVICE_DESCRIPTION = "Sustainable freight tracking API"
PROJECT_ROOT = Path(__file__).resolve().parent.parent
DEFAULT_JWT_SECRET = "change-me"

ROUTERS = (auth, users, shipments, sensors, reviews, suggestions, blockchain, supply_chain, route_optimizer, dashboards)

settings = get_settings()
setup_logging(service_name=SERVICE_NAME, level=settings.LOG_LEVEL)
logger = get_logger(__name__)


def run_migrations() -> None:
    """Upgrade the schema to the latest revision; failures are logged, not raised."""
    config = Config(str(PROJECT_ROOT / "alembic.ini"))
    config.set_main_option("script_location", str(PROJECT_ROOT / "alembic"))
    config.attributes["configure_logger"] = False
    try:
        command.upgrade(config, "head")
        logger.info("Database migrations completed")
    except Exception as e:
        logger.error(f"Migration error: {e}")


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting {SERVICE_NAME} version {SERVICE_VERSION}")
    if settings.RUN_MIGRATIONS:
        run_migrations()
    # Fills in anything migrations did not create, e.g. on SQLite
    init_models()
    init_cache()
    logger.info(f"{SERVICE_NAME} ready")
    yield
    logger.info(f"Shutting down {SERVICE_NAME}")


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request, call_next):
        response = await call_next(request)
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault("Referrer-Policy", "no-referrer")
        return response


def ledger_check() -> dict:
    return {"status": "pass", "componentType": "component", "observedValue": get_ledger().count()}


def config_check() -> dict:
    if settings.JWT_SECRET == DEFAULT_JWT_SECRET:
        return {"status": "warn", "componentType": "config", "output": "JWT_SECRET is the default value"}
    return {"status": "pass", "componentType": "config"}


def create_app() -> FastAPI:
    app = FastAPI(
        title=SERVICE_NAME,
        description=SERVICE_DESCRIPTION,
        version=SERVICE_VERSION,
        lifespan=lifespan,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json",
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestLoggingMiddleware)

    health = ServiceHealth(
        SERVICE_NAME,
        SERVICE_VERSION,
        engine=engine,
        redis_url=settings.REDIS_URL,
        extra_checks={"ledger:transactions": ledger_check},
        config_check=config_check,
    )
    app.include_router(health.create_health_router())
    for module in ROUTERS:
        app.include_router(module.router)

    @app.get("/")
    async def root():
        return {"service": SERVICE_NAME, "version": SERVICE_VERSION, "status": "running", "docs": "/api/docs"}

    @app.get("/info")
    async def info():
        """Service information endpoint"""
        return {
            "service": SERVICE_NAME,
            "version": SERVICE_VERSION,
            "description": SERVICE_DESCRIPTION,
            "environment": os.getenv("ENVIRONMENT", "development"),
            "endpoints": {
                "health": "/health",
                "ready": "/health/ready",
                "live": "/health/live",
                "metrics": "/metrics",
                "docs": "/api/docs",
            },
        }

    return app


app = create_app()
