"""FastAPI application wiring for the user service."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from psycopg_pool import ConnectionPool

from .api.routes import router as api_router
from .config import Settings, get_settings
from .domain.service import RegistrationService
from .memory_repository import InMemoryAccountStore
from .repository import PostgresAccountStore
from .security.passwords import BcryptPasswordHasher

settings = get_settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def build_service(settings: Settings, pool: ConnectionPool | None = None) -> RegistrationService:
    """Assemble the registration service for the configured store backend."""
    hasher = BcryptPasswordHasher(rounds=settings.bcrypt_rounds)
    if settings.store_backend == "postgres":
        if pool is None:
            raise ValueError("postgres store backend requires a connection pool")
        logger.info("account store using postgres backend")
        return RegistrationService(PostgresAccountStore(pool), hasher)
    if settings.store_backend != "memory":
        raise ValueError(f"unknown store backend: {settings.store_backend}")
    logger.info("account store using in-memory backend")
    return RegistrationService(InMemoryAccountStore(), hasher)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialise shared resources (Postgres pool, services) for the app lifecycle."""
    pool: ConnectionPool | None = None
    if settings.store_backend == "postgres":
        pool = ConnectionPool(settings.database_url, open=False, timeout=settings.database_pool_timeout)
        pool.open()
    app.state.pool = pool
    app.state.registration_service = build_service(settings, pool)
    try:
        yield
    finally:
        if pool is not None:
            pool.close()


app = FastAPI(title=settings.app_name, version=settings.version, lifespan=lifespan)


@app.get("/health", tags=["health"])
def health() -> dict[str, str]:
    """Return a minimal readiness indicator used by orchestration systems."""
    return {"status": "ok"}


@app.get("/metrics", tags=["health"])
def metrics() -> Response:
    """Expose Prometheus metrics for scraping."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


app.include_router(api_router)


def run() -> None:
    """Serve the application with uvicorn on the configured host and port."""
    uvicorn.run(app, host=settings.http_host, port=settings.http_port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    run()
