"""FastAPI application wiring for the account service."""

from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from psycopg_pool import ConnectionPool

from .api.errors import install_error_handlers
from .api.routes import routers
from .config import Settings, get_settings
from .domain.service import AccountService, AccountStore
from .repository import AccountRepository
from .security.passwords import PasswordHasher
from .security.tokens import TokenService

settings = get_settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)
STARTED_AT = time.monotonic()


def wire_services(app: FastAPI, repository: AccountStore, config: Settings) -> AccountService:
    """Build the token service, hasher and account service and attach them to ``app.state``."""
    tokens = TokenService(
        secret=config.jwt_secret,
        ttl_seconds=config.jwt_ttl_seconds,
        issuer=config.jwt_issuer,
    )
    service = AccountService(repository, PasswordHasher(config.password_hash_rounds), tokens)
    app.state.token_service = tokens
    app.state.account_repository = repository
    app.state.account_service = service
    return service


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialise shared resources (Postgres pool, services) for the app lifecycle."""
    pool = ConnectionPool(settings.database_url, open=False)
    pool.open()
    app.state.pool = pool
    repository = AccountRepository(pool)
    repository.ensure_schema()
    wire_services(app, repository, settings)
    logger.info("%s %s ready", settings.app_name, settings.version)
    try:
        yield
    finally:
        pool.close()


app = FastAPI(title=settings.app_name, version=settings.version, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.cors_origins),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    max_age=600,
)
install_error_handlers(app)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    started = time.perf_counter()
    response = await call_next(request)
    logger.info(
        "%s %s -> %s (%.1f ms)",
        request.method,
        request.url.path,
        response.status_code,
        (time.perf_counter() - started) * 1000,
    )
    return response


@app.get("/", tags=["health"])
def root() -> dict[str, object]:
    return {"success": True, "message": "User Management System API", "version": settings.version}


@app.get("/health", tags=["health"])
def health() -> dict[str, object]:
    """Report liveness with process uptime in seconds and the current epoch time in ms."""
    return {
        "success": True,
        "status": "ok",
        "uptime": round(time.monotonic() - STARTED_AT, 3),
        "timestamp": int(time.time() * 1000),
    }


@app.get("/healthz", tags=["health"])
def healthz() -> dict[str, str]:
    """Return a minimal readiness indicator used by orchestration systems."""
    return {"status": "ok"}


@app.get("/metrics", tags=["health"])
def metrics() -> Response:
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


for router in routers:
    app.include_router(router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=settings.http_host, port=settings.http_port)
