"""FastAPI application wiring for the account identity service."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from psycopg_pool import ConnectionPool

from .api.routes import router as v1_router
from .config import Settings, get_settings
from .domain.service import AccountService
from .memory_store import InMemoryAccountStore
from .repository import AccountStore, PostgresAccountStore
from .security.passwords import CredentialHasher
from .security.tokens import TokenIssuer

logger = logging.getLogger(__name__)


def build_service(settings: Settings, store: AccountStore) -> AccountService:
    """Construct the account service from validated settings and a store."""
    hasher = CredentialHasher(
        time_cost=settings.password_hash_time_cost,
        memory_cost=settings.password_hash_memory_cost,
    )
    issuer = TokenIssuer(
        secret=settings.jwt_secret,
        issuer=settings.jwt_issuer,
        ttl_seconds=settings.jwt_ttl_seconds,
    )
    return AccountService(store, hasher, issuer)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Validate configuration and initialise the store and service for the app lifecycle.

    Invalid configuration raises here, which aborts startup.
    """
    settings = get_settings()
    logging.basicConfig(level=settings.log_level)

    pool: ConnectionPool | None = None
    store: AccountStore
    if settings.database_url:
        pool = ConnectionPool(settings.database_url, open=False)
        pool.open()
        store = PostgresAccountStore(pool)
    else:
        logger.warning("POSTGRES_URL not set, using in-memory account store")
        store = InMemoryAccountStore()

    app.state.account_service = build_service(settings, store)
    try:
        yield
    finally:
        if pool is not None:
            pool.close()


app = FastAPI(title="account-identity", version="0.1.0", lifespan=lifespan)


@app.get("/healthz", tags=["health"])
def healthz() -> dict[str, str]:
    """Return a minimal readiness indicator used by orchestration systems."""
    return {"status": "ok"}


@app.get("/metrics", tags=["health"])
def metrics() -> Response:
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


app.include_router(v1_router)
