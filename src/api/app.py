"""
FastAPI application factory.

* Registers routes for vehicles, rides and admin.
* Renders ledger errors as tagged ``{"type": "err", ...}`` results.
* Applies rate-limiting middleware.
* Swagger / OpenAPI UI available at ``/docs``.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from src.api.dependencies import build_transition_engine
from src.api.middleware import limiter
from src.api.routes import admin, rides, vehicles
from src.api.schemas import ErrResult
from src.domain.errors import LedgerError
from src.infrastructure.database import engine as db_engine
from src.infrastructure.locks import LockNotAcquired
from src.infrastructure.redis_client import close_redis
from src.services.transition_engine import TransitionEngine

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Release pooled connections on shutdown."""
    logger.info("Ledger API started")
    yield
    await db_engine.dispose()
    await close_redis()
    logger.info("Ledger API stopped")


async def _ledger_error_handler(request: Request, exc: LedgerError) -> JSONResponse:
    body = ErrResult(value=exc.code, detail=str(exc))
    return JSONResponse(status_code=exc.http_status, content=body.model_dump())


async def _lock_error_handler(request: Request, exc: LockNotAcquired) -> JSONResponse:
    logger.warning("Ledger busy: %s", exc)
    return JSONResponse(status_code=503, content={"detail": "Ledger busy, retry later"})


def create_app(engine: Optional[TransitionEngine] = None) -> FastAPI:
    app = FastAPI(
        title="Autonomous Vehicle Network Ledger API",
        description=(
            "Shared ledger for vehicle owners, passengers and the network "
            "operator.  Every transition is atomic, owner-authorized and "
            "rejected without side effects when a precondition fails."
        ),
        version="1.0.0",
        lifespan=lifespan,
    )

    app.state.engine = engine or build_transition_engine()

    # Rate limiter
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    # Ledger errors
    app.add_exception_handler(LedgerError, _ledger_error_handler)
    app.add_exception_handler(LockNotAcquired, _lock_error_handler)

    # Routers
    app.include_router(vehicles.router, prefix="/api/v1")
    app.include_router(rides.router, prefix="/api/v1")
    app.include_router(admin.router, prefix="/api/v1")

    return app
