"""FastAPI dependency injection helpers."""

from fastapi import Header, Request

from src.config import settings
from src.infrastructure.database import async_session_factory
from src.infrastructure.height import RedisHeightSource
from src.infrastructure.locks import DistributedLock
from src.infrastructure.redis_client import get_redis
from src.infrastructure.settlement import LedgerSettlementAdapter
from src.services.transition_engine import TransitionEngine


def build_transition_engine() -> TransitionEngine:
    """Production wiring: Postgres store, Redis height and Redis ledger lock."""
    redis = get_redis()
    return TransitionEngine(
        async_session_factory,
        LedgerSettlementAdapter(),
        RedisHeightSource(redis, settings.height_key),
        lock_factory=lambda: DistributedLock(
            redis,
            settings.ledger_lock_key,
            ttl_seconds=settings.ledger_lock_ttl_seconds,
            wait_seconds=settings.ledger_lock_wait_seconds,
        ),
    )


def get_engine(request: Request) -> TransitionEngine:
    return request.app.state.engine


def get_caller(
    x_caller_identity: str = Header(
        ...,
        min_length=1,
        max_length=128,
        description="Principal verified by the authenticating gateway.",
    ),
) -> str:
    return x_caller_identity
