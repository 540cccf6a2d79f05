"""
Shared test fixtures.

Uses an in-memory SQLite database (via aiosqlite) so tests run without
Docker / PostgreSQL / Redis.  SQLite ignores ``FOR UPDATE``; the engine's
in-process lock still serialises transitions.
"""

from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from src.infrastructure import models  # noqa: F401  (registers tables)
from src.infrastructure.database import Base
from src.infrastructure.height import StaticHeightSource
from src.infrastructure.settlement import LedgerSettlementAdapter
from src.services.transition_engine import TransitionEngine


# ── Test DB (SQLite in-memory) ────────────────────────────────────────

TEST_DB_URL = "sqlite+aiosqlite:///:memory:"

test_engine = create_async_engine(TEST_DB_URL, echo=False, poolclass=StaticPool)
TestSessionFactory = async_sessionmaker(
    test_engine, class_=AsyncSession, expire_on_commit=False
)

OWNER = "ST1PQHQKV0RJXZFY1DGX8MNSNYVE3VGZJSRTPGZGM"
PASSENGER = "ST2CY5V39NHDPWSXMW9QDT3HC3GD6Q6XX4CFRK9AG"
STRANGER = "ST3AM1A56AK2C1XAFJ4115ZSV26EB49BVQ10MGCS0"
CONTRACT = "avnet.contract"
OPERATOR = "avnet.operator"


# ── Fixtures ──────────────────────────────────────────────────────────


@pytest_asyncio.fixture
async def session_factory() -> AsyncGenerator[async_sessionmaker, None]:
    """Create tables, yield the session factory, then drop everything."""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield TestSessionFactory

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
def heights() -> StaticHeightSource:
    return StaticHeightSource(0)


@pytest.fixture
def settlement() -> LedgerSettlementAdapter:
    return LedgerSettlementAdapter()


@pytest.fixture
def ledger(session_factory, settlement, heights) -> TransitionEngine:
    return TransitionEngine(
        session_factory,
        settlement,
        heights,
        contract_account=CONTRACT,
        network_operator=OPERATOR,
    )


@pytest_asyncio.fixture
async def client(ledger) -> AsyncGenerator[AsyncClient, None]:
    """AsyncClient backed by SQLite and an in-process height source."""
    from src.api.app import create_app
    from src.api.middleware import limiter

    limiter.reset()
    app = create_app(engine=ledger)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
