"""
Admin / observability endpoints
===============================

GET /api/v1/admin/health                      -- simple health check
GET /api/v1/admin/stats                       -- height and id counters
PUT /api/v1/admin/height                      -- advance the logical clock
GET /api/v1/admin/accounts/{account}          -- settlement balance
POST /api/v1/admin/accounts/{account}/deposit -- fund a settlement account
"""

from fastapi import APIRouter, Depends, Request

from src.api.dependencies import get_engine
from src.api.middleware import RATE_LIMIT, limiter
from src.api.schemas import (
    AccountResponse,
    DepositRequest,
    HealthResponse,
    HeightUpdateRequest,
    LedgerStatsResponse,
)
from src.domain.enums import Counter
from src.services.transition_engine import TransitionEngine

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get(
    "/stats",
    response_model=LedgerStatsResponse,
    summary="Current height and last allocated ids",
)
@limiter.limit(RATE_LIMIT)
async def get_stats(
    request: Request,
    engine: TransitionEngine = Depends(get_engine),
):
    return LedgerStatsResponse(
        height=await engine.heights.current_height(),
        last_vehicle_id=await engine.last_id(Counter.VEHICLE),
        last_ride_id=await engine.last_id(Counter.RIDE),
    )


@router.put(
    "/height",
    response_model=LedgerStatsResponse,
    summary="Advance the logical clock (never moves backwards)",
)
@limiter.limit(RATE_LIMIT)
async def advance_height(
    request: Request,
    body: HeightUpdateRequest,
    engine: TransitionEngine = Depends(get_engine),
):
    return LedgerStatsResponse(
        height=await engine.heights.advance_to(body.height),
        last_vehicle_id=await engine.last_id(Counter.VEHICLE),
        last_ride_id=await engine.last_id(Counter.RIDE),
    )


@router.get(
    "/accounts/{account}",
    response_model=AccountResponse,
    summary="Settlement account balance",
)
@limiter.limit(RATE_LIMIT)
async def get_account(
    request: Request,
    account: str,
    engine: TransitionEngine = Depends(get_engine),
):
    return AccountResponse(
        account=account, balance=await engine.account_balance(account)
    )


@router.post(
    "/accounts/{account}/deposit",
    response_model=AccountResponse,
    summary="Fund a settlement account",
)
@limiter.limit(RATE_LIMIT)
async def deposit(
    request: Request,
    account: str,
    body: DepositRequest,
    engine: TransitionEngine = Depends(get_engine),
):
    balance = await engine.fund_account(account, body.amount)
    return AccountResponse(account=account, balance=balance)


@router.get("/health", response_model=HealthResponse, summary="Health check")
async def health():
    return HealthResponse()
