"""
Ride endpoints
==============

POST /api/v1/rides                    -- request a ride (binds the lowest-id available vehicle)
GET  /api/v1/rides/{ride_id}          -- ride record and fare
POST /api/v1/rides/{ride_id}/complete -- vehicle owner completes the ride
"""

from fastapi import APIRouter, Depends, HTTPException, Request

from src.api.dependencies import get_caller, get_engine
from src.api.middleware import RATE_LIMIT, limiter
from src.api.schemas import ErrResult, OkResult, RideCreateRequest, RideResponse
from src.services.transition_engine import TransitionEngine

router = APIRouter(prefix="/rides", tags=["rides"])


@router.post(
    "",
    status_code=201,
    response_model=OkResult,
    summary="Request a ride",
    responses={404: {"model": ErrResult, "description": "No vehicle available"}},
)
@limiter.limit(RATE_LIMIT)
async def request_ride(
    request: Request,
    body: RideCreateRequest,
    caller: str = Depends(get_caller),
    engine: TransitionEngine = Depends(get_engine),
):
    ride_id = await engine.request_ride(
        caller,
        body.start_location,
        body.end_location,
        body.distance,
        idempotency_key=body.idempotency_key,
    )
    return OkResult(value=ride_id)


@router.get(
    "/{ride_id}",
    response_model=RideResponse,
    summary="Get ride status and fare",
)
@limiter.limit(RATE_LIMIT)
async def get_ride(
    request: Request,
    ride_id: int,
    engine: TransitionEngine = Depends(get_engine),
):
    ride = await engine.get_ride(ride_id)
    if not ride:
        raise HTTPException(status_code=404, detail="Ride not found")
    return ride


@router.post(
    "/{ride_id}/complete",
    response_model=OkResult,
    summary="Complete a ride",
    description=(
        "Marks an IN_PROGRESS ride COMPLETED and credits its distance and fare "
        "to the vehicle.  Only the vehicle owner may complete a ride."
    ),
    responses={
        403: {"model": ErrResult, "description": "Caller does not own the vehicle"},
        404: {"model": ErrResult, "description": "Ride or vehicle not found"},
        409: {"model": ErrResult, "description": "Ride already completed"},
    },
)
@limiter.limit(RATE_LIMIT)
async def complete_ride(
    request: Request,
    ride_id: int,
    caller: str = Depends(get_caller),
    engine: TransitionEngine = Depends(get_engine),
):
    return OkResult(value=await engine.complete_ride(caller, ride_id))
