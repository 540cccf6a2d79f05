"""
Vehicle endpoints
=================

POST /api/v1/vehicles                                 -- register a vehicle
GET  /api/v1/vehicles/{vehicle_id}                    -- vehicle record
GET  /api/v1/vehicles/{vehicle_id}/maintenance-schedule
POST /api/v1/vehicles/{vehicle_id}/maintenance/schedule
POST /api/v1/vehicles/{vehicle_id}/maintenance/complete
POST /api/v1/vehicles/{vehicle_id}/earnings/distribute

Mutations require the ``X-Caller-Identity`` header; all but registration
are owner-only.
"""

from fastapi import APIRouter, Depends, HTTPException, Request

from src.api.dependencies import get_caller, get_engine
from src.api.middleware import RATE_LIMIT, limiter
from src.api.schemas import (
    ErrResult,
    MaintenanceScheduleResponse,
    OkResult,
    VehicleResponse,
)
from src.services.transition_engine import TransitionEngine

router = APIRouter(prefix="/vehicles", tags=["vehicles"])

_ERRORS = {
    403: {"model": ErrResult, "description": "Caller does not own the vehicle"},
    404: {"model": ErrResult, "description": "Vehicle not found"},
    409: {"model": ErrResult, "description": "Vehicle is in the wrong state"},
}


@router.post(
    "",
    status_code=201,
    response_model=OkResult,
    summary="Register a vehicle owned by the caller",
)
@limiter.limit(RATE_LIMIT)
async def register_vehicle(
    request: Request,
    caller: str = Depends(get_caller),
    engine: TransitionEngine = Depends(get_engine),
):
    return OkResult(value=await engine.register_vehicle(caller))


@router.get(
    "/{vehicle_id}",
    response_model=VehicleResponse,
    summary="Get a vehicle record",
)
@limiter.limit(RATE_LIMIT)
async def get_vehicle(
    request: Request,
    vehicle_id: int,
    engine: TransitionEngine = Depends(get_engine),
):
    vehicle = await engine.get_vehicle(vehicle_id)
    if not vehicle:
        raise HTTPException(status_code=404, detail="Vehicle not found")
    return vehicle


@router.get(
    "/{vehicle_id}/maintenance-schedule",
    response_model=MaintenanceScheduleResponse,
    summary="Get the height at which maintenance is next due",
)
@limiter.limit(RATE_LIMIT)
async def get_maintenance_schedule(
    request: Request,
    vehicle_id: int,
    engine: TransitionEngine = Depends(get_engine),
):
    schedule = await engine.get_maintenance_schedule(vehicle_id)
    if not schedule:
        raise HTTPException(status_code=404, detail="Maintenance schedule not found")
    return schedule


@router.post(
    "/{vehicle_id}/maintenance/schedule",
    response_model=OkResult,
    summary="Take a vehicle out of service for due maintenance",
    responses=_ERRORS,
)
@limiter.limit(RATE_LIMIT)
async def schedule_maintenance(
    request: Request,
    vehicle_id: int,
    caller: str = Depends(get_caller),
    engine: TransitionEngine = Depends(get_engine),
):
    return OkResult(value=await engine.schedule_maintenance(caller, vehicle_id))


@router.post(
    "/{vehicle_id}/maintenance/complete",
    response_model=OkResult,
    summary="Return a vehicle from maintenance to service",
    responses=_ERRORS,
)
@limiter.limit(RATE_LIMIT)
async def complete_maintenance(
    request: Request,
    vehicle_id: int,
    caller: str = Depends(get_caller),
    engine: TransitionEngine = Depends(get_engine),
):
    return OkResult(value=await engine.complete_maintenance(caller, vehicle_id))


@router.post(
    "/{vehicle_id}/earnings/distribute",
    response_model=OkResult,
    summary="Settle accumulated earnings to the owner and network operator",
    responses={
        **_ERRORS,
        502: {"model": ErrResult, "description": "Settlement rail rejected a transfer"},
    },
)
@limiter.limit(RATE_LIMIT)
async def distribute_earnings(
    request: Request,
    vehicle_id: int,
    caller: str = Depends(get_caller),
    engine: TransitionEngine = Depends(get_engine),
):
    return OkResult(value=await engine.distribute_earnings(caller, vehicle_id))
