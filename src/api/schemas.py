"""Pydantic request / response schemas for the REST API."""

from __future__ import annotations

from typing import Literal, Optional, Union

from pydantic import BaseModel, Field

from src.domain.entities import LOCATION_MAX_LENGTH
from src.domain.enums import RideStatus, VehicleStatus


# ── Requests ──────────────────────────────────────────────────────────


class RideCreateRequest(BaseModel):
    start_location: str = Field(..., max_length=LOCATION_MAX_LENGTH)
    end_location: str = Field(..., max_length=LOCATION_MAX_LENGTH)
    distance: int
    idempotency_key: Optional[str] = Field(
        None,
        min_length=1,
        max_length=64,
        description="Client-generated UUID; replays return the original ride.",
    )


class HeightUpdateRequest(BaseModel):
    height: int = Field(..., ge=0)


class DepositRequest(BaseModel):
    amount: int = Field(..., gt=0)


# ── Responses ─────────────────────────────────────────────────────────


class OkResult(BaseModel):
    type: Literal["ok"] = "ok"
    value: Union[int, bool]


class ErrResult(BaseModel):
    type: Literal["err"] = "err"
    value: str
    detail: str


class VehicleResponse(BaseModel):
    id: int
    owner: str
    status: VehicleStatus
    mileage: int
    last_maintenance_height: int
    earnings: int

    model_config = {"from_attributes": True}


class RideResponse(BaseModel):
    id: int
    passenger: str
    vehicle_id: int
    start_location: str
    end_location: str
    distance: int
    fare: int
    status: RideStatus

    model_config = {"from_attributes": True}


class MaintenanceScheduleResponse(BaseModel):
    vehicle_id: int
    next_maintenance_height: int

    model_config = {"from_attributes": True}


class LedgerStatsResponse(BaseModel):
    height: int
    last_vehicle_id: int
    last_ride_id: int


class AccountResponse(BaseModel):
    account: str
    balance: int


class HealthResponse(BaseModel):
    status: str = "ok"
