"""
Domain entities returned by ledger read queries.

These are frozen snapshots copied out of the store after the reading
transaction has finished, so callers never hold a live row that a later
transition could change underneath them.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .enums import RideStatus, VehicleStatus

LOCATION_MAX_LENGTH = 50


@dataclass(frozen=True)
class Vehicle:
    id: int
    owner: str
    status: VehicleStatus = VehicleStatus.AVAILABLE
    mileage: int = 0
    last_maintenance_height: int = 0
    earnings: int = 0

    @property
    def is_available(self) -> bool:
        return self.status == VehicleStatus.AVAILABLE


@dataclass(frozen=True)
class Ride:
    id: int
    passenger: str
    vehicle_id: int
    start_location: str
    end_location: str
    distance: int
    fare: int
    status: RideStatus = RideStatus.IN_PROGRESS
    idempotency_key: Optional[str] = None

    @property
    def is_in_progress(self) -> bool:
        return self.status == RideStatus.IN_PROGRESS


@dataclass(frozen=True)
class MaintenanceSchedule:
    vehicle_id: int
    next_maintenance_height: int

    def is_due(self, height: int) -> bool:
        return height >= self.next_maintenance_height
