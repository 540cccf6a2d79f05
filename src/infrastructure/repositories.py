"""
Repository Pattern -- abstracts DB access so domain logic stays DB-agnostic.

Each repository receives an ``AsyncSession`` (unit-of-work) and exposes
ledger-relevant queries only.  The ``*_for_update`` variants lock the rows
they return for the rest of the enclosing transaction.
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from .models import (
    LedgerCounterModel,
    MaintenanceScheduleModel,
    RideModel,
    VehicleModel,
)
from src.domain.entities import MaintenanceSchedule, Ride, Vehicle
from src.domain.enums import Counter, RideStatus, VehicleStatus


class VehicleRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, vehicle: VehicleModel) -> VehicleModel:
        self.session.add(vehicle)
        await self.session.flush()
        return vehicle

    async def get_by_id(self, vehicle_id: int) -> Optional[VehicleModel]:
        return await self.session.get(VehicleModel, vehicle_id)

    async def get_for_update(self, vehicle_id: int) -> Optional[VehicleModel]:
        return await self.session.get(
            VehicleModel, vehicle_id, with_for_update=True
        )

    async def first_available_for_update(self) -> Optional[VehicleModel]:
        """Lowest-id AVAILABLE vehicle, locked.  Deterministic first fit."""
        result = await self.session.execute(
            select(VehicleModel)
            .where(VehicleModel.status == VehicleStatus.AVAILABLE)
            .order_by(VehicleModel.id)
            .limit(1)
            .with_for_update()
        )
        return result.scalar_one_or_none()


class RideRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, ride: RideModel) -> RideModel:
        self.session.add(ride)
        await self.session.flush()
        return ride

    async def get_by_id(self, ride_id: int) -> Optional[RideModel]:
        return await self.session.get(RideModel, ride_id)

    async def get_for_update(self, ride_id: int) -> Optional[RideModel]:
        return await self.session.get(RideModel, ride_id, with_for_update=True)

    async def get_by_idempotency_key(
        self, passenger: str, key: str
    ) -> Optional[RideModel]:
        result = await self.session.execute(
            select(RideModel).where(
                RideModel.passenger == passenger,
                RideModel.idempotency_key == key,
            )
        )
        return result.scalar_one_or_none()


class MaintenanceScheduleRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(
        self, schedule: MaintenanceScheduleModel
    ) -> MaintenanceScheduleModel:
        self.session.add(schedule)
        await self.session.flush()
        return schedule

    async def get_by_vehicle_id(
        self, vehicle_id: int
    ) -> Optional[MaintenanceScheduleModel]:
        return await self.session.get(MaintenanceScheduleModel, vehicle_id)

    async def get_for_update(
        self, vehicle_id: int
    ) -> Optional[MaintenanceScheduleModel]:
        return await self.session.get(
            MaintenanceScheduleModel, vehicle_id, with_for_update=True
        )


class LedgerCounterRepository:
    """Store-owned id sequences.

    ``next_id`` must run in the same transaction as the insert it numbers;
    a rollback returns the counter to its previous value.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def next_id(self, counter: Counter) -> int:
        row = await self.session.get(
            LedgerCounterModel, counter.value, with_for_update=True
        )
        if row is None:
            row = LedgerCounterModel(name=counter.value, value=0)
            self.session.add(row)
        row.value += 1
        await self.session.flush()
        return row.value

    async def current(self, counter: Counter) -> int:
        row = await self.session.get(LedgerCounterModel, counter.value)
        return row.value if row else 0


# ── Snapshots ─────────────────────────────────────────────────────────


def vehicle_entity(model: VehicleModel) -> Vehicle:
    return Vehicle(
        id=model.id,
        owner=model.owner,
        status=VehicleStatus(model.status),
        mileage=model.mileage,
        last_maintenance_height=model.last_maintenance_height,
        earnings=model.earnings,
    )


def ride_entity(model: RideModel) -> Ride:
    return Ride(
        id=model.id,
        passenger=model.passenger,
        vehicle_id=model.vehicle_id,
        start_location=model.start_location,
        end_location=model.end_location,
        distance=model.distance,
        fare=model.fare,
        status=RideStatus(model.status),
        idempotency_key=model.idempotency_key,
    )


def schedule_entity(model: MaintenanceScheduleModel) -> MaintenanceSchedule:
    return MaintenanceSchedule(
        vehicle_id=model.vehicle_id,
        next_maintenance_height=model.next_maintenance_height,
    )
