"""
Transition Engine
=================

Implements every ledger mutation as one atomic transition unit.

Transition unit
---------------
1. Take the ledger lock (in-process ``asyncio.Lock`` by default, a Redis
   ``DistributedLock`` when several API processes share the store).
2. Open a session and ``BEGIN``.
3. Read and lock the rows involved, check preconditions in a fixed order,
   raising the first ``LedgerError`` that applies.
4. Mutate fields, bump counters, call the settlement rail.
5. ``COMMIT``.  Any exception in 3-4 rolls the whole unit back.

Ids are taken from the store-owned counters only after every
precondition has passed, so a rejected operation never consumes one.

Check order per operation
-------------------------
* complete_ride:         ride exists, vehicle exists, ride in progress, owner
* schedule_maintenance:  vehicle & schedule exist, owner, maintenance due
* complete_maintenance:  vehicle exists, owner, status MAINTENANCE
* distribute_earnings:   vehicle exists, owner, transfers succeed
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from typing import AsyncIterator, Callable, Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.config import settings
from src.domain.authorization import authorize
from src.domain.entities import (
    LOCATION_MAX_LENGTH,
    MaintenanceSchedule,
    Ride,
    Vehicle,
)
from src.domain.enums import Counter, RideStatus, VehicleStatus, can_transition
from src.domain.errors import (
    InvalidArgumentError,
    InvalidStateError,
    LedgerError,
    NotFoundError,
    UnauthorizedError,
)
from src.domain.pricing import FlatRatePricing, PricingStrategy, split_earnings
from src.infrastructure.height import HeightSource
from src.infrastructure.models import (
    MaintenanceScheduleModel,
    RideModel,
    VehicleModel,
)
from src.infrastructure.repositories import (
    LedgerCounterRepository,
    MaintenanceScheduleRepository,
    RideRepository,
    VehicleRepository,
    ride_entity,
    schedule_entity,
    vehicle_entity,
)
from src.infrastructure.settlement import SettlementAdapter

logger = logging.getLogger(__name__)

LockFactory = Callable[[], AbstractAsyncContextManager]


class TransitionEngine:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        settlement: SettlementAdapter,
        heights: HeightSource,
        *,
        lock_factory: Optional[LockFactory] = None,
        pricing: Optional[PricingStrategy] = None,
        maintenance_interval: int = settings.maintenance_interval,
        owner_share_percent: int = settings.owner_share_percent,
        contract_account: str = settings.contract_account,
        network_operator: str = settings.network_operator,
        require_positive_distance: bool = settings.require_positive_distance,
        allow_maintenance_while_occupied: bool = settings.allow_maintenance_while_occupied,
    ):
        self.session_factory = session_factory
        self.settlement = settlement
        self.heights = heights
        self.pricing = pricing or FlatRatePricing(settings.fare_rate)
        self.maintenance_interval = maintenance_interval
        self.owner_share_percent = owner_share_percent
        self.contract_account = contract_account
        self.network_operator = network_operator
        self.require_positive_distance = require_positive_distance
        self.allow_maintenance_while_occupied = allow_maintenance_while_occupied

        self._local_lock = asyncio.Lock()
        self._lock_factory: LockFactory = lock_factory or (lambda: self._local_lock)

    # ── Transition unit ───────────────────────────────────────────────

    @asynccontextmanager
    async def _transition(self, operation: str) -> AsyncIterator[AsyncSession]:
        async with self._lock_factory():
            async with self.session_factory() as session:
                try:
                    async with session.begin():
                        yield session
                except LedgerError as exc:
                    logger.info("%s rejected [%s]: %s", operation, exc.code, exc)
                    raise
                except Exception:
                    logger.exception("Error in %s", operation)
                    raise

    # ── Vehicles ──────────────────────────────────────────────────────

    async def register_vehicle(self, caller: str) -> int:
        async with self._transition("register_vehicle") as session:
            height = await self.heights.current_height()
            vehicle_id = await LedgerCounterRepository(session).next_id(
                Counter.VEHICLE
            )
            await VehicleRepository(session).create(
                VehicleModel(
                    id=vehicle_id,
                    owner=caller,
                    status=VehicleStatus.AVAILABLE,
                    mileage=0,
                    last_maintenance_height=height,
                    earnings=0,
                )
            )
            await MaintenanceScheduleRepository(session).create(
                MaintenanceScheduleModel(
                    vehicle_id=vehicle_id,
                    next_maintenance_height=height + self.maintenance_interval,
                )
            )

        logger.info("Vehicle %d registered by %s at height %d", vehicle_id, caller, height)
        return vehicle_id

    async def schedule_maintenance(self, caller: str, vehicle_id: int) -> bool:
        async with self._transition("schedule_maintenance") as session:
            vehicle = await VehicleRepository(session).get_for_update(vehicle_id)
            schedule = await MaintenanceScheduleRepository(session).get_for_update(
                vehicle_id
            )
            if vehicle is None or schedule is None:
                raise NotFoundError(f"Vehicle {vehicle_id} not found")
            self._require_owner(caller, vehicle)

            height = await self.heights.current_height()
            if height < schedule.next_maintenance_height:
                raise InvalidStateError(
                    f"Maintenance for vehicle {vehicle_id} not due until height "
                    f"{schedule.next_maintenance_height} (now {height})"
                )
            if (
                not self.allow_maintenance_while_occupied
                and vehicle.status == VehicleStatus.OCCUPIED
            ):
                raise InvalidStateError(f"Vehicle {vehicle_id} is on a ride")

            vehicle.status = VehicleStatus.MAINTENANCE
            vehicle.last_maintenance_height = height
            schedule.next_maintenance_height = height + self.maintenance_interval

        logger.info("Vehicle %d entered maintenance at height %d", vehicle_id, height)
        return True

    async def complete_maintenance(self, caller: str, vehicle_id: int) -> bool:
        async with self._transition("complete_maintenance") as session:
            vehicle = await VehicleRepository(session).get_for_update(vehicle_id)
            if vehicle is None:
                raise NotFoundError(f"Vehicle {vehicle_id} not found")
            self._require_owner(caller, vehicle)
            if vehicle.status != VehicleStatus.MAINTENANCE:
                raise InvalidStateError(
                    f"Vehicle {vehicle_id} is {VehicleStatus(vehicle.status).value}, not in maintenance"
                )

            vehicle.status = VehicleStatus.AVAILABLE

        logger.info("Vehicle %d back in service", vehicle_id)
        return True

    async def distribute_earnings(self, caller: str, vehicle_id: int) -> bool:
        async with self._transition("distribute_earnings") as session:
            vehicle = await VehicleRepository(session).get_for_update(vehicle_id)
            if vehicle is None:
                raise NotFoundError(f"Vehicle {vehicle_id} not found")
            self._require_owner(caller, vehicle)

            split = split_earnings(vehicle.earnings, self.owner_share_percent)
            await self.settlement.transfer(
                session, split.owner_share, self.contract_account, vehicle.owner
            )
            await self.settlement.transfer(
                session, split.network_share, self.contract_account, self.network_operator
            )
            vehicle.earnings = 0

        logger.info(
            "Vehicle %d settled %d (owner %d, network %d)",
            vehicle_id, split.total, split.owner_share, split.network_share,
        )
        return True

    # ── Rides ─────────────────────────────────────────────────────────

    async def request_ride(
        self,
        caller: str,
        start_location: str,
        end_location: str,
        distance: int,
        idempotency_key: Optional[str] = None,
    ) -> int:
        self._validate_ride_request(start_location, end_location, distance)

        async with self._transition("request_ride") as session:
            ride_repo = RideRepository(session)

            # ── Replay guard ──────────────────────────────────────────
            if idempotency_key is not None:
                existing = await ride_repo.get_by_idempotency_key(
                    caller, idempotency_key
                )
                if existing:
                    logger.info(
                        "Ride request replayed (key=%s) -> ride %d",
                        idempotency_key, existing.id,
                    )
                    return existing.id

            vehicle = await VehicleRepository(session).first_available_for_update()
            if vehicle is None:
                raise NotFoundError("No available vehicle")

            ride_id = await LedgerCounterRepository(session).next_id(Counter.RIDE)
            fare = self.pricing.calculate(distance)
            await ride_repo.create(
                RideModel(
                    id=ride_id,
                    passenger=caller,
                    vehicle_id=vehicle.id,
                    start_location=start_location,
                    end_location=end_location,
                    distance=distance,
                    fare=fare,
                    status=RideStatus.IN_PROGRESS,
                    idempotency_key=idempotency_key,
                )
            )
            vehicle.status = VehicleStatus.OCCUPIED

        logger.info(
            "Ride %d: vehicle %d matched for %s (fare %d)",
            ride_id, vehicle.id, caller, fare,
        )
        return ride_id

    async def complete_ride(self, caller: str, ride_id: int) -> bool:
        async with self._transition("complete_ride") as session:
            ride = await RideRepository(session).get_for_update(ride_id)
            if ride is None:
                raise NotFoundError(f"Ride {ride_id} not found")
            vehicle = await VehicleRepository(session).get_for_update(ride.vehicle_id)
            if vehicle is None:
                raise NotFoundError(f"Vehicle {ride.vehicle_id} not found")
            if not can_transition(ride.status, RideStatus.COMPLETED):
                raise InvalidStateError(
                    f"Ride {ride_id} is {RideStatus(ride.status).value}"
                )
            self._require_owner(caller, vehicle)

            ride.status = RideStatus.COMPLETED
            vehicle.status = VehicleStatus.AVAILABLE
            vehicle.mileage += ride.distance
            vehicle.earnings += ride.fare

        logger.info("Ride %d completed; vehicle %d available", ride_id, ride.vehicle_id)
        return True

    # ── Read-only queries ─────────────────────────────────────────────

    async def get_vehicle(self, vehicle_id: int) -> Optional[Vehicle]:
        async with self.session_factory() as session:
            vehicle = await VehicleRepository(session).get_by_id(vehicle_id)
            return vehicle_entity(vehicle) if vehicle else None

    async def get_ride(self, ride_id: int) -> Optional[Ride]:
        async with self.session_factory() as session:
            ride = await RideRepository(session).get_by_id(ride_id)
            return ride_entity(ride) if ride else None

    async def get_maintenance_schedule(
        self, vehicle_id: int
    ) -> Optional[MaintenanceSchedule]:
        async with self.session_factory() as session:
            schedule = await MaintenanceScheduleRepository(session).get_by_vehicle_id(
                vehicle_id
            )
            return schedule_entity(schedule) if schedule else None

    async def last_id(self, counter: Counter) -> int:
        async with self.session_factory() as session:
            return await LedgerCounterRepository(session).current(counter)

    # ── Settlement accounts ───────────────────────────────────────────

    async def fund_account(self, account: str, amount: int) -> int:
        async with self._transition("fund_account") as session:
            balance = await self.settlement.deposit(session, account, amount)
        logger.info("Account %s funded with %d (balance %d)", account, amount, balance)
        return balance

    async def account_balance(self, account: str) -> int:
        async with self.session_factory() as session:
            return await self.settlement.balance(session, account)

    # ── Helpers ───────────────────────────────────────────────────────

    @staticmethod
    def _require_owner(caller: str, vehicle: VehicleModel) -> None:
        if not authorize(caller, vehicle):
            raise UnauthorizedError(f"{caller} does not own vehicle {vehicle.id}")

    def _validate_ride_request(
        self, start_location: str, end_location: str, distance: int
    ) -> None:
        for name, value in (("start", start_location), ("end", end_location)):
            if len(value) > LOCATION_MAX_LENGTH:
                raise InvalidArgumentError(
                    f"{name} location exceeds {LOCATION_MAX_LENGTH} characters"
                )
        if distance < 0:
            raise InvalidArgumentError(f"Distance must not be negative, got {distance}")
        if self.require_positive_distance and distance == 0:
            raise InvalidArgumentError("Distance must be positive, got 0")
