"""
Seed script -- populates the ledger with sample data for reviewers.

Run after migrations:
    python seed.py

Creates (through the transition engine, so every invariant holds):
  - 6 vehicles spread across 3 owners
  - 3 rides, 2 of them completed
  - a funded contract account so earnings can be settled
"""

import asyncio

from sqlalchemy import text

from src.api.dependencies import build_transition_engine
from src.config import settings
from src.infrastructure.database import async_session_factory, engine
from src.infrastructure.redis_client import close_redis

OWNERS = [
    "ST1PQHQKV0RJXZFY1DGX8MNSNYVE3VGZJSRTPGZGM",
    "ST2JHG361ZXG51QTKY2NQCVBPPRRE2KZB1HR05NNC",
    "ST2NEB84ASENDXKYGJPQW86YXQCEFEX2ZQPG87ND",
]

PASSENGERS = [
    "ST2CY5V39NHDPWSXMW9QDT3HC3GD6Q6XX4CFRK9AG",
    "ST3AM1A56AK2C1XAFJ4115ZSV26EB49BVQ10MGCS0",
    "ST3PF13W7Z0RRM42A8VZRVFQ75SV1K26RXEP8YGKJ",
]

RIDES = [
    ("Airport Terminal 2", "Andheri Station", 12),
    ("Bandra Kurla Complex", "Powai Lake", 9),
    ("Colaba Causeway", "Marine Drive", 4),
]

CONTRACT_FUNDING = 1_000_000


async def seed():
    async with async_session_factory() as session:
        # Check if already seeded
        result = await session.execute(text("SELECT count(*) FROM vehicles"))
        if result.scalar() > 0:
            print("Database already seeded. Skipping.")
            return

    ledger = build_transition_engine()

    # ── Vehicles ──────────────────────────────────────────────────────
    vehicle_ids = []
    for i in range(6):
        vehicle_ids.append(await ledger.register_vehicle(OWNERS[i % len(OWNERS)]))
    print(f"  Registered {len(vehicle_ids)} vehicles")

    # ── Rides ─────────────────────────────────────────────────────────
    ride_ids = []
    for passenger, (start, end, distance) in zip(PASSENGERS, RIDES):
        ride_ids.append(await ledger.request_ride(passenger, start, end, distance))
    print(f"  Requested {len(ride_ids)} rides")

    # Vehicles are matched lowest id first, so ride N runs on vehicle N.
    for ride_id in ride_ids[:2]:
        ride = await ledger.get_ride(ride_id)
        vehicle = await ledger.get_vehicle(ride.vehicle_id)
        await ledger.complete_ride(vehicle.owner, ride_id)
    print("  Completed 2 rides (1 still in progress)")

    # ── Settlement ────────────────────────────────────────────────────
    await ledger.fund_account(settings.contract_account, CONTRACT_FUNDING)
    print(f"  Funded {settings.contract_account} with {CONTRACT_FUNDING}")

    print("\nSeed complete!")


async def main():
    print("Seeding ledger...")
    await seed()
    await engine.dispose()
    await close_redis()


if __name__ == "__main__":
    asyncio.run(main())
