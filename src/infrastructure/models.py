"""
SQLAlchemy ORM models  (the ledger store).

Tables
------
* ``vehicles``               -- registered vehicles, owner and running totals
* ``rides``                  -- ride requests bound to one vehicle
* ``maintenance_schedules``  -- one row per vehicle, next due height
* ``ledger_counters``        -- monotonic id sequences (vehicle, ride)
* ``account_balances``       -- settlement rail balances
* ``settlement_transfers``   -- append-only journal of settled transfers

Vehicle and ride ids come from ``ledger_counters`` rather than database
autoincrement, so an id is consumed only by a committed insert.

Indexes
-------
* **B-Tree** on ``(status, id)`` for the lowest-id available vehicle scan.
* **B-Tree** on ``owner``, ``(vehicle_id, status)`` and the per-passenger
  idempotency key.
"""

from sqlalchemy import (
    BigInteger,
    CheckConstraint,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
    func,
)

from .database import Base
from src.domain.enums import RideStatus, VehicleStatus


class VehicleModel(Base):
    __tablename__ = "vehicles"

    id = Column(Integer, primary_key=True, autoincrement=False)
    owner = Column(String(128), nullable=False)
    status = Column(
        Enum(VehicleStatus), default=VehicleStatus.AVAILABLE, nullable=False
    )
    mileage = Column(BigInteger, default=0, nullable=False)
    last_maintenance_height = Column(BigInteger, nullable=False)
    earnings = Column(BigInteger, default=0, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    __table_args__ = (
        CheckConstraint("mileage >= 0", name="ck_vehicles_mileage"),
        CheckConstraint("earnings >= 0", name="ck_vehicles_earnings"),
        Index("idx_vehicles_status_id", "status", "id"),
        Index("idx_vehicles_owner", "owner"),
    )


class RideModel(Base):
    __tablename__ = "rides"

    id = Column(Integer, primary_key=True, autoincrement=False)
    passenger = Column(String(128), nullable=False)
    vehicle_id = Column(Integer, ForeignKey("vehicles.id"), nullable=False)
    start_location = Column(String(50), nullable=False)
    end_location = Column(String(50), nullable=False)
    distance = Column(BigInteger, nullable=False)
    fare = Column(BigInteger, nullable=False)
    status = Column(
        Enum(RideStatus), default=RideStatus.IN_PROGRESS, nullable=False
    )
    idempotency_key = Column(String(64), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    __table_args__ = (
        UniqueConstraint(
            "passenger", "idempotency_key", name="uq_rides_passenger_idempotency"
        ),
        Index("idx_rides_vehicle_status", "vehicle_id", "status"),
        Index("idx_rides_passenger", "passenger"),
    )


class MaintenanceScheduleModel(Base):
    __tablename__ = "maintenance_schedules"

    vehicle_id = Column(
        Integer, ForeignKey("vehicles.id"), primary_key=True, autoincrement=False
    )
    next_maintenance_height = Column(BigInteger, nullable=False)

    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )


class LedgerCounterModel(Base):
    __tablename__ = "ledger_counters"

    name = Column(String(32), primary_key=True)
    value = Column(Integer, default=0, nullable=False)


class AccountBalanceModel(Base):
    __tablename__ = "account_balances"

    account = Column(String(128), primary_key=True)
    balance = Column(BigInteger, default=0, nullable=False)

    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    __table_args__ = (
        CheckConstraint("balance >= 0", name="ck_account_balances_balance"),
    )


class SettlementTransferModel(Base):
    __tablename__ = "settlement_transfers"

    id = Column(Integer, primary_key=True, autoincrement=True)
    sender = Column(String(128), nullable=False)
    recipient = Column(String(128), nullable=False)
    amount = Column(BigInteger, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        Index("idx_settlement_transfers_recipient", "recipient"),
    )
