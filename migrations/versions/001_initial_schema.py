"""Initial ledger schema: vehicles, rides, maintenance schedules, counters,
settlement accounts and transfer journal.

Revision ID: 001
Create Date: 2026-10-18
"""

from alembic import op
import sqlalchemy as sa


revision = "001"
down_revision = None
branch_labels = None
depends_on = None

vehicle_status = sa.Enum("AVAILABLE", "OCCUPIED", "MAINTENANCE", name="vehiclestatus")
ride_status = sa.Enum("IN_PROGRESS", "COMPLETED", name="ridestatus")


def upgrade() -> None:
    # ── vehicles ──────────────────────────────────────────────────────
    op.create_table(
        "vehicles",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=False),
        sa.Column("owner", sa.String(128), nullable=False),
        sa.Column("status", vehicle_status, nullable=False),
        sa.Column("mileage", sa.BigInteger, nullable=False, server_default="0"),
        sa.Column("last_maintenance_height", sa.BigInteger, nullable=False),
        sa.Column("earnings", sa.BigInteger, nullable=False, server_default="0"),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
        sa.CheckConstraint("mileage >= 0", name="ck_vehicles_mileage"),
        sa.CheckConstraint("earnings >= 0", name="ck_vehicles_earnings"),
    )
    op.create_index("idx_vehicles_status_id", "vehicles", ["status", "id"])
    op.create_index("idx_vehicles_owner", "vehicles", ["owner"])

    # ── rides ─────────────────────────────────────────────────────────
    op.create_table(
        "rides",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=False),
        sa.Column("passenger", sa.String(128), nullable=False),
        sa.Column(
            "vehicle_id", sa.Integer, sa.ForeignKey("vehicles.id"), nullable=False
        ),
        sa.Column("start_location", sa.String(50), nullable=False),
        sa.Column("end_location", sa.String(50), nullable=False),
        sa.Column("distance", sa.BigInteger, nullable=False),
        sa.Column("fare", sa.BigInteger, nullable=False),
        sa.Column("status", ride_status, nullable=False),
        sa.Column("idempotency_key", sa.String(64), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
        sa.UniqueConstraint(
            "passenger", "idempotency_key", name="uq_rides_passenger_idempotency"
        ),
    )
    op.create_index("idx_rides_vehicle_status", "rides", ["vehicle_id", "status"])
    op.create_index("idx_rides_passenger", "rides", ["passenger"])

    # ── maintenance_schedules ─────────────────────────────────────────
    op.create_table(
        "maintenance_schedules",
        sa.Column(
            "vehicle_id",
            sa.Integer,
            sa.ForeignKey("vehicles.id"),
            primary_key=True,
            autoincrement=False,
        ),
        sa.Column("next_maintenance_height", sa.BigInteger, nullable=False),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
    )

    # ── ledger_counters ───────────────────────────────────────────────
    op.create_table(
        "ledger_counters",
        sa.Column("name", sa.String(32), primary_key=True),
        sa.Column("value", sa.Integer, nullable=False, server_default="0"),
    )

    # ── account_balances ──────────────────────────────────────────────
    op.create_table(
        "account_balances",
        sa.Column("account", sa.String(128), primary_key=True),
        sa.Column("balance", sa.BigInteger, nullable=False, server_default="0"),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
        sa.CheckConstraint("balance >= 0", name="ck_account_balances_balance"),
    )

    # ── settlement_transfers ──────────────────────────────────────────
    op.create_table(
        "settlement_transfers",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("sender", sa.String(128), nullable=False),
        sa.Column("recipient", sa.String(128), nullable=False),
        sa.Column("amount", sa.BigInteger, nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
    )
    op.create_index(
        "idx_settlement_transfers_recipient", "settlement_transfers", ["recipient"]
    )


def downgrade() -> None:
    op.drop_table("settlement_transfers")
    op.drop_table("account_balances")
    op.drop_table("ledger_counters")
    op.drop_table("maintenance_schedules")
    op.drop_table("rides")
    op.drop_table("vehicles")
    ride_status.drop(op.get_bind(), checkfirst=True)
    vehicle_status.drop(op.get_bind(), checkfirst=True)
