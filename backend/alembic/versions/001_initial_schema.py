"""Initial schema: users, venues, reservations, unavailable_dates, favorites.

Revision ID: 001
Revises: None
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

HOLDING_STATUSES_SQL = "status IN ('pending', 'accepted', 'confirmed')"


def _timestamps() -> list:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    ]


def upgrade() -> None:
    # Users (mirrored from the auth service: identity + role only)
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("username", sa.String(100), nullable=False),
        sa.Column("role", sa.String(20), nullable=False, server_default=sa.text("'guest'")),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        *_timestamps(),
        sa.CheckConstraint("role IN ('client', 'guest', 'admin')", name="user_role"),
    )
    op.create_index("ix_users_id", "users", ["id"])
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_username", "users", ["username"], unique=True)

    # Venues
    op.create_table(
        "venues",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("owner_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.String(2000), nullable=True),
        sa.Column("price", sa.Numeric(10, 2), nullable=False, server_default=sa.text("0")),
        sa.Column("capacity", sa.Integer(), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default=sa.text("'open'")),
        sa.Column("latitude", sa.Float(), nullable=True),
        sa.Column("longitude", sa.Float(), nullable=True),
        *_timestamps(),
        sa.CheckConstraint("status IN ('open', 'closed')", name="venue_status"),
        sa.CheckConstraint("price >= 0", name="check_venue_price_non_negative"),
    )
    op.create_index("ix_venues_id", "venues", ["id"])
    op.create_index("ix_venues_owner_id", "venues", ["owner_id"])
    op.create_index("ix_venues_owner_status", "venues", ["owner_id", "status"])

    # Reservations
    op.create_table(
        "reservations",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("venue_id", sa.Integer(), sa.ForeignKey("venues.id"), nullable=False),
        sa.Column("requester_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("event_date", sa.Date(), nullable=False),
        sa.Column("status", sa.String(32), nullable=False, server_default=sa.text("'pending'")),
        *_timestamps(),
        sa.CheckConstraint(
            "status IN ('pending', 'accepted', 'confirmed', 'rejected', 'cancelled', "
            "'cancellation_requested', 'completed')",
            name="reservation_status",
        ),
    )
    op.create_index("ix_reservations_id", "reservations", ["id"])
    op.create_index("ix_reservations_venue_id", "reservations", ["venue_id"])
    op.create_index("ix_reservations_requester_id", "reservations", ["requester_id"])
    op.create_index("ix_reservations_venue_status", "reservations", ["venue_id", "status"])
    op.create_index("ix_reservations_created_at", "reservations", ["created_at"])
    # DOUBLE-BOOKING GUARD: at most one holding reservation per venue and date.
    # Rejected/cancelled/completed rows are history and may repeat freely.
    # A concurrent insert that slips past the application checks fails here.
    op.create_index(
        "ux_reservations_holding_slot",
        "reservations",
        ["venue_id", "event_date"],
        unique=True,
        postgresql_where=sa.text(HOLDING_STATUSES_SQL),
        sqlite_where=sa.text(HOLDING_STATUSES_SQL),
    )

    # Owner blackout dates
    op.create_table(
        "unavailable_dates",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("venue_id", sa.Integer(), sa.ForeignKey("venues.id", ondelete="CASCADE"), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.UniqueConstraint("venue_id", "date", name="uq_unavailable_venue_date"),
    )
    op.create_index("ix_unavailable_dates_venue_id", "unavailable_dates", ["venue_id"])

    # Favorites
    op.create_table(
        "favorites",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("venue_id", sa.Integer(), sa.ForeignKey("venues.id", ondelete="CASCADE"), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("user_id", "venue_id", name="uq_favorite_user_venue"),
    )
    op.create_index("ix_favorites_user_id", "favorites", ["user_id"])


def downgrade() -> None:
    op.drop_table("favorites")
    op.drop_table("unavailable_dates")
    op.drop_index("ux_reservations_holding_slot", table_name="reservations")
    op.drop_table("reservations")
    op.drop_table("venues")
    op.drop_table("users")
