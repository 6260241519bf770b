"""create_tour_pricing_tables

Revision ID: 3f9c2a71b8d4
Revises:
Create Date: 2026-10-18 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f9c2a71b8d4'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.text("now()"), nullable=False),
    ]


def _money(name: str, nullable: bool = True, default: str | None = None) -> sa.Column:
    return sa.Column(
        name,
        sa.Numeric(12, 2),
        nullable=nullable,
        server_default=sa.text(default) if default is not None else None,
    )


def upgrade() -> None:
    # Step 1: Tours
    op.create_table(
        "tours",
        sa.Column("id", sa.UUID(), nullable=False),
        sa.Column("tour_code", sa.String(50), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("duration_days", sa.Integer(), nullable=False),
        sa.Column("duration_nights", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(50), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_tours_tour_code", "tours", ["tour_code"], unique=True)

    # Step 2: Periods, seats bounded by capacity
    op.create_table(
        "periods",
        sa.Column("id", sa.UUID(), nullable=False),
        sa.Column("tour_id", sa.UUID(), nullable=False),
        sa.Column("period_code", sa.String(50), nullable=True),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("capacity", sa.Integer(), nullable=False),
        sa.Column("booked", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(50), nullable=False),
        sa.Column("is_visible", sa.Boolean(), nullable=False),
        sa.Column("sale_status", sa.String(50), nullable=False),
        *_timestamps(),
        sa.CheckConstraint("booked >= 0 AND booked <= capacity", name="ck_periods_booked_within_capacity"),
        sa.ForeignKeyConstraint(["tour_id"], ["tours.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_periods_tour_id", "periods", ["tour_id"])
    op.create_index("ix_periods_status", "periods", ["status"])
    op.create_index("ix_periods_start_date", "periods", ["start_date"])

    # Step 3: One offer per period
    op.create_table(
        "period_offers",
        sa.Column("id", sa.UUID(), nullable=False),
        sa.Column("period_id", sa.UUID(), nullable=False),
        sa.Column("currency", sa.String(3), nullable=False),
        _money("price_adult"),
        _money("discount_adult", nullable=False, default="0"),
        _money("price_single"),
        _money("discount_single", nullable=False, default="0"),
        _money("price_child_bed"),
        _money("discount_child_bed", nullable=False, default="0"),
        _money("price_child_nobed"),
        _money("discount_child_nobed", nullable=False, default="0"),
        _money("price_infant"),
        _money("net_price_adult"),
        _money("net_price_single"),
        _money("deposit"),
        sa.Column("cancellation_policy", sa.Text(), nullable=True),
        sa.Column("promo_name", sa.String(255), nullable=True),
        sa.Column("promo_start_date", sa.Date(), nullable=True),
        sa.Column("promo_end_date", sa.Date(), nullable=True),
        sa.Column("promo_quota", sa.Integer(), nullable=True),
        sa.Column("promo_used", sa.Integer(), server_default=sa.text("0"), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["period_id"], ["periods.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("period_id"),
    )

    # Step 4: Bookings with their price snapshot
    op.create_table(
        "bookings",
        sa.Column("id", sa.UUID(), nullable=False),
        sa.Column("booking_code", sa.String(32), nullable=False),
        sa.Column("tour_id", sa.UUID(), nullable=False),
        sa.Column("period_id", sa.UUID(), nullable=False),
        sa.Column("first_name", sa.String(100), nullable=False),
        sa.Column("last_name", sa.String(100), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("phone", sa.String(50), nullable=False),
        *[
            sa.Column(name, sa.Integer(), nullable=False)
            for name in (
                "qty_adult",
                "qty_adult_single",
                "qty_child_bed",
                "qty_child_nobed",
                "qty_infant",
                "qty_triple",
                "qty_twin",
                "qty_double",
            )
        ],
        *[
            _money(name, nullable=False, default="0")
            for name in ("price_adult", "price_single", "price_child_bed", "price_child_nobed", "price_infant")
        ],
        _money("total_amount", nullable=False),
        sa.Column("sale_code", sa.String(50), nullable=True),
        sa.Column("special_request", sa.Text(), nullable=True),
        sa.Column("admin_note", sa.Text(), nullable=True),
        sa.Column("status", sa.String(50), nullable=False),
        sa.Column("source", sa.String(50), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["tour_id"], ["tours.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["period_id"], ["periods.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("booking_code"),
    )
    op.create_index("ix_bookings_tour_id", "bookings", ["tour_id"])
    op.create_index("ix_bookings_period_id", "bookings", ["period_id"])
    op.create_index("ix_bookings_status", "bookings", ["status"])
    op.create_index("ix_bookings_created_at", "bookings", ["created_at"])


def downgrade() -> None:
    op.drop_table("bookings")
    op.drop_table("period_offers")
    op.drop_table("periods")
    op.drop_index("ix_tours_tour_code", table_name="tours")
    op.drop_table("tours")
