"""Booking model — a priced snapshot of travelers booked on a tour period."""

import uuid
from decimal import Decimal

from sqlalchemy import ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tourdesk.database import Base, Money, TimestampMixin, UUIDPrimaryKeyMixin


class Booking(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A reservation on one period.

    Quantities, resolved unit prices and the total are stored as they were at
    submit time; later offer edits do not change an existing booking.
    """

    __tablename__ = "bookings"

    booking_code: Mapped[str] = mapped_column(String(32), unique=True, nullable=False)
    tour_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("tours.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    period_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("periods.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # Customer
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    phone: Mapped[str] = mapped_column(String(50), nullable=False)

    # Quantities
    qty_adult: Mapped[int] = mapped_column(Integer, default=1)
    qty_adult_single: Mapped[int] = mapped_column(Integer, default=0)
    qty_child_bed: Mapped[int] = mapped_column(Integer, default=0)
    qty_child_nobed: Mapped[int] = mapped_column(Integer, default=0)
    qty_infant: Mapped[int] = mapped_column(Integer, default=0)
    qty_triple: Mapped[int] = mapped_column(Integer, default=0)
    qty_twin: Mapped[int] = mapped_column(Integer, default=0)
    qty_double: Mapped[int] = mapped_column(Integer, default=0)

    # Resolved unit prices
    price_adult: Mapped[Decimal] = mapped_column(Money, default=Decimal("0"))
    price_single: Mapped[Decimal] = mapped_column(Money, default=Decimal("0"))
    price_child_bed: Mapped[Decimal] = mapped_column(Money, default=Decimal("0"))
    price_child_nobed: Mapped[Decimal] = mapped_column(Money, default=Decimal("0"))
    price_infant: Mapped[Decimal] = mapped_column(Money, default=Decimal("0"))
    total_amount: Mapped[Decimal] = mapped_column(Money, nullable=False)

    sale_code: Mapped[str | None] = mapped_column(String(50), default=None)
    special_request: Mapped[str | None] = mapped_column(Text, default=None)
    admin_note: Mapped[str | None] = mapped_column(Text, default=None)
    status: Mapped[str] = mapped_column(
        String(50),
        default="pending",
        index=True,
    )  # pending, confirmed, paid, cancelled, completed
    source: Mapped[str] = mapped_column(String(50), default="admin")  # website, flash_sale, admin

    # Relationships
    tour: Mapped["Tour"] = relationship(lazy="selectin")  # type: ignore[name-defined]  # noqa: F821
    period: Mapped["Period"] = relationship(lazy="selectin")  # type: ignore[name-defined]  # noqa: F821

    __table_args__ = (Index("ix_bookings_created_at", "created_at"),)

    def __repr__(self) -> str:
        return f"<Booking(id={self.id}, code={self.booking_code!r}, period_id={self.period_id}, status={self.status})>"
