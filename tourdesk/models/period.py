"""Period and PeriodOffer models — departure dates and their priced configuration."""

import uuid
from datetime import date
from decimal import Decimal

from sqlalchemy import Boolean, CheckConstraint, Date, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tourdesk.database import Base, Money, TimestampMixin, UUIDPrimaryKeyMixin
from tourdesk.pricing.availability import is_bookable


class Period(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A single bookable travel date range for a tour."""

    __tablename__ = "periods"

    tour_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("tours.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    period_code: Mapped[str | None] = mapped_column(String(50), default=None)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    capacity: Mapped[int] = mapped_column(Integer, nullable=False, default=30)
    booked: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    status: Mapped[str] = mapped_column(String(50), default="open", index=True)  # open, closed, sold_out, cancelled
    is_visible: Mapped[bool] = mapped_column(Boolean, default=True)
    sale_status: Mapped[str] = mapped_column(String(50), default="available")  # available, booking, sold_out

    # Relationships
    tour: Mapped["Tour"] = relationship(back_populates="periods", lazy="selectin")  # type: ignore[name-defined]  # noqa: F821
    offer: Mapped["PeriodOffer"] = relationship(
        back_populates="period",
        lazy="selectin",
        uselist=False,
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        Index("ix_periods_start_date", "start_date"),
        CheckConstraint("booked >= 0 AND booked <= capacity", name="ck_periods_booked_within_capacity"),
    )

    @property
    def available(self) -> int:
        return max(self.capacity - self.booked, 0)

    @property
    def is_bookable(self) -> bool:
        return is_bookable(
            is_visible=self.is_visible,
            status=self.status,
            sale_status=self.sale_status,
            capacity=self.capacity,
            booked=self.booked,
        )

    def __repr__(self) -> str:
        return f"<Period(id={self.id}, start={self.start_date}, sale_status={self.sale_status})>"


class PeriodOffer(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """Per-category prices, discounts and promo campaign of one period."""

    __tablename__ = "period_offers"

    period_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("periods.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    currency: Mapped[str] = mapped_column(String(3), default="THB")

    price_adult: Mapped[Decimal | None] = mapped_column(Money, default=None)
    discount_adult: Mapped[Decimal] = mapped_column(Money, default=Decimal("0"))
    price_single: Mapped[Decimal | None] = mapped_column(Money, default=None)
    discount_single: Mapped[Decimal] = mapped_column(Money, default=Decimal("0"))
    price_child_bed: Mapped[Decimal | None] = mapped_column(Money, default=None)
    discount_child_bed: Mapped[Decimal] = mapped_column(Money, default=Decimal("0"))
    price_child_nobed: Mapped[Decimal | None] = mapped_column(Money, default=None)
    discount_child_nobed: Mapped[Decimal] = mapped_column(Money, default=Decimal("0"))
    price_infant: Mapped[Decimal | None] = mapped_column(Money, default=None)
    net_price_adult: Mapped[Decimal | None] = mapped_column(Money, default=None)
    net_price_single: Mapped[Decimal | None] = mapped_column(Money, default=None)

    deposit: Mapped[Decimal | None] = mapped_column(Money, default=None)
    cancellation_policy: Mapped[str | None] = mapped_column(Text, default=None)

    promo_name: Mapped[str | None] = mapped_column(String(255), default=None)
    promo_start_date: Mapped[date | None] = mapped_column(Date, default=None)
    promo_end_date: Mapped[date | None] = mapped_column(Date, default=None)
    promo_quota: Mapped[int | None] = mapped_column(Integer, default=None)
    promo_used: Mapped[int] = mapped_column(Integer, default=0)

    # Relationships
    period: Mapped["Period"] = relationship(back_populates="offer")

    def __repr__(self) -> str:
        return f"<PeriodOffer(id={self.id}, period_id={self.period_id}, price_adult={self.price_adult})>"
