"""Tour model — a sellable tour programme with many departure periods."""

from sqlalchemy import Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tourdesk.database import Base, TimestampMixin, UUIDPrimaryKeyMixin


class Tour(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A tour programme; prices live on its periods' offers."""

    __tablename__ = "tours"

    tour_code: Mapped[str] = mapped_column(String(50), unique=True, nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, default=None)
    duration_days: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    duration_nights: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    status: Mapped[str] = mapped_column(String(50), default="active")  # active, draft, inactive

    # Relationships
    periods: Mapped[list["Period"]] = relationship(  # type: ignore[name-defined]  # noqa: F821
        back_populates="tour",
        lazy="selectin",
        cascade="all, delete-orphan",
        order_by="Period.start_date",
    )

    def __repr__(self) -> str:
        return f"<Tour(id={self.id}, code={self.tour_code!r}, title={self.title!r})>"
