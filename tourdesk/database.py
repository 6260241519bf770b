"""Async SQLAlchemy engine, session factory, declarative base and column helpers."""

import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import Numeric, func
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from tourdesk.config import settings

# Prices, discounts and totals: two decimal places, up to 9,999,999,999.99.
Money = Numeric(12, 2)


def engine_options(url: str) -> dict[str, Any]:
    """Pool settings for ``url``; SQLite drivers take no pool sizing."""
    options: dict[str, Any] = {"echo": settings.debug}
    if not url.startswith("sqlite"):
        options.update(
            pool_pre_ping=True,
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
        )
    return options


engine = create_async_engine(settings.async_database_url, **engine_options(settings.async_database_url))

async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


class TimestampMixin:
    """Mixin that adds created_at and updated_at columns."""

    created_at: Mapped[datetime] = mapped_column(server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        server_default=func.now(),
        onupdate=func.now(),
    )


class UUIDPrimaryKeyMixin:
    """Mixin that adds a UUID primary key column."""

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)


async def get_db() -> AsyncSession:  # type: ignore[misc]
    """Yield a request-scoped session; the request's writes commit together.

    Any exception raised by the endpoint rolls back everything it wrote, so a
    bulk period update either lands on every selected period or on none::

        @router.post("/tours/{tour_id}/periods/bulk-update")
        async def bulk_update_periods(db: AsyncSession = Depends(get_db)):
            ...
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
