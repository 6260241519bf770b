"""Seed the database with sample tours, departure periods and bookings.

Tours are modelled on typical Thai-operator outbound programmes: each has a
handful of monthly departures, every departure carries a full offer, and a
few bookings are priced through the same engine the API uses.

Run from the project root:
    python -m scripts.seed_data
"""

import asyncio
import sys
from datetime import date, timedelta
from decimal import Decimal
from pathlib import Path

# Add project root to path so imports work when run as a script
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from sqlalchemy import delete, select

from tourdesk.config import settings
from tourdesk.database import async_session_factory, engine
from tourdesk.models.booking import Booking
from tourdesk.models.period import Period, PeriodOffer
from tourdesk.models.tour import Tour
from tourdesk.pricing import BookingQuantities, ensure_room_allocation
from tourdesk.services.booking_service import generate_booking_code, price_booking

# ---------------------------------------------------------------------------
# Seed data definitions
# ---------------------------------------------------------------------------

TOURS = [
    {
        "tour_code": "JP-TKO-05",
        "title": "Tokyo Fuji Kawaguchiko 5D3N",
        "description": "Tokyo city, Mt. Fuji 5th station, Lake Kawaguchi onsen night.",
        "duration_days": 5,
        "duration_nights": 3,
        "offer": {
            "price_adult": Decimal("29900"),
            "discount_adult": Decimal("1000"),
            "price_single": Decimal("6500"),
            "price_child_bed": Decimal("28900"),
            "price_child_nobed": Decimal("26900"),
            "discount_child_nobed": Decimal("500"),
            "price_infant": Decimal("7900"),
            "deposit": Decimal("10000"),
        },
    },
    {
        "tour_code": "KR-SEL-06",
        "title": "Seoul Nami Island Everland 6D4N",
        "description": "Seoul palaces, Nami Island, Everland and a Myeongdong evening.",
        "duration_days": 6,
        "duration_nights": 4,
        "offer": {
            "price_adult": Decimal("25900"),
            "price_single": Decimal("5500"),
            "price_child_bed": Decimal("24900"),
            "price_child_nobed": Decimal("22900"),
            "price_infant": Decimal("6900"),
            "net_price_adult": Decimal("23900"),
            "deposit": Decimal("8000"),
        },
    },
    {
        "tour_code": "VN-DAD-04",
        "title": "Da Nang Hoi An Ba Na Hills 4D3N",
        "description": "Golden Bridge, Hoi An ancient town by lantern light, My Khe beach.",
        "duration_days": 4,
        "duration_nights": 3,
        "offer": {
            "price_adult": Decimal("15900"),
            "discount_adult": Decimal("2000"),
            "price_single": Decimal("3500"),
            "discount_single": Decimal("500"),
            "price_child_bed": Decimal("14900"),
            "price_child_nobed": Decimal("13900"),
            "price_infant": Decimal("3900"),
            "deposit": Decimal("5000"),
        },
    },
]

DEPARTURES_PER_TOUR = 4

BOOKINGS = [
    {
        "tour_code": "JP-TKO-05",
        "first_name": "Somchai",
        "last_name": "Rattanakul",
        "email": "somchai.r@example.com",
        "phone": "+66812345678",
        "quantities": {"qty_adult": 2, "qty_child_bed": 1, "qty_triple": 1},
        "status": "confirmed",
        "source": "website",
    },
    {
        "tour_code": "JP-TKO-05",
        "first_name": "Napat",
        "last_name": "Wongsuwan",
        "email": "napat.w@example.com",
        "phone": "+66823456789",
        "quantities": {"qty_adult": 1, "qty_adult_single": 1},
        "status": "paid",
        "source": "admin",
    },
    {
        "tour_code": "KR-SEL-06",
        "first_name": "Kanokwan",
        "last_name": "Srisuk",
        "email": "kanokwan.s@example.com",
        "phone": "+66834567890",
        "quantities": {"qty_adult": 2, "qty_child_nobed": 1, "qty_infant": 1, "qty_double": 1},
        "status": "pending",
        "source": "flash_sale",
    },
    {
        "tour_code": "VN-DAD-04",
        "first_name": "Arthit",
        "last_name": "Chaiyaporn",
        "email": "arthit.c@example.com",
        "phone": "+66845678901",
        "quantities": {"qty_adult": 4, "qty_twin": 2},
        "status": "confirmed",
        "source": "website",
    },
]


def _first_saturday_after(day: date) -> date:
    return day + timedelta(days=(5 - day.weekday()) % 7 or 7)


async def seed() -> None:
    """Populate the database with sample tours, periods and bookings.

    Idempotent: tours with a seeded code are deleted (cascading to their
    periods, offers and bookings) before being re-created.
    """
    async with async_session_factory() as session:
        codes = [t["tour_code"] for t in TOURS]
        result = await session.execute(select(Tour.id).where(Tour.tour_code.in_(codes)))
        existing_ids = list(result.scalars().all())

        if existing_ids:
            print(f"⚠️  {len(existing_ids)} sample tours already exist. Deleting and re-seeding...")
            await session.execute(delete(Booking).where(Booking.tour_id.in_(existing_ids)))
            await session.execute(delete(Tour).where(Tour.id.in_(existing_ids)))
            await session.flush()

        # ------------------------------------------------------------------
        # 1. Create tours with monthly departures
        # ------------------------------------------------------------------
        today = date.today()
        first_periods: dict[str, Period] = {}
        period_count = 0

        for tour_data in TOURS:
            offer_data = tour_data["offer"]
            tour = Tour(**{k: v for k, v in tour_data.items() if k != "offer"})
            session.add(tour)
            await session.flush()

            start = _first_saturday_after(today + timedelta(days=30))
            for index in range(DEPARTURES_PER_TOUR):
                period = Period(
                    tour_id=tour.id,
                    period_code=f"{tour.tour_code}-{start:%y%m%d}",
                    start_date=start,
                    end_date=start + timedelta(days=tour.duration_days - 1),
                    capacity=settings.default_period_capacity,
                    booked=0,
                    # Last departure is unpublished until the operator releases it
                    is_visible=index < DEPARTURES_PER_TOUR - 1,
                )
                period.offer = PeriodOffer(
                    currency=settings.default_currency,
                    cancellation_policy=settings.default_cancellation_policy,
                    **offer_data,
                )
                session.add(period)
                await session.flush()
                first_periods.setdefault(tour.tour_code, period)
                period_count += 1
                start += timedelta(days=28)

            print(f"   🧳 {tour.tour_code} {tour.title} — {DEPARTURES_PER_TOUR} departures")

        print(f"✅ Created {len(TOURS)} tours and {period_count} periods")

        # ------------------------------------------------------------------
        # 2. Create bookings priced from each period's offer
        # ------------------------------------------------------------------
        booking_count = 0
        for bdata in BOOKINGS:
            period = first_periods[bdata["tour_code"]]
            quantities = BookingQuantities.from_mapping(bdata["quantities"])
            result = price_booking(quantities, period.offer)
            ensure_room_allocation(result)

            booking = Booking(
                booking_code=generate_booking_code(today),
                tour_id=period.tour_id,
                period_id=period.id,
                first_name=bdata["first_name"],
                last_name=bdata["last_name"],
                email=bdata["email"],
                phone=bdata["phone"],
                status=bdata["status"],
                source=bdata["source"],
                total_amount=result.total_amount,
                **quantities.as_dict(),
                **result.prices.as_snapshot(),
            )
            session.add(booking)
            booking_count += 1
            print(f"   🧾 {booking.booking_code} — {result.total_amount} {settings.default_currency}")

        await session.flush()
        await session.commit()

        print(f"✅ Created {booking_count} bookings")
        print()
        print("=" * 60)
        print("📊 Seed Summary")
        print("=" * 60)
        print(f"   Tours:    {len(TOURS)}")
        print(f"   Periods:  {period_count}")
        print(f"   Bookings: {booking_count}")
        print("=" * 60)

    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(seed())
