"""RoomAllocationValidator — the submission gate for booking create/update."""

import logging
from dataclasses import dataclass

from tourdesk.pricing.calculator import BookingPriceResult
from tourdesk.pricing.errors import RoomOverAllocatedError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RoomAllocationOk:
    total_rooms: int
    total_passengers: int


@dataclass(frozen=True)
class RoomOverAllocated:
    """Verdict carrying everything needed for "exceeds by N" messages."""

    overage: int
    total_rooms: int
    total_passengers: int

    @property
    def message(self) -> str:
        return f"room count exceeds traveler count by {self.overage}"


def validate(result: BookingPriceResult) -> RoomAllocationOk | RoomOverAllocated:
    """Check the room/passenger invariant of a computed booking."""
    if result.is_room_over_allocated:
        return RoomOverAllocated(
            overage=result.total_rooms - result.total_passengers,
            total_rooms=result.total_rooms,
            total_passengers=result.total_passengers,
        )
    return RoomAllocationOk(total_rooms=result.total_rooms, total_passengers=result.total_passengers)


def ensure_room_allocation(result: BookingPriceResult) -> None:
    """Raise :class:`RoomOverAllocatedError` when the booking may not be submitted."""
    verdict = validate(result)
    if isinstance(verdict, RoomOverAllocated):
        logger.warning(
            "Blocked booking submission: %d rooms for %d travelers",
            verdict.total_rooms,
            verdict.total_passengers,
        )
        raise RoomOverAllocatedError(verdict.overage, verdict.total_rooms, verdict.total_passengers)
