"""Unit tests for the room-allocation submission gate."""

import pytest

from tourdesk.pricing import (
    BookingQuantities,
    ResolvedPrices,
    RoomAllocationOk,
    RoomOverAllocated,
    RoomOverAllocatedError,
    ValidationFailure,
    compute,
    ensure_room_allocation,
    validate,
)


def _result(**quantities: int):
    return compute(BookingQuantities(**quantities), ResolvedPrices())


class TestValidate:
    def test_ok_when_rooms_fit(self):
        verdict = validate(_result(qty_adult=2, qty_adult_single=1, qty_twin=1))
        assert isinstance(verdict, RoomAllocationOk)
        assert verdict.total_rooms == 2
        assert verdict.total_passengers == 3

    def test_over_allocated_reports_overage(self):
        verdict = validate(_result(qty_adult=2, qty_adult_single=1, qty_twin=2, qty_double=1))
        assert isinstance(verdict, RoomOverAllocated)
        assert verdict.overage == 1
        assert verdict.message == "room count exceeds traveler count by 1"


class TestEnsureRoomAllocation:
    def test_passes_silently(self):
        ensure_room_allocation(_result(qty_adult=3, qty_triple=1))

    def test_raises_with_counts(self):
        with pytest.raises(RoomOverAllocatedError) as exc_info:
            ensure_room_allocation(_result(qty_adult=1, qty_twin=2, qty_double=1))

        error = exc_info.value
        assert error.overage == 2
        assert error.total_rooms == 3
        assert error.total_passengers == 1
        assert error.to_dict() == {
            "detail": "room count exceeds traveler count by 2",
            "error": "RoomOverAllocatedError",
            "overage": 2,
            "total_rooms": 3,
            "total_passengers": 1,
        }

    def test_is_a_validation_failure(self):
        with pytest.raises(ValidationFailure):
            ensure_room_allocation(_result(qty_adult=0, qty_twin=1))
