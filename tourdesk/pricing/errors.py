"""Exception hierarchy for the pricing engine.

Every error raised by :mod:`tourdesk.pricing` derives from :class:`PricingError`
so the HTTP layer can map the whole family to a single 422 handler.
"""

from decimal import Decimal
from typing import Any


class PricingError(Exception):
    """Base class for all pricing-engine errors."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, Any]:
        """Serialisable representation used by the API error handler."""
        return {"detail": self.message, "error": type(self).__name__}


class ValidationFailure(PricingError):
    """A local, pre-submission validation failure."""


class RoomOverAllocatedError(ValidationFailure):
    """More rooms were requested than there are travelers to occupy them."""

    def __init__(self, overage: int, total_rooms: int, total_passengers: int) -> None:
        super().__init__(f"room count exceeds traveler count by {overage}")
        self.overage = overage
        self.total_rooms = total_rooms
        self.total_passengers = total_passengers

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data.update(
            overage=self.overage,
            total_rooms=self.total_rooms,
            total_passengers=self.total_passengers,
        )
        return data


class NegativeNetPriceError(ValidationFailure):
    """A discount larger than its base price would produce a negative fare."""

    def __init__(self, category: str, price: Decimal, discount: Decimal) -> None:
        super().__init__(f"discount {discount} exceeds {category} price {price}")
        self.category = category
        self.price = price
        self.discount = discount

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data.update(category=self.category, price=str(self.price), discount=str(self.discount))
        return data


class MissingPriceError(ValidationFailure):
    """Strict mode: a category's base price is absent from the offer."""

    def __init__(self, category: str) -> None:
        super().__init__(f"offer has no {category} price configured")
        self.category = category

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["category"] = self.category
        return data


class BulkUpdateError(PricingError):
    """A bulk update command is malformed (no targets, wrong payload for its kind)."""
