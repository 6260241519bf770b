"""Engine-level view of a period offer: per-category prices and discounts.

:class:`OfferPrices` is the pricing engine's read-only snapshot of the
priced configuration attached to one period.  It can be built from the
ORM row (:class:`tourdesk.models.period.PeriodOffer`), from a request
schema, or from a plain mapping, so the resolver never depends on the
persistence layer.
"""

import enum
from collections.abc import Mapping
from dataclasses import dataclass, fields
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any


class PriceCategory(str, enum.Enum):
    """Passenger classes that carry their own unit price."""

    ADULT = "adult"
    SINGLE = "single"
    CHILD_BED = "child_bed"
    CHILD_NOBED = "child_nobed"
    INFANT = "infant"


# Currency precision of stored prices and totals.
CENT = Decimal("0.01")

# Categories whose net price can be pinned with a ``net_price_*`` override.
OVERRIDABLE_CATEGORIES: frozenset[PriceCategory] = frozenset({PriceCategory.ADULT, PriceCategory.SINGLE})


def to_amount(value: Any) -> Decimal | None:
    """Parse a monetary input leniently.

    Returns ``None`` for absent input (``None``, empty or blank strings) and
    for anything that is not a finite number.  Numeric strings such as
    ``"29,900"`` or ``" 1500.50 "`` are accepted.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, (int, float)):
        amount = Decimal(str(value))
    elif isinstance(value, str):
        cleaned = value.strip().replace(",", "")
        if not cleaned:
            return None
        try:
            amount = Decimal(cleaned)
        except InvalidOperation:
            return None
    else:
        return None

    if not amount.is_finite():
        return None
    return amount


def to_money(amount: Decimal) -> Decimal:
    """Round ``amount`` to currency precision, halves away from zero."""
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class OfferPrices:
    """Prices, discounts and overrides of one period offer.

    ``None`` means the field is absent.  Discounts are normalised to ``0``
    when absent; base prices and overrides keep ``None`` so the resolver can
    tell "not configured" apart from "free".
    """

    price_adult: Decimal | None = None
    price_single: Decimal | None = None
    price_child_bed: Decimal | None = None
    price_child_nobed: Decimal | None = None
    price_infant: Decimal | None = None
    discount_adult: Decimal = Decimal("0")
    discount_single: Decimal = Decimal("0")
    discount_child_bed: Decimal = Decimal("0")
    discount_child_nobed: Decimal = Decimal("0")
    net_price_adult: Decimal | None = None
    net_price_single: Decimal | None = None

    @classmethod
    def from_source(cls, source: Any) -> "OfferPrices":
        """Build from an ORM row, a pydantic model, or a mapping.

        Unknown keys are ignored; values go through :func:`to_amount`.
        """
        values: dict[str, Any] = {}
        for field in fields(cls):
            if isinstance(source, Mapping):
                raw = source.get(field.name)
            else:
                raw = getattr(source, field.name, None)
            amount = to_amount(raw)
            if field.name.startswith("discount_"):
                values[field.name] = amount if amount is not None else Decimal("0")
            else:
                values[field.name] = amount
        return cls(**values)

    def base_price(self, category: PriceCategory) -> Decimal | None:
        return getattr(self, f"price_{category.value}")

    def discount(self, category: PriceCategory) -> Decimal:
        # Infants have no discount field.
        if category is PriceCategory.INFANT:
            return Decimal("0")
        return getattr(self, f"discount_{category.value}")

    def override(self, category: PriceCategory) -> Decimal | None:
        if category not in OVERRIDABLE_CATEGORIES:
            return None
        return getattr(self, f"net_price_{category.value}")
