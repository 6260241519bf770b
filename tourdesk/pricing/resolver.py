"""PriceResolver — turns a period offer plus a category into a net unit price.

Resolution rules:

- ``adult`` and ``single`` return their ``net_price_*`` override verbatim
  when one is configured; otherwise ``price - discount``.
- ``child_bed`` and ``child_nobed`` always return ``price - discount``.
- ``infant`` returns ``price_infant`` (it has no discount field).

Absent base prices resolve to ``0`` in lenient mode and raise
:class:`MissingPriceError` in strict mode.  A discount larger than its price
raises :class:`NegativeNetPriceError` unless ``clamp_negative`` is disabled,
in which case the negative value is returned unchanged.  :func:`resolve_all`
enforces both rules only on the categories a booking prices; the rest
resolve leniently and never below ``0``.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from tourdesk.pricing.errors import MissingPriceError, NegativeNetPriceError
from tourdesk.pricing.offer import OfferPrices, PriceCategory, to_money

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


@dataclass(frozen=True)
class ResolvedPrices:
    """Net unit price per category, ready for the calculator."""

    adult: Decimal = ZERO
    single: Decimal = ZERO
    child_bed: Decimal = ZERO
    child_nobed: Decimal = ZERO
    infant: Decimal = ZERO

    def for_category(self, category: PriceCategory) -> Decimal:
        return getattr(self, category.value)

    def as_snapshot(self) -> dict[str, Decimal]:
        """Booking-row field names (``price_adult`` ...) mapped to unit prices."""
        return {f"price_{category.value}": self.for_category(category) for category in PriceCategory}

    def rounded(self) -> "ResolvedPrices":
        """The same prices rounded to currency precision."""
        return ResolvedPrices(**{category.value: to_money(self.for_category(category)) for category in PriceCategory})


def _as_offer(offer: Any) -> OfferPrices:
    if isinstance(offer, OfferPrices):
        return offer
    return OfferPrices.from_source(offer)


def resolve(
    offer: Any,
    category: PriceCategory | str,
    *,
    strict: bool = False,
    clamp_negative: bool = True,
) -> Decimal:
    """Return the net unit price of ``category`` under ``offer``.

    Args:
        offer: An :class:`OfferPrices`, an ORM ``PeriodOffer``, or any object /
            mapping exposing the offer's price fields.
        category: The passenger category to price.
        strict: Raise instead of treating an absent base price as free.
        clamp_negative: Reject ``price - discount < 0`` with a validation error.

    Raises:
        MissingPriceError: ``strict`` is set and the base price is absent.
        NegativeNetPriceError: the computed net price is negative and
            ``clamp_negative`` is set.
    """
    category = PriceCategory(category)
    prices = _as_offer(offer)

    override = prices.override(category)
    if override is not None:
        return override

    base = prices.base_price(category)
    if base is None:
        if strict:
            raise MissingPriceError(category.value)
        base = ZERO

    discount = prices.discount(category)
    net = base - discount
    if net < 0:
        if clamp_negative:
            logger.warning("Rejected negative %s price: %s - %s", category.value, base, discount)
            raise NegativeNetPriceError(category.value, base, discount)
        logger.debug("Passing through negative %s price %s", category.value, net)
    return net


def resolve_all(
    offer: Any,
    *,
    strict: bool = False,
    clamp_negative: bool = True,
    required: Iterable[PriceCategory] | None = None,
) -> ResolvedPrices:
    """Resolve every category of ``offer`` into a :class:`ResolvedPrices`.

    Only the categories listed in ``required`` (all of them when ``None``)
    must carry a base price in strict mode or are rejected for a negative
    net price.  The rest resolve leniently, floored at ``0``, so a stray
    discount on an unbooked category never blocks a booking.
    """
    prices = _as_offer(offer)
    must_price = set(PriceCategory) if required is None else {PriceCategory(c) for c in required}
    resolved = {}
    for category in PriceCategory:
        if category in must_price:
            resolved[category.value] = resolve(prices, category, strict=strict, clamp_negative=clamp_negative)
        else:
            resolved[category.value] = max(resolve(prices, category, clamp_negative=False), ZERO)
    return ResolvedPrices(**resolved)
