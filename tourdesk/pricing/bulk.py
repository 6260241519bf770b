"""PeriodBulkUpdater — one change applied uniformly to many periods.

A :class:`BulkUpdate` is an immutable command: a set of period ids, exactly
one :class:`BulkUpdateKind` and the payload for that kind.  The command
knows which fields it writes (:meth:`BulkUpdate.changes`), how to apply
itself to loaded period objects (:meth:`BulkUpdate.apply_to`) and how to
render the outbound request body (:meth:`BulkUpdate.to_request`).

Kinds are mutually exclusive; there is no mixed-field partial update.
"""

import enum
import logging
from collections.abc import Callable, Hashable, Iterable, Mapping
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any

from tourdesk.pricing.availability import SaleStatus
from tourdesk.pricing.errors import BulkUpdateError
from tourdesk.pricing.offer import to_amount

logger = logging.getLogger(__name__)


class BulkUpdateKind(str, enum.Enum):
    VISIBILITY = "visibility"
    SALE_STATUS = "sale_status"
    PROMO = "promo"
    DISCOUNT = "discount"


@dataclass(frozen=True)
class PromoPayload:
    promo_name: str
    promo_start_date: date | None
    promo_end_date: date | None
    promo_quota: int

    def __post_init__(self) -> None:
        if not self.promo_name or not self.promo_name.strip():
            raise BulkUpdateError("promo_name is required")
        if self.promo_quota < 0:
            raise BulkUpdateError("promo_quota must be non-negative")
        if self.promo_start_date and self.promo_end_date and self.promo_end_date < self.promo_start_date:
            raise BulkUpdateError("promo_end_date must not be before promo_start_date")


@dataclass(frozen=True)
class DiscountPayload:
    discount_adult: Decimal = Decimal("0")
    discount_single: Decimal = Decimal("0")
    discount_child_bed: Decimal = Decimal("0")
    discount_child_nobed: Decimal = Decimal("0")

    def __post_init__(self) -> None:
        for name, value in self.__dict__.items():
            if value < 0:
                raise BulkUpdateError(f"{name} must be non-negative")


Payload = bool | SaleStatus | PromoPayload | DiscountPayload


def _to_date(value: Any) -> date | None:
    if value in (None, ""):
        return None
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value))
    except ValueError:
        raise BulkUpdateError(f"invalid date: {value!r}") from None


def _coerce_payload(kind: BulkUpdateKind, payload: Any) -> Payload:
    if kind is BulkUpdateKind.VISIBILITY:
        if isinstance(payload, bool):
            return payload
        # The dashboard's select sends "on" / "off".
        if payload in ("on", "off"):
            return payload == "on"
        raise BulkUpdateError("visibility payload must be a boolean")

    if kind is BulkUpdateKind.SALE_STATUS:
        try:
            return SaleStatus(payload)
        except ValueError:
            raise BulkUpdateError(f"unknown sale status: {payload!r}") from None

    if kind is BulkUpdateKind.PROMO:
        if isinstance(payload, PromoPayload):
            return payload
        if not isinstance(payload, Mapping):
            raise BulkUpdateError("promo payload must be a mapping")
        quota = payload.get("promo_quota")
        try:
            quota = int(quota) if quota not in (None, "") else 0
        except (TypeError, ValueError):
            raise BulkUpdateError("promo_quota must be an integer") from None
        return PromoPayload(
            promo_name=payload.get("promo_name") or "",
            promo_start_date=_to_date(payload.get("promo_start_date")),
            promo_end_date=_to_date(payload.get("promo_end_date")),
            promo_quota=quota,
        )

    if isinstance(payload, DiscountPayload):
        return payload
    if not isinstance(payload, Mapping):
        raise BulkUpdateError("discount payload must be a mapping")
    amounts: dict[str, Decimal] = {}
    for name in DiscountPayload.__dataclass_fields__:
        amount = to_amount(payload.get(name))
        amounts[name] = amount if amount is not None else Decimal("0")
    return DiscountPayload(**amounts)


@dataclass(frozen=True)
class BulkUpdate:
    """A single-kind update targeting a non-empty set of periods."""

    period_ids: frozenset[Hashable]
    kind: BulkUpdateKind
    payload: Payload

    @classmethod
    def build(cls, period_ids: Iterable[Hashable], kind: BulkUpdateKind | str, payload: Any) -> "BulkUpdate":
        """Validate and normalise a bulk update.

        Raises:
            BulkUpdateError: no period ids, an unknown kind, or a payload that
                does not fit the kind.
        """
        ids = frozenset(period_ids)
        if not ids:
            raise BulkUpdateError("select at least one period")
        try:
            kind = BulkUpdateKind(kind)
        except ValueError:
            raise BulkUpdateError(f"unknown bulk update kind: {kind!r}") from None
        return cls(period_ids=ids, kind=kind, payload=_coerce_payload(kind, payload))

    def changes(self) -> tuple[dict[str, Any], dict[str, Any]]:
        """Return ``(period_fields, offer_fields)`` written by this command."""
        if self.kind is BulkUpdateKind.VISIBILITY:
            return {"is_visible": self.payload}, {}
        if self.kind is BulkUpdateKind.SALE_STATUS:
            return {"sale_status": self.payload.value}, {}
        if self.kind is BulkUpdateKind.PROMO:
            promo = self.payload
            return {}, {
                "promo_name": promo.promo_name,
                "promo_start_date": promo.promo_start_date,
                "promo_end_date": promo.promo_end_date,
                "promo_quota": promo.promo_quota,
                # Overwrites any consumption in progress.
                "promo_used": 0,
            }
        return {}, dict(self.payload.__dict__)

    def apply_to(self, periods: Iterable[Any], offer_factory: Callable[[], Any] | None = None) -> int:
        """Apply the command in place to loaded period objects.

        Each period must expose the period fields as attributes and its offer
        as ``period.offer``.  Periods without an offer get one from
        ``offer_factory`` when the command writes offer fields.

        Returns the number of periods updated.

        Raises:
            BulkUpdateError: a period is missing its offer and no factory
                was given.
        """
        period_fields, offer_fields = self.changes()
        count = 0
        for period in periods:
            for name, value in period_fields.items():
                setattr(period, name, value)
            if offer_fields:
                if period.offer is None:
                    if offer_factory is None:
                        raise BulkUpdateError(f"period {period.id} has no offer to update")
                    period.offer = offer_factory()
                for name, value in offer_fields.items():
                    setattr(period.offer, name, value)
            count += 1
        logger.debug("Applied %s bulk update to %d periods", self.kind.value, count)
        return count

    def to_request(self) -> dict[str, Any]:
        """Render the outbound request body for the period API."""
        ids = sorted(str(period_id) for period_id in self.period_ids)
        period_fields, offer_fields = self.changes()
        if period_fields:
            return {"period_ids": ids, "updates": period_fields}
        body = {name: value for name, value in offer_fields.items() if name != "promo_used"}
        for name, value in body.items():
            if isinstance(value, date):
                body[name] = value.isoformat()
            elif isinstance(value, Decimal):
                body[name] = str(value)
        return {"period_ids": ids, **body}
