"""
Cart and order pricing.

All amounts are integer cents, so line and order totals are exact at
currency precision. Decimal inputs (seed data, promotion maths) are rounded
half-up when converted.
"""
from dataclasses import asdict, dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Iterable, Optional, Union

Number = Union[int, float, str, Decimal]

_CENT = Decimal("1")


def to_cents(amount: Optional[Number]) -> int:
    """Convert a decimal currency amount (e.g. "12.99" or 12.99) to cents."""
    if amount is None:
        return 0
    value = Decimal(str(amount)) * 100
    return int(value.quantize(_CENT, rounding=ROUND_HALF_UP))


def round_cents(value: Number) -> int:
    """Round a fractional cent value (e.g. a percentage discount) to whole cents."""
    return int(Decimal(str(value)).quantize(_CENT, rounding=ROUND_HALF_UP))


def customization_delta_cents(customizations: Optional[Iterable[Dict]]) -> int:
    total = 0
    for c in customizations or []:
        delta = c.get("price_cents") or 0
        if delta < 0:
            raise ValueError("Customization price must not be negative")
        total += int(delta)
    return total


def line_total_cents(
    unit_price_cents: int, customizations: Optional[Iterable[Dict]], quantity: int
) -> int:
    if not isinstance(quantity, int) or isinstance(quantity, bool) or quantity < 1:
        raise ValueError("Quantity must be a positive integer")
    if unit_price_cents is None or unit_price_cents < 0:
        raise ValueError("Unit price must not be negative")
    return (unit_price_cents + customization_delta_cents(customizations)) * quantity


def cart_subtotal_cents(lines) -> int:
    return sum(l.total_cents for l in lines)


def cart_item_count(lines) -> int:
    return sum(l.quantity for l in lines)


@dataclass(frozen=True)
class Totals:
    subtotal_cents: int
    delivery_fee_cents: int
    service_fee_cents: int
    discount_cents: int
    total_cents: int

    def as_dict(self) -> Dict[str, int]:
        return asdict(self)


def order_totals(
    subtotal_cents: int,
    delivery_fee_cents: int,
    service_fee_cents: int,
    discount_cents: int = 0,
) -> Totals:
    total = subtotal_cents + delivery_fee_cents + service_fee_cents - discount_cents
    return Totals(
        subtotal_cents=subtotal_cents,
        delivery_fee_cents=delivery_fee_cents,
        service_fee_cents=service_fee_cents,
        discount_cents=discount_cents,
        total_cents=max(0, total),
    )


def format_cents(cents: int) -> str:
    return f"${cents / 100:.2f}"
