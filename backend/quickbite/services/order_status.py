import enum
from typing import Optional, Union


class OrderStatus(str, enum.Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PREPARING = "preparing"
    OUT_FOR_DELIVERY = "out-for-delivery"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


FORWARD_SEQUENCE = (
    OrderStatus.PENDING,
    OrderStatus.CONFIRMED,
    OrderStatus.PREPARING,
    OrderStatus.OUT_FOR_DELIVERY,
    OrderStatus.DELIVERED,
)

TERMINAL_STATUSES = frozenset({OrderStatus.DELIVERED, OrderStatus.CANCELLED})
CANCELLABLE_STATUSES = frozenset({OrderStatus.PENDING, OrderStatus.CONFIRMED})
ACTIVE_STATUSES = frozenset(
    {
        OrderStatus.PENDING,
        OrderStatus.CONFIRMED,
        OrderStatus.PREPARING,
        OrderStatus.OUT_FOR_DELIVERY,
    }
)


class InvalidStatusTransition(Exception):
    pass


def parse_status(value: Union[str, OrderStatus]) -> OrderStatus:
    try:
        return OrderStatus(value)
    except ValueError:
        raise InvalidStatusTransition(f"Unknown order status: {value}")


def next_status(current: Union[str, OrderStatus]) -> Optional[OrderStatus]:
    current = parse_status(current)
    if current in TERMINAL_STATUSES:
        return None
    idx = FORWARD_SEQUENCE.index(current)
    return FORWARD_SEQUENCE[idx + 1]


def can_transition(
    current: Union[str, OrderStatus], target: Union[str, OrderStatus]
) -> bool:
    current = parse_status(current)
    target = parse_status(target)
    if target == OrderStatus.CANCELLED:
        return current in CANCELLABLE_STATUSES
    return next_status(current) == target


def ensure_transition(
    current: Union[str, OrderStatus], target: Union[str, OrderStatus]
) -> OrderStatus:
    target = parse_status(target)
    if not can_transition(current, target):
        raise InvalidStatusTransition(
            f"Cannot move order from {parse_status(current).value} to {target.value}"
        )
    return target
