# foodexpress/domain/status.py
from enum import Enum

from foodexpress.domain.errors import InvalidStatus, TerminalStateViolation


class OrderStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PREPARING = "preparing"
    READY = "ready"
    OUT_FOR_DELIVERY = "out_for_delivery"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class PaymentMethod(str, Enum):
    CASH = "cash"
    CARD = "card"
    MOBILE = "mobile"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"


TERMINAL_STATUSES = frozenset({OrderStatus.DELIVERED, OrderStatus.CANCELLED})

#kolejnosc realizacji zamowienia, tylko jeden krok do przodu
_FORWARD = {
    OrderStatus.PENDING: OrderStatus.CONFIRMED,
    OrderStatus.CONFIRMED: OrderStatus.PREPARING,
    OrderStatus.PREPARING: OrderStatus.READY,
    OrderStatus.READY: OrderStatus.OUT_FOR_DELIVERY,
    OrderStatus.OUT_FOR_DELIVERY: OrderStatus.DELIVERED,
}

ALLOWED_TRANSITIONS = {
    status: (
        frozenset()
        if status in TERMINAL_STATUSES
        else frozenset({_FORWARD[status], OrderStatus.CANCELLED})
    )
    for status in OrderStatus
}


def parse_status(value) -> OrderStatus:
    if isinstance(value, OrderStatus):
        return value
    try:
        return OrderStatus(value)
    except ValueError:
        valid = ", ".join(s.value for s in OrderStatus)
        raise InvalidStatus(f"Invalid status '{value}'. Must be one of: {valid}") from None


def check_transition(current, target) -> OrderStatus:
    """Validate `current -> target` and return the parsed target status.

    Terminal orders reject everything with TerminalStateViolation, anything
    else outside the DAG (skips, backwards moves, self loops) is InvalidStatus.
    """
    current = parse_status(current)
    target = parse_status(target)

    if current in TERMINAL_STATUSES:
        raise TerminalStateViolation(
            f"Order is {current.value} and cannot move to {target.value}"
        )

    if target not in ALLOWED_TRANSITIONS[current]:
        raise InvalidStatus(
            f"Cannot change order status from {current.value} to {target.value}"
        )

    return target
