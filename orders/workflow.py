"""Order status state machine: New -> InProgress -> Paid.

Pure functions over ``Order`` instances; nothing here touches the database
or the broadcaster. Callers pass ``now`` so timestamps are deterministic.
"""

from .models import Order, OrderStatus
from .validators import clean_price, clean_title, validate_status_transition


def create(title, price, now) -> Order:
    """Build a new, unsaved order in ``New``. Raises ValidationError on bad input."""
    return Order(
        title=clean_title(title),
        price=clean_price(price),
        status=OrderStatus.NEW,
        created_at=now,
        updated_at=now,
    )


def move_to_in_progress(order: Order, now) -> Order:
    # strict: a second call conflicts instead of succeeding
    validate_status_transition(order.status, OrderStatus.IN_PROGRESS)
    order.status = OrderStatus.IN_PROGRESS
    order.updated_at = now
    return order


def mark_paid(order: Order, now) -> bool:
    """Mark the order paid. Returns False (and changes nothing) if it already is."""
    if order.status == OrderStatus.PAID:
        return False
    validate_status_transition(order.status, OrderStatus.PAID)
    order.status = OrderStatus.PAID
    order.updated_at = now
    return True
