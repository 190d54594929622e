"""
Order status lifecycle.

Any status may move to any other status; no transition table is enforced.
Every change appends one history entry and nothing is overwritten.
"""
from typing import Optional

from shared.exceptions import NotAssigned, ValidationFailed
from shared.observability import storefront_order_status_transitions_total
from services.auth_service.models import utcnow

from .models import ORDER_STATUSES, Order, StatusHistoryEntry

TERMINAL_STATUSES = ("delivered", "undelivered", "cancelled")

RIDER_ASSIGNED_NOTE = "Rider assigned for delivery"
DELIVERED_NOTE = "Order delivered successfully"


def update_status(order: Order, new_status: str, note: Optional[str] = "") -> StatusHistoryEntry:
    if new_status not in ORDER_STATUSES:
        raise ValidationFailed([{"field": "status", "message": f"Unknown order status '{new_status}'"}])

    now = utcnow()
    entry = StatusHistoryEntry(status=new_status, timestamp=now, note=note or "")
    order.status = new_status
    order.status_history.append(entry)
    order.updated_at = now
    storefront_order_status_transitions_total.labels(status=new_status).inc()
    return entry


def assign_rider(order: Order, rider_id: int) -> StatusHistoryEntry:
    order.rider_id = rider_id
    return update_status(order, "shipped", RIDER_ASSIGNED_NOTE)


def _ensure_assigned(order: Order, rider_id: int) -> None:
    if order.rider_id is None or order.rider_id != rider_id:
        raise NotAssigned()


def mark_as_delivered(order: Order, rider_id: int) -> StatusHistoryEntry:
    _ensure_assigned(order, rider_id)
    return update_status(order, "delivered", DELIVERED_NOTE)


def mark_as_undelivered(order: Order, rider_id: int, reason: Optional[str] = "") -> StatusHistoryEntry:
    _ensure_assigned(order, rider_id)
    return update_status(order, "undelivered", reason)


def is_terminal(order: Order) -> bool:
    return order.status in TERMINAL_STATUSES
