# app/domain/order_status.py
from enum import Enum


class OrderStatus(str, Enum):
    PENDING_CONTACT = "pending_contact"
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PREPARING = "preparing"
    OUT_FOR_DELIVERY = "out_for_delivery"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


CANCELLABLE_STATUSES = frozenset({OrderStatus.PENDING, OrderStatus.CONFIRMED})

#kolejnosc widoczna dla klienta, pending_contact tylko dla zamowien TXT-
ALLOWED_TRANSITIONS = {
    OrderStatus.PENDING_CONTACT: frozenset({OrderStatus.PENDING, OrderStatus.CANCELLED}),
    OrderStatus.PENDING: frozenset({OrderStatus.CONFIRMED, OrderStatus.CANCELLED}),
    OrderStatus.CONFIRMED: frozenset({OrderStatus.PREPARING, OrderStatus.CANCELLED}),
    OrderStatus.PREPARING: frozenset({OrderStatus.OUT_FOR_DELIVERY}),
    OrderStatus.OUT_FOR_DELIVERY: frozenset({OrderStatus.DELIVERED}),
    OrderStatus.DELIVERED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}

#status zamowienia -> krok w sledzeniu dostawy
TRACKING_STEPS = {
    OrderStatus.PENDING_CONTACT: "awaiting_contact",
    OrderStatus.PENDING: "preparing",
    OrderStatus.CONFIRMED: "preparing",
    OrderStatus.PREPARING: "preparing",
    OrderStatus.OUT_FOR_DELIVERY: "on_the_way",
    OrderStatus.DELIVERED: "delivered",
    OrderStatus.CANCELLED: "cancelled",
}


def can_transition(current: str, requested: str) -> bool:
    if current == requested:
        return True
    return OrderStatus(requested) in ALLOWED_TRANSITIONS[OrderStatus(current)]


def is_cancellable(status: str) -> bool:
    return status in {s.value for s in CANCELLABLE_STATUSES}


def tracking_step(status: str) -> str:
    try:
        return TRACKING_STEPS[OrderStatus(status)]
    except ValueError:
        return "preparing"
