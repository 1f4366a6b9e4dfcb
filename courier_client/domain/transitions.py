"""
Order status state machine as seen from the courier's side.

Only the transitions a courier may initiate are listed here. PENDING ->
ACCEPTED happens on the merchant/dispatch side, and ACCEPTED ->
ASSIGNED_TO_DELIVERY is the separate "accept order" action rather than a
status update.
"""
from typing import Optional, Union

from courier_client.application.errors import TransitionError
from courier_client.domain.models import OrderStatus

TERMINAL_STATUSES: frozenset[OrderStatus] = frozenset(
    {
        OrderStatus.DELIVERED,
        OrderStatus.CANCELLED,
        OrderStatus.REJECTED,
    }
)

# Outcomes offered while the courier holds the order. DELAYED may repeat.
_ACTIVE_OUTCOMES: tuple[OrderStatus, ...] = (
    OrderStatus.DELIVERED,
    OrderStatus.CANCELLED,
    OrderStatus.DELAYED,
)

COURIER_TRANSITIONS: dict[OrderStatus, tuple[OrderStatus, ...]] = {
    OrderStatus.PENDING: (),
    OrderStatus.ACCEPTED: (),
    OrderStatus.ASSIGNED_TO_DELIVERY: _ACTIVE_OUTCOMES,
    OrderStatus.DELAYED: _ACTIVE_OUTCOMES,
    OrderStatus.DELIVERED: (),
    OrderStatus.CANCELLED: (),
    OrderStatus.REJECTED: (),
}

REASON_REQUIRED: frozenset[OrderStatus] = frozenset(
    {
        OrderStatus.CANCELLED,
        OrderStatus.DELAYED,
        OrderStatus.REJECTED,
    }
)


def is_terminal(status: OrderStatus) -> bool:
    return status in TERMINAL_STATUSES


def can_accept(status: OrderStatus) -> bool:
    """Return True if the courier may take the order (ACCEPTED -> ASSIGNED_TO_DELIVERY)."""
    return status == OrderStatus.ACCEPTED


def available_transitions(status: OrderStatus) -> tuple[OrderStatus, ...]:
    return COURIER_TRANSITIONS.get(status, ())


def can_submit(selected_status: Optional[OrderStatus], reason: Optional[str]) -> bool:
    """Return True if a status update form holds enough input to be sent.

    DELIVERED needs no reason; every other outcome needs a reason that is
    not blank once trimmed.
    """
    if selected_status is None:
        return False
    if selected_status == OrderStatus.DELIVERED:
        return True
    return bool((reason or "").strip())


def validate_transition(
    current: OrderStatus,
    target: OrderStatus,
    reason: Optional[str] = None,
) -> None:
    """Raise TransitionError unless current -> target can be submitted with reason."""
    if is_terminal(current):
        raise TransitionError(f"Order is already {current.value} and can no longer change")
    if target not in available_transitions(current):
        raise TransitionError(f"Cannot change status from {current.value} to {target.value}")
    if not can_submit(target, reason):
        raise TransitionError(f"A reason is required to mark the order {target.value}")


# Labels shown on order cards (home and orders screens)
DISPLAY_LABELS: dict[OrderStatus, str] = {
    OrderStatus.PENDING: "En attente",
    OrderStatus.ACCEPTED: "En attente",
    OrderStatus.ASSIGNED_TO_DELIVERY: "En cours",
    OrderStatus.DELIVERED: "Livré",
    OrderStatus.CANCELLED: "Annulé",
    OrderStatus.DELAYED: "Reporté",
    OrderStatus.REJECTED: "Rejeté",
}


def display_status(status: OrderStatus) -> str:
    return DISPLAY_LABELS[status]


ALL_LABELS = ("All", "Tous")

# History filter chips, English and French, mapped to the order status
HISTORY_FILTERS: dict[str, OrderStatus] = {
    "Delivered": OrderStatus.DELIVERED,
    "Livré": OrderStatus.DELIVERED,
    "Cancelled": OrderStatus.CANCELLED,
    "Annulé": OrderStatus.CANCELLED,
    "Delayed": OrderStatus.DELAYED,
    "Reported": OrderStatus.DELAYED,
    "Reporté": OrderStatus.DELAYED,
    "Rejected": OrderStatus.REJECTED,
    "Rejeté": OrderStatus.REJECTED,
}


def history_status_param(label: Union[str, OrderStatus, None]) -> Optional[str]:
    """Map a history filter label to the ``status`` query value.

    Returns None for "All"/"Tous" (no status parameter is sent). Raw enum
    names such as "DELIVERED" or "REPORTED" are accepted. Delay labels map
    to the backend's "REPORTED". Unknown labels raise ValueError.
    """
    if label is None or label in ALL_LABELS:
        return None
    if isinstance(label, OrderStatus):
        return label.wire_value
    if label in HISTORY_FILTERS:
        return HISTORY_FILTERS[label].wire_value
    try:
        return OrderStatus(label).wire_value
    except ValueError:
        raise ValueError(f"Unknown history filter: {label!r}") from None
