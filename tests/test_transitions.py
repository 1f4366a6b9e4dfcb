import pytest

from courier_client.application.errors import TransitionError
from courier_client.domain.models import OrderStatus
from courier_client.domain.transitions import (
    TERMINAL_STATUSES,
    available_transitions,
    can_accept,
    can_submit,
    display_status,
    history_status_param,
    validate_transition,
)


def test_can_submit_requires_a_status():
    assert can_submit(None, "anything") is False
    assert can_submit(None, "") is False


@pytest.mark.parametrize("reason", [None, "", "   ", "client absent"])
def test_delivered_needs_no_reason(reason):
    assert can_submit(OrderStatus.DELIVERED, reason) is True


@pytest.mark.parametrize("status", [OrderStatus.CANCELLED, OrderStatus.DELAYED, OrderStatus.REJECTED])
def test_negative_outcomes_need_trimmed_reason(status):
    assert can_submit(status, None) is False
    assert can_submit(status, "") is False
    assert can_submit(status, " \t\n ") is False
    assert can_submit(status, "  client absent ") is True


def test_assigned_order_offers_delivery_outcomes():
    assert available_transitions(OrderStatus.ASSIGNED_TO_DELIVERY) == (
        OrderStatus.DELIVERED,
        OrderStatus.CANCELLED,
        OrderStatus.DELAYED,
    )
    # Re-attempts after a delay
    assert OrderStatus.DELAYED in available_transitions(OrderStatus.DELAYED)


@pytest.mark.parametrize("status", sorted(TERMINAL_STATUSES, key=lambda s: s.value))
def test_terminal_orders_offer_nothing(status):
    assert available_transitions(status) == ()
    assert can_accept(status) is False
    with pytest.raises(TransitionError):
        validate_transition(status, OrderStatus.DELIVERED)


def test_only_accepted_orders_can_be_taken():
    assert can_accept(OrderStatus.ACCEPTED) is True
    assert can_accept(OrderStatus.PENDING) is False
    assert can_accept(OrderStatus.ASSIGNED_TO_DELIVERY) is False
    assert available_transitions(OrderStatus.PENDING) == ()


def test_validate_transition_rejects_missing_reason():
    with pytest.raises(TransitionError) as exc:
        validate_transition(OrderStatus.ASSIGNED_TO_DELIVERY, OrderStatus.CANCELLED, "  ")
    assert "reason" in exc.value.message.lower()
    validate_transition(OrderStatus.ASSIGNED_TO_DELIVERY, OrderStatus.CANCELLED, "refused")


def test_validate_transition_rejects_skipping_acceptance():
    with pytest.raises(TransitionError):
        validate_transition(OrderStatus.ACCEPTED, OrderStatus.DELIVERED)


@pytest.mark.parametrize(
    "label, expected",
    [
        ("All", None),
        ("Tous", None),
        (None, None),
        ("Delivered", "DELIVERED"),
        ("Livré", "DELIVERED"),
        ("Cancelled", "CANCELLED"),
        ("Annulé", "CANCELLED"),
        ("Reported", "REPORTED"),
        ("Reporté", "REPORTED"),
        ("Delayed", "REPORTED"),
        ("DELIVERED", "DELIVERED"),
        ("REPORTED", "REPORTED"),
        ("DELAYED", "REPORTED"),
        (OrderStatus.CANCELLED, "CANCELLED"),
        (OrderStatus.DELAYED, "REPORTED"),
    ],
)
def test_history_status_param(label, expected):
    assert history_status_param(label) == expected


def test_history_status_param_rejects_unknown_label():
    with pytest.raises(ValueError):
        history_status_param("Perdu")


def test_backend_delay_spellings_parse_as_delayed():
    assert OrderStatus("REPORTED") is OrderStatus.DELAYED
    assert OrderStatus("DELAY") is OrderStatus.DELAYED
    assert OrderStatus.DELAYED.wire_value == "REPORTED"
    assert OrderStatus.DELIVERED.wire_value == "DELIVERED"
    with pytest.raises(ValueError):
        OrderStatus("LOST")


def test_display_labels_cover_every_status():
    for status in OrderStatus:
        assert display_status(status)
    assert display_status(OrderStatus.ASSIGNED_TO_DELIVERY) == "En cours"
