import httpx
import pytest

from courier_client.application.errors import (
    AuthError,
    NetworkError,
    NotFoundError,
    ServerError,
    UnexpectedResponseError,
    ValidationError,
)
from courier_client.application.schemas import NoteInput, ProfileUpdate, StatusUpdate
from courier_client.domain.models import AttemptOutcome, OrderStatus
from courier_client.infrastructure.api import CourierApi

from tests.conftest import BASE_URL, run
from tests.fake_backend import VALID_EMAIL, VALID_PASSWORD, VALID_TOKEN, make_order


def test_sign_in_returns_token_and_user(api):
    result = run(api.sign_in(VALID_EMAIL, VALID_PASSWORD))
    assert result.token == VALID_TOKEN
    assert result.user.delivery_man.city == "Casablanca"
    assert result.user.delivery_man.base_fee == 15.0


def test_sign_in_surfaces_server_message(api):
    with pytest.raises(AuthError) as exc:
        run(api.sign_in(VALID_EMAIL, "wrong"))
    assert exc.value.message == "Invalid email or password"
    assert exc.value.status_code == 401


def test_missing_token_fails_before_any_request(api, backend):
    with pytest.raises(AuthError):
        run(api.list_latest_orders(""))
    assert backend.requests == []


def test_rejected_token_is_auth_error(api):
    with pytest.raises(AuthError) as exc:
        run(api.me("stale"))
    assert exc.value.message == "Invalid token"


def test_get_order_maps_camel_case(api, backend):
    backend.add_order(make_order(12, status="DELIVERED"))
    order = run(api.get_order(VALID_TOKEN, 12))
    assert order.order_code == "ORD-00012"
    assert order.status is OrderStatus.DELIVERED
    assert order.delivered_at is not None
    assert order.order_items[0].product.name == "Argan Oil"
    assert order.merchant.company_name == "Souk Market"
    assert order.is_cash_on_delivery is True


def test_unknown_order_is_not_found(api):
    with pytest.raises(NotFoundError) as exc:
        run(api.get_order(VALID_TOKEN, 999))
    assert exc.value.message == "Order not found"


def test_non_json_error_falls_back_to_generic_message(api, backend):
    backend.fail("GET", "/api/mobile/orders/latest", 502, raw=b"<html>Bad gateway</html>")
    with pytest.raises(ServerError) as exc:
        run(api.list_latest_orders(VALID_TOKEN))
    assert exc.value.message == "Failed to fetch latest orders"
    assert exc.value.status_code == 502


def test_non_json_success_body_is_unexpected(api, backend):
    backend.fail("GET", "/api/mobile/finance", 200, raw=b"maintenance")
    with pytest.raises(UnexpectedResponseError):
        run(api.get_finance_summary(VALID_TOKEN))


def test_shape_mismatch_is_unexpected(api, backend):
    backend.fail("GET", "/api/mobile/orders/latest", 200, body={"items": []})
    with pytest.raises(UnexpectedResponseError) as exc:
        run(api.list_latest_orders(VALID_TOKEN))
    assert exc.value.message == "Invalid orders response"


def test_delivered_at_on_undelivered_order_is_rejected(api, backend):
    backend.add_order(make_order(4, status="ASSIGNED_TO_DELIVERY", deliveredAt="2026-10-01T15:00:00Z"))
    with pytest.raises(UnexpectedResponseError):
        run(api.get_order(VALID_TOKEN, 4))


def test_server_validation_error(api, backend):
    backend.add_order(make_order(5))
    with pytest.raises(ValidationError) as exc:
        run(api.update_order_status(VALID_TOKEN, 5, StatusUpdate(status=OrderStatus.CANCELLED)))
    assert exc.value.message == "Reason is required"


def test_update_status_sends_reason_and_records_attempt(api, backend):
    backend.add_order(make_order(5))
    ack = run(api.update_order_status(
        VALID_TOKEN, 5, StatusUpdate(status=OrderStatus.DELAYED, reason="Client absent")
    ))
    assert ack.status is OrderStatus.DELAYED
    assert ack.attempt_number == 1
    assert backend.orders[5]["status"] == "REPORTED"

    attempts = run(api.list_delivery_attempts(VALID_TOKEN, 5))
    assert len(attempts) == 1
    assert attempts[0].status is AttemptOutcome.FAILED
    assert attempts[0].reason == "Client absent"


def test_status_update_sends_backend_delay_value():
    update = StatusUpdate(status=OrderStatus.DELAYED, reason="Client absent")
    assert update.to_wire() == {"status": "REPORTED", "reason": "Client absent"}
    assert StatusUpdate(status="REPORTED", reason="x").status is OrderStatus.DELAYED


def test_transport_failure_is_network_error(settings):
    def refuse(request):
        raise httpx.ConnectError("connection refused", request=request)

    client = httpx.AsyncClient(transport=httpx.MockTransport(refuse), base_url=BASE_URL)
    api = CourierApi(settings, client=client)
    with pytest.raises(NetworkError):
        run(api.get_order(VALID_TOKEN, 1))


def test_history_maps_label_to_backend_status(api, backend):
    backend.add_order(make_order(1, status="DELIVERED"))
    backend.add_order(make_order(2, status="CANCELLED"))
    page = run(api.list_order_history(VALID_TOKEN, status="Livré", page_size=10))
    assert [o.order_code for o in page.orders] == ["ORD-00001"]
    assert backend.calls("GET", "/api/mobile/orders")[-1] == {"status": "DELIVERED", "take": "10"}


def test_history_all_sends_no_status(api, backend):
    backend.add_order(make_order(1, status="DELIVERED"))
    run(api.list_order_history(VALID_TOKEN, status="Tous", page_size=10, offset=0))
    run(api.list_order_history(VALID_TOKEN, status="All", page_size=10, offset=10))
    first, second = backend.calls("GET", "/api/mobile/orders")
    assert "status" not in first and "status" not in second
    assert second["skip"] == "10"


def test_accept_order(api, backend):
    backend.add_order(make_order(8, status="ACCEPTED"))
    ack = run(api.accept_order(VALID_TOKEN, 8))
    assert ack.status is OrderStatus.ASSIGNED_TO_DELIVERY
    assert ack.delivery_man_id == 3


def test_accept_without_success_flag_is_unexpected(api, backend):
    backend.fail(
        "POST", "/api/mobile/orders/8/accept", 200,
        body={"success": False, "order": {"id": 8, "orderCode": "ORD-00008", "status": "ACCEPTED"}},
    )
    with pytest.raises(UnexpectedResponseError):
        run(api.accept_order(VALID_TOKEN, 8))


def test_notes_round_trip(api, backend):
    backend.add_order(make_order(3))
    note = run(api.create_note(VALID_TOKEN, 3, NoteInput(content="Gate code 1234", is_private=True)))
    assert note.is_private is True
    updated = run(api.update_note(VALID_TOKEN, 3, note.id, NoteInput(content="Gate code 4321")))
    assert updated.content == "Gate code 4321"
    assert updated.updated_at is not None
    run(api.delete_note(VALID_TOKEN, 3, note.id))
    assert run(api.list_notes(VALID_TOKEN, 3)) == []


def test_finance_and_stats(api, backend):
    backend.add_order(make_order(1, status="DELIVERED"))
    finance = run(api.get_finance_summary(VALID_TOKEN))
    assert finance.current_status.collected_cod == 800.0
    assert finance.statistics.total_cod_amount == 3600.0
    assert len(finance.money_transfers) == 5

    stats = run(api.get_order_stats(VALID_TOKEN))
    assert stats.delivered == 1


def test_update_profile_sends_camel_case(api, backend):
    user = run(api.update_profile(VALID_TOKEN, ProfileUpdate(name="Youssef A.", vehicle_type="VELO")))
    assert user.name == "Youssef A."
    assert user.delivery_man.vehicle_type == "VELO"
