"""Order detail screen state: status transitions, attempt history and notes."""
import asyncio
from typing import Optional, Union

from courier_client.core import get_logger
from courier_client.domain.models import OrderStatus
from courier_client.domain import transitions
from courier_client.application.errors import CourierApiError, ValidationError
from courier_client.application.schemas import (
    DeliveryAttempt,
    DeliveryNote,
    NoteInput,
    Order,
    StatusUpdate,
)
from courier_client.application.session import SessionService
from courier_client.application.view_model import ViewModel
from courier_client.infrastructure.api import CourierApi
from courier_client.infrastructure.cache import OrderCache

logger = get_logger(__name__)

ACCEPT_ACTION = "accept"
STALE_MESSAGE = "Order status changed; reload the order"


class OrderDetailController(ViewModel):
    """Drives one order through the courier's status changes.

    The server is the source of truth: after any successful change the
    order is fetched again in full instead of patching local fields.
    """

    def __init__(self, api: CourierApi, session: SessionService, cache: OrderCache, order_id: int):
        super().__init__(api, session)
        self.cache = cache
        self.order_id = order_id
        self.order: Optional[Order] = None
        self.attempts: list[DeliveryAttempt] = []
        self.notes: list[DeliveryNote] = []
        self.selected_status: Optional[OrderStatus] = None
        self.reason: str = ""
        self.loading = False
        self.submitting = False
        self.attempts_error: Optional[str] = None
        # Set when a change went through but the order could not be fetched again
        self.stale = False

    # ---- view state ----

    @property
    def actions(self) -> list[Union[str, OrderStatus]]:
        """Actions to offer for the current status; empty once terminal or stale."""
        if self.order is None or self.stale:
            return []
        status = self.order.status
        if transitions.can_accept(status):
            return [ACCEPT_ACTION]
        return list(transitions.available_transitions(status))

    @property
    def can_submit(self) -> bool:
        return not self.submitting and transitions.can_submit(self.selected_status, self.reason)

    def select_status(self, status: Optional[OrderStatus]) -> None:
        self.selected_status = status

    def set_reason(self, text: str) -> None:
        self.reason = text

    def reset_form(self) -> None:
        self.selected_status = None
        self.reason = ""

    # ---- loading ----

    async def load(self, force: bool = False) -> bool:
        """Load the order and its attempt history side by side."""
        self.loading = True
        try:
            token = self._begin("load order")
            cached = None if force else self.cache.get(self.order_id)
            if cached is not None:
                self.order = cached
                self.stale = False
                await self._load_attempts(token)
                return True
            order_result, attempts_result = await asyncio.gather(
                self.api.get_order(token, self.order_id),
                self.api.list_delivery_attempts(token, self.order_id),
                return_exceptions=True,
            )
        except CourierApiError as exc:
            self._fail(exc, "load order")
            return False
        finally:
            self.loading = False

        self._apply_attempts(attempts_result)
        if isinstance(order_result, BaseException):
            if not isinstance(order_result, CourierApiError):
                raise order_result
            self._fail(order_result, "load order")
            return False
        self.order = order_result
        self.stale = False
        self.cache.put(order_result)
        return True

    async def _load_attempts(self, token: str) -> None:
        try:
            result = await self.api.list_delivery_attempts(token, self.order_id)
        except CourierApiError as exc:
            result = exc
        self._apply_attempts(result)

    def _apply_attempts(self, result) -> None:
        if isinstance(result, CourierApiError):
            # Attempt history is secondary; keep showing the order
            self.attempts_error = result.message
            logger.warning(f"Could not load delivery attempts for order {self.order_id}: {result.message}")
            return
        if isinstance(result, BaseException):
            raise result
        self.attempts_error = None
        self.attempts = sorted(result, key=lambda attempt: attempt.attempt_number)

    async def _refetch(self, token: str) -> bool:
        self.cache.invalidate(self.order_id)
        order_result, attempts_result = await asyncio.gather(
            self.api.get_order(token, self.order_id),
            self.api.list_delivery_attempts(token, self.order_id),
            return_exceptions=True,
        )
        self._apply_attempts(attempts_result)
        if isinstance(order_result, CourierApiError):
            self.stale = True
            self._fail(order_result, "refresh order")
            return False
        if isinstance(order_result, BaseException):
            raise order_result
        self.order = order_result
        self.stale = False
        self.cache.put(order_result)
        return True

    # ---- transitions ----

    async def accept(self) -> bool:
        """Take the order: ACCEPTED -> ASSIGNED_TO_DELIVERY.

        Returns True once the server has accepted the change, even if the
        refresh that follows fails; ``stale`` tells the two apart.
        """
        if self.submitting:
            return False
        if self.stale:
            self.error = STALE_MESSAGE
            return False
        if self.order is None or not transitions.can_accept(self.order.status):
            self.error = "This order cannot be accepted"
            return False

        self.submitting = True
        try:
            token = self._begin("accept order")
            ack = await self.api.accept_order(token, self.order_id)
            logger.info(
                f"Accepted order {ack.order_code}",
                extra={'extra_fields': {'order_id': ack.id, 'status': ack.status.value}},
            )
            await self._refetch(token)
        except CourierApiError as exc:
            self._fail(exc, "accept order")
            return False
        finally:
            self.submitting = False
        return True

    async def submit(self) -> bool:
        """Send the selected status (and reason) to the server.

        Invalid input is rejected locally without a request. On failure the
        order, the selected status and the reason are left as they were so
        the courier can retry.

        Returns True once the server has applied the change. If the order
        cannot be fetched again afterwards, ``stale`` is set and no further
        action is offered until ``load(force=True)`` succeeds.
        """
        if self.submitting:
            return False
        if self.stale:
            self.error = STALE_MESSAGE
            return False
        if self.order is None:
            self.error = "Order is not loaded"
            return False
        try:
            if self.selected_status is None:
                raise ValidationError("Select a status")
            transitions.validate_transition(self.order.status, self.selected_status, self.reason)
        except ValidationError as exc:
            self.error = exc.message
            return False

        target = self.selected_status
        reason = self.reason.strip() or None
        if target == OrderStatus.DELIVERED:
            reason = None
        update = StatusUpdate(status=target, reason=reason)

        self.submitting = True
        try:
            token = self._begin("update order status")
            ack = await self.api.update_order_status(token, self.order_id, update)
            logger.info(
                f"Order {ack.order_code} marked {ack.status.value}",
                extra={'extra_fields': {'order_id': ack.id, 'attempt_number': ack.attempt_number}},
            )
            self.reset_form()
            await self._refetch(token)
        except CourierApiError as exc:
            self._fail(exc, "update order status")
            return False
        finally:
            self.submitting = False
        return True

    # ---- notes ----

    async def load_notes(self) -> bool:
        try:
            token = self._begin("load notes")
            self.notes = await self.api.list_notes(token, self.order_id)
        except CourierApiError as exc:
            self._fail(exc, "load notes")
            return False
        return True

    async def add_note(self, content: str, is_private: bool = False) -> bool:
        if not content.strip():
            self.error = "Note cannot be empty"
            return False
        try:
            token = self._begin("add note")
            await self.api.create_note(token, self.order_id, NoteInput(content=content.strip(), is_private=is_private))
            self.cache.invalidate(self.order_id)
            self.notes = await self.api.list_notes(token, self.order_id)
        except CourierApiError as exc:
            self._fail(exc, "add note")
            return False
        return True

    async def edit_note(self, note_id: int, content: str, is_private: bool = False) -> bool:
        if not content.strip():
            self.error = "Note cannot be empty"
            return False
        try:
            token = self._begin("edit note")
            await self.api.update_note(
                token, self.order_id, note_id, NoteInput(content=content.strip(), is_private=is_private)
            )
            self.cache.invalidate(self.order_id)
            self.notes = await self.api.list_notes(token, self.order_id)
        except CourierApiError as exc:
            self._fail(exc, "edit note")
            return False
        return True

    async def delete_note(self, note_id: int) -> bool:
        try:
            token = self._begin("delete note")
            await self.api.delete_note(token, self.order_id, note_id)
            self.cache.invalidate(self.order_id)
            self.notes = await self.api.list_notes(token, self.order_id)
        except CourierApiError as exc:
            self._fail(exc, "delete note")
            return False
        return True
