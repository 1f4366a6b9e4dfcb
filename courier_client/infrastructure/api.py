"""HTTP gateway to the courier mobile API.

Each method is a single request mapped to a typed result or a
``CourierApiError``. No retries and no caching happen at this level.
"""
import time
from typing import Any, Optional, Type, TypeVar

import httpx
from pydantic import ValidationError as SchemaError

from courier_client.core import get_logger
from courier_client.core_settings import Settings, get_settings
from courier_client.domain.transitions import history_status_param
from courier_client.application.errors import (
    AuthError,
    NetworkError,
    ServerError,
    UnexpectedResponseError,
    error_for_status,
)
from courier_client.application.schemas import (
    ApiModel,
    AttemptsResponse,
    DeliveryAttempt,
    DeliveryNote,
    FinanceData,
    FinanceResponse,
    HistoryPage,
    LoginResult,
    NoteInput,
    NoteResponse,
    NotesResponse,
    Order,
    OrderAck,
    OrderAckResponse,
    OrderResponse,
    OrdersResponse,
    OrderStats,
    OrderStatsResponse,
    ProfileUpdate,
    StatusUpdate,
    User,
    UserResponse,
    parse_error_body,
)

logger = get_logger(__name__)

M = TypeVar("M", bound=ApiModel)

MOBILE_PREFIX = "/api/mobile"


class CourierApi:
    def __init__(self, settings: Optional[Settings] = None, client: Optional[httpx.AsyncClient] = None):
        self.settings = settings or get_settings()
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=self.settings.API_BASE_URL,
            timeout=self.settings.HTTP_TIMEOUT,
        )

    async def __aenter__(self) -> "CourierApi":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    # ---- transport ----

    async def _request(
        self,
        method: str,
        path: str,
        *,
        fallback: str,
        token: Optional[str] = None,
        authenticated: bool = True,
        json: Optional[dict] = None,
        params: Optional[dict] = None,
    ) -> Any:
        """Send one request and return the decoded JSON body (None when empty)."""
        headers = {"Content-Type": "application/json"}
        if authenticated:
            if not token:
                raise AuthError("Not authenticated")
            headers["Authorization"] = f"Bearer {token}"

        url = f"{MOBILE_PREFIX}{path}"
        start_time = time.time()
        try:
            response = await self._client.request(method, url, headers=headers, json=json, params=params)
        except httpx.TransportError as exc:
            logger.warning(
                f"Request failed: {method} {url}",
                extra={'extra_fields': {'method': method, 'path': url, 'error': type(exc).__name__}},
            )
            raise NetworkError() from exc
        duration = time.time() - start_time

        body = _decode_json(response)
        if response.is_error:
            message = parse_error_body(body) or fallback
            logger.warning(
                f"Request rejected: {method} {url}",
                extra={
                    'extra_fields': {'method': method, 'path': url, 'status_code': response.status_code, 'error': message},
                    'duration': duration,
                },
            )
            raise error_for_status(response.status_code, message)

        logger.debug(
            f"Request completed: {method} {url}",
            extra={
                'extra_fields': {'method': method, 'path': url, 'status_code': response.status_code},
                'duration': duration,
            },
        )
        if body is None and response.content.strip():
            raise UnexpectedResponseError(status_code=response.status_code)
        return body

    @staticmethod
    def _parse(model: Type[M], body: Any, message: str = "Invalid server response") -> M:
        if body is None:
            raise UnexpectedResponseError(message)
        try:
            return model.model_validate(body)
        except SchemaError as exc:
            logger.error(
                f"{model.__name__} did not match the expected shape",
                extra={'extra_fields': {'errors': exc.errors(include_url=False)}},
            )
            raise UnexpectedResponseError(message) from exc

    # ---- auth ----

    async def sign_in(self, email: str, password: str) -> LoginResult:
        body = await self._request(
            "POST", "/auth/login",
            fallback="Login failed",
            authenticated=False,
            json={"email": email, "password": password},
        )
        return self._parse(LoginResult, body)

    async def me(self, token: str) -> User:
        body = await self._request("GET", "/auth/me", token=token, fallback="Unauthorized")
        return self._parse(UserResponse, body).user

    async def logout(self, token: str) -> None:
        await self._request("POST", "/auth/logout", token=token, fallback="Logout failed")

    async def update_profile(self, token: str, data: ProfileUpdate) -> User:
        body = await self._request(
            "PUT", "/profile",
            token=token,
            fallback="Failed to update profile",
            json=data.to_wire(),
        )
        return self._parse(UserResponse, body, "Invalid response from server").user

    # ---- orders ----

    async def list_latest_orders(self, token: str) -> list[Order]:
        body = await self._request("GET", "/orders/latest", token=token, fallback="Failed to fetch latest orders")
        return self._parse(OrdersResponse, body, "Invalid orders response").orders

    async def list_all_orders(self, token: str) -> list[Order]:
        body = await self._request("GET", "/orders", token=token, fallback="Failed to fetch all orders")
        return self._parse(OrdersResponse, body, "Invalid orders response").orders

    async def list_order_history(
        self,
        token: str,
        status: Optional[str] = None,
        page_size: int = 20,
        offset: int = 0,
    ) -> HistoryPage:
        """Fetch one page of history; ``status`` is a filter label such as "Livré" or "All"."""
        params: dict[str, Any] = {}
        status_param = history_status_param(status)
        if status_param is not None:
            params["status"] = status_param
        if page_size:
            params["take"] = page_size
        if offset:
            params["skip"] = offset
        body = await self._request(
            "GET", "/orders",
            token=token,
            fallback="Failed to fetch order history",
            params=params,
        )
        return self._parse(HistoryPage, body, "Invalid order history response")

    async def get_order_stats(self, token: str) -> OrderStats:
        body = await self._request("GET", "/orders/stats", token=token, fallback="Failed to fetch order statistics")
        return self._parse(OrderStatsResponse, body, "Invalid order statistics response").stats

    async def get_order(self, token: str, order_id: int) -> Order:
        body = await self._request("GET", f"/orders/{order_id}", token=token, fallback="Failed to fetch order details")
        return self._parse(OrderResponse, body, "Invalid order details response").order

    async def accept_order(self, token: str, order_id: int) -> OrderAck:
        body = await self._request("POST", f"/orders/{order_id}/accept", token=token, fallback="Failed to accept order")
        result = self._parse(OrderAckResponse, body, "Invalid accept order response")
        if not result.success:
            raise UnexpectedResponseError(result.message or "Invalid accept order response")
        return result.order

    async def update_order_status(self, token: str, order_id: int, update: StatusUpdate) -> OrderAck:
        body = await self._request(
            "PATCH", f"/orders/{order_id}/status",
            token=token,
            fallback="Failed to update order status",
            json=update.to_wire(),
        )
        result = self._parse(OrderAckResponse, body, "Invalid update order status response")
        if not result.success:
            raise UnexpectedResponseError(result.message or "Invalid update order status response")
        return result.order

    async def list_delivery_attempts(self, token: str, order_id: int) -> list[DeliveryAttempt]:
        body = await self._request(
            "GET", f"/orders/{order_id}/attempts",
            token=token,
            fallback="Failed to fetch delivery attempts",
        )
        return self._parse(AttemptsResponse, body).attempts

    # ---- notes ----

    async def list_notes(self, token: str, order_id: int) -> list[DeliveryNote]:
        body = await self._request("GET", f"/orders/{order_id}/note", token=token, fallback="Failed to fetch notes")
        return self._parse(NotesResponse, body).notes

    async def create_note(self, token: str, order_id: int, note: NoteInput) -> DeliveryNote:
        body = await self._request(
            "POST", f"/orders/{order_id}/note",
            token=token,
            fallback="Failed to add note",
            json=note.to_wire(),
        )
        return self._parse(NoteResponse, body).note

    async def update_note(self, token: str, order_id: int, note_id: int, note: NoteInput) -> DeliveryNote:
        body = await self._request(
            "PUT", f"/orders/{order_id}/note/{note_id}",
            token=token,
            fallback="Failed to update note",
            json=note.to_wire(),
        )
        return self._parse(NoteResponse, body).note

    async def delete_note(self, token: str, order_id: int, note_id: int) -> None:
        await self._request(
            "DELETE", f"/orders/{order_id}/note/{note_id}",
            token=token,
            fallback="Failed to delete note",
        )

    # ---- finance ----

    async def get_finance_summary(self, token: str) -> FinanceData:
        body = await self._request("GET", "/finance", token=token, fallback="Failed to fetch finance data")
        result = self._parse(FinanceResponse, body, "Invalid finance response")
        if not result.success:
            raise ServerError("Failed to fetch finance data")
        return result.data


def _decode_json(response: httpx.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return None

