"""Wires the gateway, session, cache and view-models together."""
from typing import Literal, Optional

import httpx

from courier_client.core import get_logger, setup_logging
from courier_client.core_settings import Settings, get_settings
from courier_client.domain.models import SessionStatus
from courier_client.application.finance import FinanceViewModel
from courier_client.application.history import OrderHistoryViewModel
from courier_client.application.order_detail import OrderDetailController
from courier_client.application.order_lists import OrderListViewModel
from courier_client.application.session import SessionService
from courier_client.infrastructure.api import CourierApi
from courier_client.infrastructure.cache import OrderCache
from courier_client.infrastructure.token_store import FileTokenStore, TokenStore

logger = get_logger(__name__)


class CourierApp:
    def __init__(
        self,
        settings: Optional[Settings] = None,
        store: Optional[TokenStore] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.settings = settings or get_settings()
        self.api = CourierApi(self.settings, client=http_client)
        self.session = SessionService(self.api, store or FileTokenStore(self.settings.TOKEN_FILE))
        self.cache = OrderCache(maxsize=self.settings.ORDER_CACHE_SIZE, ttl=self.settings.ORDER_CACHE_TTL)
        # Orders cached under one courier must not leak to the next
        self.session.on_auth_change(self._on_auth_change)

    async def start(self, configure_logging: bool = False) -> SessionStatus:
        if configure_logging:
            setup_logging(self.settings.SERVICE_NAME, self.settings.LOG_LEVEL)
        status = await self.session.restore()
        logger.info(f"Courier app started, session {status.value}")
        return status

    async def aclose(self) -> None:
        await self.api.aclose()

    async def __aenter__(self) -> "CourierApp":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    def _on_auth_change(self, status: SessionStatus, user) -> None:
        self.cache.clear()

    def order_detail(self, order_id: int) -> OrderDetailController:
        return OrderDetailController(self.api, self.session, self.cache, order_id)

    def orders(self, source: Literal["latest", "all"] = "latest") -> OrderListViewModel:
        return OrderListViewModel(self.api, self.session, self.cache, source=source)

    def history(self) -> OrderHistoryViewModel:
        return OrderHistoryViewModel(self.api, self.session, page_size=self.settings.HISTORY_PAGE_SIZE)

    def finance(self) -> FinanceViewModel:
        return FinanceViewModel(self.api, self.session)
