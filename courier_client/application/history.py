from typing import Optional

from courier_client.core import get_logger
from courier_client.domain.transitions import history_status_param
from courier_client.application.errors import AuthError, CourierApiError
from courier_client.application.schemas import OrderHistoryEntry, OrderStats
from courier_client.application.session import SessionService
from courier_client.application.view_model import ViewModel
from courier_client.infrastructure.api import CourierApi

logger = get_logger(__name__)

DEFAULT_FILTER = "All"


class OrderHistoryViewModel(ViewModel):
    """Filtered, paginated order history.

    Pages are appended in arrival order. Rows are neither re-sorted nor
    de-duplicated across pages.
    """

    def __init__(self, api: CourierApi, session: SessionService, page_size: int = 20):
        super().__init__(api, session)
        self.page_size = page_size
        self.filter_label: str = DEFAULT_FILTER
        self.orders: list[OrderHistoryEntry] = []
        self.has_more = True
        self.total_count = 0
        self.stats: Optional[OrderStats] = None
        self.loading = False
        # Bumped on every reset; a page fetched under an older generation is dropped
        self._generation = 0

    @property
    def offset(self) -> int:
        return len(self.orders)

    def _reset(self) -> None:
        self._generation += 1
        self.orders = []
        self.has_more = True
        self.total_count = 0
        self.loading = False

    async def set_filter(self, label: str) -> bool:
        """Switch filter, clear what was accumulated, and load the first page."""
        history_status_param(label)
        self.filter_label = label
        self._reset()
        return await self._load_page()

    async def refresh(self) -> bool:
        self._reset()
        return await self._load_page()

    async def load_more(self) -> bool:
        if self.loading or not self.has_more:
            return False
        return await self._load_page()

    async def _load_page(self) -> bool:
        generation = self._generation
        label = self.filter_label
        offset = self.offset
        self.loading = True
        try:
            token = self._begin("load history")
            page = await self.api.list_order_history(
                token,
                status=label,
                page_size=self.page_size,
                offset=offset,
            )
        except CourierApiError as exc:
            if generation == self._generation:
                self._fail(exc, "load history")
            elif isinstance(exc, AuthError):
                self.session.expire()
            return False
        finally:
            if generation == self._generation:
                self.loading = False

        if generation != self._generation:
            logger.debug(f"Dropping history page for stale filter {label!r}")
            return False

        self.orders = self.orders + page.orders
        self.has_more = page.has_more
        self.total_count = page.total_count
        return True

    async def load_stats(self) -> bool:
        """Monthly summary shown above the history list."""
        try:
            token = self._begin("load order stats")
            self.stats = await self.api.get_order_stats(token)
        except CourierApiError as exc:
            self._fail(exc, "load order stats")
            return False
        return True
