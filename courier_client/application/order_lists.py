from typing import Literal, Union

from courier_client.domain.models import OrderStatus
from courier_client.application.errors import CourierApiError
from courier_client.application.schemas import Order
from courier_client.application.session import SessionService
from courier_client.application.view_model import ViewModel
from courier_client.infrastructure.api import CourierApi
from courier_client.infrastructure.cache import OrderCache

ALL = "all"


class OrderListViewModel(ViewModel):
    """Latest orders (home screen) or all orders (orders screen).

    Filtering by status and searching happen locally on the loaded list.
    """

    def __init__(
        self,
        api: CourierApi,
        session: SessionService,
        cache: OrderCache,
        source: Literal["latest", "all"] = "latest",
    ):
        super().__init__(api, session)
        if source not in ("latest", "all"):
            raise ValueError(f"Unknown order source: {source!r}")
        self.cache = cache
        self.source = source
        self.orders: list[Order] = []
        self.status_filter: Union[OrderStatus, str] = ALL
        self.search_query = ""
        self.loading = False
        self.closed = False

    async def load(self) -> bool:
        self.loading = True
        try:
            token = self._begin(f"load {self.source} orders")
            if self.source == "latest":
                orders = await self.api.list_latest_orders(token)
            else:
                orders = await self.api.list_all_orders(token)
        except CourierApiError as exc:
            if not self.closed:
                self._fail(exc, f"load {self.source} orders")
            return False
        finally:
            if not self.closed:
                self.loading = False

        if self.closed:
            return False
        self.orders = orders
        self.cache.put_many(orders)
        return True

    def close(self) -> None:
        """Stop accepting results; a request still in flight is ignored when it lands."""
        self.closed = True

    def set_status_filter(self, status: Union[OrderStatus, str]) -> None:
        self.status_filter = status if status == ALL else OrderStatus(status)

    def set_search_query(self, query: str) -> None:
        self.search_query = query

    @property
    def visible_orders(self) -> list[Order]:
        filtered = self.orders
        if self.status_filter != ALL:
            filtered = [order for order in filtered if order.status == self.status_filter]
        query = self.search_query.strip().lower()
        if query:
            filtered = [order for order in filtered if _matches(order, query)]
        return filtered


def _matches(order: Order, query: str) -> bool:
    merchant = order.merchant.company_name if order.merchant else ""
    return any(
        query in field.lower()
        for field in (order.order_code, order.customer_name, order.city, merchant)
    )
