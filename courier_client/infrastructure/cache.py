from typing import Iterable, Optional
from cachetools import TTLCache

from courier_client.application.schemas import Order


class OrderCache:
    """Bounded cache of full orders keyed by id.

    Entries expire after ``ttl`` seconds and are dropped explicitly by
    ``invalidate`` after any successful mutation of that order.
    """

    def __init__(self, maxsize: int = 256, ttl: float = 300):
        self._cache: TTLCache = TTLCache(maxsize=maxsize, ttl=ttl)

    def get(self, order_id: int) -> Optional[Order]:
        return self._cache.get(order_id)

    def put(self, order: Order) -> None:
        self._cache[order.id] = order

    def put_many(self, orders: Iterable[Order]) -> None:
        for order in orders:
            self.put(order)

    def invalidate(self, order_id: int) -> None:
        self._cache.pop(order_id, None)

    def clear(self) -> None:
        self._cache.clear()

    def __contains__(self, order_id: int) -> bool:
        return order_id in self._cache

    def __len__(self) -> int:
        return len(self._cache)
