from typing import Optional

from courier_client.application.errors import CourierApiError
from courier_client.application.schemas import FinanceData, MoneyTransfer
from courier_client.application.view_model import ViewModel


# Transfers shown on the dashboard before "see all"
RECENT_TRANSFER_LIMIT = 3


def format_currency(amount: float) -> str:
    return f"{amount:.2f} MAD"


class FinanceViewModel(ViewModel):
    """Earnings and COD dashboard. Figures are computed server-side."""

    def __init__(self, api, session):
        super().__init__(api, session)
        self.data: Optional[FinanceData] = None
        self.loading = False

    async def load(self) -> bool:
        self.loading = True
        try:
            token = self._begin("load finance")
            self.data = await self.api.get_finance_summary(token)
        except CourierApiError as exc:
            self._fail(exc, "load finance")
            return False
        finally:
            self.loading = False
        return True

    async def refresh(self) -> bool:
        return await self.load()

    def recent_transfers(self, limit: int = RECENT_TRANSFER_LIMIT) -> list[MoneyTransfer]:
        if self.data is None:
            return []
        return self.data.money_transfers[:limit]

    @property
    def has_more_transfers(self) -> bool:
        return self.data is not None and len(self.data.money_transfers) > RECENT_TRANSFER_LIMIT
