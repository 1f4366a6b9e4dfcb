from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, field_serializer, model_validator
from pydantic.alias_generators import to_camel
from datetime import datetime
from typing import Annotated, Optional, Any

from courier_client.domain.models import OrderStatus, AttemptOutcome, COD_PAYMENT_METHODS


class ApiModel(BaseModel):
    """Base for every wire model: camelCase on the wire, snake_case in Python."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


def _coerce_status(value: Any) -> Any:
    # Routes REPORTED and DELAY through OrderStatus._missing_
    if isinstance(value, str):
        return OrderStatus(value)
    return value

Status = Annotated[OrderStatus, BeforeValidator(_coerce_status)]


# ---- users ----

class DeliveryMan(ApiModel):
    id: int
    city: Optional[str] = None
    vehicle_type: Optional[str] = None
    active: bool
    base_fee: Optional[float] = None

class User(ApiModel):
    id: int
    name: str
    email: str
    phone: Optional[str] = None
    image: Optional[str] = None
    role: str
    delivery_man: DeliveryMan

class UserInfo(ApiModel):
    id: int
    name: str
    phone: Optional[str] = None
    email: Optional[str] = None
    image: Optional[str] = None

class LoginResult(ApiModel):
    token: str = Field(min_length=1)
    user: User

class ProfileUpdate(ApiModel):
    name: str = Field(min_length=1)
    phone: Optional[str] = None
    vehicle_type: Optional[str] = None
    image: Optional[str] = None
    notification_enabled: Optional[bool] = None


# ---- orders ----

class Product(ApiModel):
    id: int
    name: str
    image: Optional[str] = None
    sku: Optional[str] = None

class OrderItem(ApiModel):
    id: int
    order_id: int
    product_id: int
    quantity: int
    price: float
    original_price: Optional[float] = None
    is_free: bool = False
    product: Product

class Merchant(ApiModel):
    id: int
    company_name: str
    user: Optional[UserInfo] = None

class DeliveryManInfo(ApiModel):
    id: int
    user: Optional[UserInfo] = None

class DeliveryNote(ApiModel):
    id: int
    order_id: int
    content: str
    is_private: bool
    delivery_man_id: Optional[int] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

class Order(ApiModel):
    id: int
    order_code: str
    customer_name: str
    customer_phone: str
    address: str
    city: str
    note: Optional[str] = None
    total_price: float
    payment_method: str
    merchant_earning: Optional[float] = None
    status: Status
    merchant_id: Optional[int] = None
    delivery_man_id: Optional[int] = None
    discount_type: Optional[str] = None
    discount_value: Optional[float] = None
    discount_description: Optional[str] = None
    original_total_price: Optional[float] = None
    total_discount: Optional[float] = None
    created_at: datetime
    delivered_at: Optional[datetime] = None
    updated_at: datetime
    order_items: list[OrderItem]
    merchant: Optional[Merchant] = None
    delivery_man: Optional[DeliveryManInfo] = None
    delivery_notes: Optional[list[DeliveryNote]] = None

    @model_validator(mode="after")
    def check_delivered_at(self):
        if self.delivered_at is not None and self.status != OrderStatus.DELIVERED:
            raise ValueError(f"deliveredAt is set on an order in status {self.status.value}")
        return self

    @property
    def is_cash_on_delivery(self) -> bool:
        return self.payment_method.upper() in COD_PAYMENT_METHODS

    @property
    def product_summary(self) -> str:
        """Short product label for order cards."""
        names = [item.product.name for item in self.order_items]
        if not names:
            return "Commande"
        if len(names) == 1:
            return names[0]
        return f"{names[0]} +{len(names) - 1} autres"

class OrdersResponse(ApiModel):
    orders: list[Order]

class OrderResponse(ApiModel):
    order: Order

class OrderHistoryEntry(ApiModel):
    id: int
    order_id: Optional[int] = None
    order_code: str
    customer_name: str
    delivery_address: Optional[str] = None
    city: Optional[str] = None
    status: Status
    date: Optional[str] = None
    amount: Optional[str] = None
    total_price: float
    items_count: Optional[int] = None
    delivery_time: Optional[str] = None
    note: Optional[str] = None
    customer_phone: Optional[str] = None
    payment_method: Optional[str] = None
    merchant: Optional[Merchant] = None
    created_at: datetime
    delivered_at: Optional[datetime] = None

class HistoryPage(ApiModel):
    orders: list[OrderHistoryEntry]
    has_more: bool
    total_count: int

class OrderStats(ApiModel):
    total_orders: int
    delivered: int
    cancelled: int
    reported: int
    total_earnings: float
    avg_delivery_time: str
    success_rate: float
    current_streak: int
    month: str

class OrderStatsResponse(ApiModel):
    stats: OrderStats

class OrderAck(ApiModel):
    """Slim order returned by accept and status-update calls."""
    id: int
    order_code: str
    status: Status
    delivery_man_id: Optional[int] = None
    attempt_number: Optional[int] = None

class OrderAckResponse(ApiModel):
    success: bool
    message: Optional[str] = None
    order: OrderAck

class StatusUpdate(ApiModel):
    status: Status
    reason: Optional[str] = None
    notes: Optional[str] = None
    location: Optional[str] = None

    @field_serializer("status")
    def serialize_status(self, status: OrderStatus) -> str:
        return status.wire_value


# ---- attempts and notes ----

class DeliveryAttempt(ApiModel):
    model_config = ConfigDict(frozen=True)

    id: int
    order_id: int
    attempt_number: int
    delivery_man_id: Optional[int] = None
    attempted_at: datetime
    status: AttemptOutcome
    reason: Optional[str] = None
    notes: Optional[str] = None
    location: Optional[str] = None

class AttemptsResponse(ApiModel):
    attempts: list[DeliveryAttempt]

class NotesResponse(ApiModel):
    notes: list[DeliveryNote]

class NoteResponse(ApiModel):
    note: DeliveryNote

class NoteInput(ApiModel):
    content: str = Field(min_length=1)
    is_private: bool = False


# ---- finance ----

class FinanceStatus(ApiModel):
    available_balance: float
    total_earned: float
    collected_cod: float = Field(alias="collectedCOD")
    pending_earnings: float

class FinanceStatistics(ApiModel):
    total_deliveries: int
    successful_deliveries: int
    cod_orders_count: int = Field(alias="codOrdersCount")
    total_cod_amount: float = Field(alias="totalCODAmount")
    total_earnings_from_orders: float
    total_transferred: float

class MoneyTransfer(ApiModel):
    id: int
    amount: float
    transfer_date: Optional[datetime] = None
    note: Optional[str] = None

class DeliveredOrder(ApiModel):
    id: int
    order_code: str
    total_price: float
    delivered_at: Optional[datetime] = None

class CodOrder(DeliveredOrder):
    customer_name: str
    address: str
    merchant_name: Optional[str] = None

class FinanceData(ApiModel):
    current_status: FinanceStatus
    statistics: FinanceStatistics
    money_transfers: list[MoneyTransfer]
    cod_orders: list[CodOrder] = Field(default_factory=list, alias="codOrders")
    delivered_orders: list[DeliveredOrder] = Field(default_factory=list)

class FinanceResponse(ApiModel):
    success: bool
    data: FinanceData


class UserResponse(ApiModel):
    user: User


def parse_error_body(body: Any) -> Optional[str]:
    """Pull the server's error message out of a decoded JSON body."""
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, str) and error.strip():
            return error
        if isinstance(error, dict) and isinstance(error.get("message"), str):
            return error["message"]
    return None
