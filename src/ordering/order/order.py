"""Order and OrderItem records, and the order status state machine.

States: pending, confirmed, processing, shipped, delivered, cancelled.
New orders start in ``pending``. No transition is forbidden: ``set_status``
only checks that the target is a known state, and cancelling an order does
not put stock back.

Order items are snapshots. Product name and unit price are copied at order
time, so later catalogue edits or deletions never change a placed order.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, ConfigDict

from shared.errors import InvalidStatus


class OrderStatus(Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"

    @classmethod
    def parse(cls, value) -> "OrderStatus":
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise InvalidStatus(
                f"Invalid status {value!r}",
                details={"allowed": [status.value for status in cls]},
            ) from None


class PaymentMethod(Enum):
    CASH = "cash"
    CARD = "card"
    TRANSFER = "transfer"


class OrderItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    order_id: int
    product_id: int
    product_name: str
    product_price: Decimal
    quantity: int
    total: Decimal
    created_at: datetime | None = None

    @classmethod
    def from_row(cls, row) -> "OrderItem":
        return cls.model_validate(dict(row._mapping))


class Order(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    order_number: str
    customer_name: str
    customer_phone: str
    customer_email: str | None = None
    customer_address: str
    notes: str | None = None
    payment_method: PaymentMethod
    status: OrderStatus
    subtotal: Decimal
    shipping: Decimal
    total: Decimal
    created_at: datetime | None = None
    updated_at: datetime | None = None
    items: list[OrderItem] = []

    @classmethod
    def from_row(cls, row, items=()) -> "Order":
        return cls.model_validate({**row._mapping, "items": list(items)})


class OrderPlacement(BaseModel):
    """What ``create_order`` hands back to the caller."""

    order_id: int
    order_number: str
