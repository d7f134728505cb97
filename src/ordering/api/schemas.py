"""Pydantic request/response schemas for the Ordering API.

Order creation is parsed by ``CreateOrder`` itself so that the legacy
camelCase payload keeps working; only the status change request and the
responses are declared here.
"""

from datetime import datetime

from pydantic import BaseModel

from ordering.order.order import Order, OrderItem
from shared.money import as_number


class UpdateStatusRequest(BaseModel):
    model_config = {"json_schema_extra": {"examples": [{"status": "shipped"}]}}

    # Validated by the engine so an unknown value answers INVALID_STATUS.
    status: str


class OrderPlacedResponse(BaseModel):
    success: bool = True
    message: str = "Order created"
    order_id: int
    order_number: str


class StatusChangedResponse(BaseModel):
    success: bool = True
    message: str = "Status updated"
    new_status: str


class OrderItemResponse(BaseModel):
    id: int
    product_id: int
    product_name: str
    product_price: float
    quantity: int
    total: float

    @classmethod
    def from_item(cls, item: OrderItem) -> "OrderItemResponse":
        return cls(
            id=item.id,
            product_id=item.product_id,
            product_name=item.product_name,
            product_price=as_number(item.product_price),
            quantity=item.quantity,
            total=as_number(item.total),
        )


class OrderResponse(BaseModel):
    id: int
    order_number: str
    customer_name: str
    customer_phone: str
    customer_email: str | None = None
    customer_address: str
    notes: str | None = None
    payment_method: str
    status: str
    subtotal: float
    shipping: float
    total: float
    created_at: datetime | None = None
    updated_at: datetime | None = None
    items: list[OrderItemResponse] = []

    @classmethod
    def from_order(cls, order: Order) -> "OrderResponse":
        return cls(
            id=order.id,
            order_number=order.order_number,
            customer_name=order.customer_name,
            customer_phone=order.customer_phone,
            customer_email=order.customer_email,
            customer_address=order.customer_address,
            notes=order.notes,
            payment_method=order.payment_method.value,
            status=order.status.value,
            subtotal=as_number(order.subtotal),
            shipping=as_number(order.shipping),
            total=as_number(order.total),
            created_at=order.created_at,
            updated_at=order.updated_at,
            items=[OrderItemResponse.from_item(item) for item in order.items],
        )


class OrderDeletedResponse(BaseModel):
    message: str = "Order deleted"
    deleted_order: OrderResponse
