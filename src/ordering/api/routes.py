"""FastAPI routes for the Ordering context."""

from fastapi import APIRouter, Request
from starlette.concurrency import run_in_threadpool

from ordering.api.schemas import (
    OrderDeletedResponse,
    OrderPlacedResponse,
    OrderResponse,
    StatusChangedResponse,
    UpdateStatusRequest,
)
from ordering.order.creation import CreateOrder
from ordering.order.engine import OrderEngine
from shared.http import read_json

order_router = APIRouter(prefix="/orders", tags=["orders"])


def _orders(request: Request) -> OrderEngine:
    return request.app.state.orders


@order_router.post("", status_code=201, response_model=OrderPlacedResponse)
async def create_order(request: Request) -> OrderPlacedResponse:
    command = CreateOrder.parse(await read_json(request))
    placement = await run_in_threadpool(_orders(request).create_order, command)
    return OrderPlacedResponse(order_id=placement.order_id, order_number=placement.order_number)


@order_router.get("", response_model=list[OrderResponse])
def list_orders(request: Request) -> list[OrderResponse]:
    return [OrderResponse.from_order(order) for order in _orders(request).list_orders()]


@order_router.get("/{order_id}", response_model=OrderResponse)
def get_order(order_id: int, request: Request) -> OrderResponse:
    return OrderResponse.from_order(_orders(request).get_order(order_id))


@order_router.put("/{order_id}/status", response_model=StatusChangedResponse)
def update_order_status(order_id: int, body: UpdateStatusRequest, request: Request) -> StatusChangedResponse:
    status = _orders(request).set_status(order_id, body.status)
    return StatusChangedResponse(new_status=status.value)


@order_router.delete("/{order_id}", response_model=OrderDeletedResponse)
def delete_order(order_id: int, request: Request) -> OrderDeletedResponse:
    order = _orders(request).delete_order(order_id)
    return OrderDeletedResponse(deleted_order=OrderResponse.from_order(order))
