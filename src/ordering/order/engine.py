"""Order placement and order lifecycle.

``create_order`` is a single storage transaction: the order row, every item
row and every stock decrement commit together or not at all. Each decrement
is one ``UPDATE`` clamped at zero, so concurrent orders against the same
product serialize on the row and stock never goes negative. Oversold stock is
tolerated rather than rejected.
"""

import structlog
from sqlalchemy import case, delete, insert, select, update
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import IntegrityError

from ordering.order.creation import CreateOrder
from ordering.order.order import Order, OrderItem, OrderPlacement, OrderStatus
from shared.errors import DuplicateOrderNumber, InvalidInput, NotFound
from storage.schema import order_items, orders, products
from storage.transaction import reading, transaction

logger = structlog.get_logger(__name__)


def _clamped_decrement(quantity: int):
    return case((products.c.stock > quantity, products.c.stock - quantity), else_=0)


class OrderEngine:
    def __init__(self, engine: Engine | None):
        self.engine = engine

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------
    def create_order(self, request: CreateOrder) -> OrderPlacement:
        if not isinstance(request, CreateOrder):
            request = CreateOrder.parse(request)

        with transaction(self.engine) as conn:
            taken = conn.execute(select(orders.c.id).where(orders.c.order_number == request.order_number)).first()
            if taken is not None:
                raise DuplicateOrderNumber(f"Order number {request.order_number!r} already exists")

            names = self._resolve_names(conn, request)

            try:
                result = conn.execute(
                    insert(orders).values(
                        order_number=request.order_number,
                        customer_name=request.customer_name,
                        customer_phone=request.customer_phone,
                        customer_email=request.customer_email,
                        customer_address=request.customer_address,
                        notes=request.notes,
                        payment_method=request.payment_method.value,
                        status=OrderStatus.PENDING.value,
                        subtotal=request.subtotal,
                        shipping=request.shipping,
                        total=request.total,
                    )
                )
            except IntegrityError as exc:
                raise DuplicateOrderNumber(f"Order number {request.order_number!r} already exists") from exc
            order_id = result.inserted_primary_key[0]

            for item in request.items:
                conn.execute(
                    insert(order_items).values(
                        order_id=order_id,
                        product_id=item.product_id,
                        product_name=item.product_name or names[item.product_id],
                        product_price=item.unit_price,
                        quantity=item.quantity,
                        total=item.line_total,
                    )
                )
                conn.execute(
                    update(products)
                    .where(products.c.id == item.product_id)
                    .values(stock=_clamped_decrement(item.quantity))
                )

        logger.info(
            "Order created",
            order_id=order_id,
            order_number=request.order_number,
            items=len(request.items),
            total=str(request.total),
        )
        return OrderPlacement(order_id=order_id, order_number=request.order_number)

    @staticmethod
    def _resolve_names(conn: Connection, request: CreateOrder) -> dict[int, str]:
        """Current catalogue names for items that did not carry one."""
        wanted = {item.product_id for item in request.items if item.product_name is None}
        if not wanted:
            return {}
        rows = conn.execute(select(products.c.id, products.c.name).where(products.c.id.in_(wanted))).all()
        names = {row.id: row.name for row in rows}
        missing = sorted(wanted - names.keys())
        if missing:
            raise InvalidInput(
                "Unknown product in order items",
                details={"items": f"Products {missing} not found and no product name given"},
            )
        return names

    def set_status(self, order_id: int, status) -> OrderStatus:
        """Move an order to ``status``. Any state may follow any other."""
        new_status = OrderStatus.parse(status)
        with transaction(self.engine) as conn:
            result = conn.execute(update(orders).where(orders.c.id == order_id).values(status=new_status.value))
            if result.rowcount == 0:
                raise NotFound(f"Order {order_id} not found")

        logger.info("Order status changed", order_id=order_id, status=new_status.value)
        return new_status

    def delete_order(self, order_id: int) -> Order:
        """Delete an order; its items go with it. Stock is not restored."""
        with transaction(self.engine) as conn:
            order = self._fetch(conn, orders.c.id == order_id, f"Order {order_id} not found")
            conn.execute(delete(orders).where(orders.c.id == order_id))

        logger.info("Order deleted", order_id=order_id, order_number=order.order_number)
        return order

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def list_orders(self) -> list[Order]:
        """All orders with their items, newest first."""
        with reading(self.engine) as conn:
            rows = conn.execute(select(orders).order_by(orders.c.created_at.desc(), orders.c.id.desc())).all()
            items = self._items_for(conn, [row.id for row in rows])
        return [Order.from_row(row, items.get(row.id, ())) for row in rows]

    def get_order(self, order_id: int) -> Order:
        with reading(self.engine) as conn:
            return self._fetch(conn, orders.c.id == order_id, f"Order {order_id} not found")

    def find_order(self, order_number: str) -> Order:
        with reading(self.engine) as conn:
            return self._fetch(conn, orders.c.order_number == order_number, f"Order {order_number!r} not found")

    def _fetch(self, conn: Connection, condition, missing: str) -> Order:
        row = conn.execute(select(orders).where(condition)).first()
        if row is None:
            raise NotFound(missing)
        return Order.from_row(row, self._items_for(conn, [row.id]).get(row.id, ()))

    @staticmethod
    def _items_for(conn: Connection, order_ids: list[int]) -> dict[int, list[OrderItem]]:
        if not order_ids:
            return {}
        query = select(order_items).where(order_items.c.order_id.in_(order_ids)).order_by(order_items.c.id)
        grouped: dict[int, list[OrderItem]] = {}
        for row in conn.execute(query):
            grouped.setdefault(row.order_id, []).append(OrderItem.from_row(row))
        return grouped
