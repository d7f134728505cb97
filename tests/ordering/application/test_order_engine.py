"""OrderEngine against a real store."""

from concurrent.futures import ThreadPoolExecutor
from decimal import Decimal

import pytest
from catalogue.product.product import ProductFields
from ordering.order.creation import CreateOrder
from ordering.order.order import OrderStatus, PaymentMethod
from shared.errors import DuplicateOrderNumber, InternalFailure, InvalidInput, InvalidStatus, NotFound
from sqlalchemy import event, func, select
from sqlalchemy.exc import OperationalError
from storage.schema import order_items


@pytest.fixture()
def widget(catalog):
    return catalog.create_product(ProductFields.parse({"name": "Widget", "price": "10.500", "stock": 5}))


@pytest.fixture()
def gadget(catalog):
    return catalog.create_product(ProductFields.parse({"name": "Gadget", "price": "4.250", "stock": 10}))


def order_request(order_number="CMD-0001", items=None, **overrides):
    payload = {
        "order_number": order_number,
        "customer_name": "Amira Ben Salah",
        "customer_phone": "20123456",
        "customer_address": "12 Rue de Marseille, Tunis",
        "items": items or [],
    }
    payload.update(overrides)
    return CreateOrder.parse(payload)


def line(product, quantity, price=None):
    return {"product_id": product.id, "unit_price": price or str(product.price), "quantity": quantity}


def _item_rows(engine):
    with engine.connect() as conn:
        return conn.execute(select(func.count()).select_from(order_items)).scalar_one()


class TestCreateOrder:
    def test_widget_scenario(self, catalog, orders, widget):
        placement = orders.create_order(order_request(items=[line(widget, 3)], shipping="7"))

        assert placement.order_number == "CMD-0001"
        assert catalog.get_product(widget.id).stock == 2

        order = orders.get_order(placement.order_id)
        assert order.status is OrderStatus.PENDING
        assert order.payment_method is PaymentMethod.CASH
        assert order.items[0].total == Decimal("31.500")
        assert order.subtotal == Decimal("31.500")
        assert order.total == Decimal("38.500")

    def test_line_totals_add_up_to_subtotal(self, orders, widget, gadget):
        placement = orders.create_order(order_request(items=[line(widget, 2), line(gadget, 3)]))

        order = orders.get_order(placement.order_id)
        assert sum(item.total for item in order.items) == order.subtotal
        assert order.total == order.subtotal + order.shipping

    def test_oversell_clamps_stock_to_zero(self, catalog, orders, widget):
        placement = orders.create_order(order_request(items=[line(widget, 10)]))

        assert catalog.get_product(widget.id).stock == 0
        assert orders.get_order(placement.order_id).items[0].quantity == 10

    def test_caller_price_is_the_snapshot(self, orders, widget):
        placement = orders.create_order(order_request(items=[line(widget, 1, price="9.990")]))

        assert orders.get_order(placement.order_id).items[0].product_price == Decimal("9.990")

    def test_item_name_is_snapshotted_from_catalogue(self, catalog, orders, widget):
        placement = orders.create_order(order_request(items=[line(widget, 1)]))
        catalog.update_product(widget.id, ProductFields.parse({"name": "Widget Mk II", "price": 99}))

        item = orders.get_order(placement.order_id).items[0]
        assert item.product_name == "Widget"
        assert item.product_price == Decimal("10.500")

    def test_caller_supplied_name_wins(self, orders, widget):
        items = [{**line(widget, 1), "product_name": "Blue widget"}]
        placement = orders.create_order(order_request(items=items))

        assert orders.get_order(placement.order_id).items[0].product_name == "Blue widget"

    def test_unknown_product_without_name(self, orders, engine):
        request = order_request(items=[{"product_id": 404, "unit_price": 1, "quantity": 1}])

        with pytest.raises(InvalidInput):
            orders.create_order(request)
        assert orders.list_orders() == []
        assert _item_rows(engine) == 0

    def test_unknown_product_with_name_is_accepted(self, orders):
        items = [{"product_id": 404, "product_name": "Discontinued", "unit_price": 1, "quantity": 1}]
        placement = orders.create_order(order_request(items=items))

        assert orders.get_order(placement.order_id).items[0].product_name == "Discontinued"

    def test_duplicate_order_number(self, catalog, orders, widget):
        orders.create_order(order_request(items=[line(widget, 1)]))

        with pytest.raises(DuplicateOrderNumber):
            orders.create_order(order_request(items=[line(widget, 1)]))

        assert len(orders.list_orders()) == 1
        assert catalog.get_product(widget.id).stock == 4

    def test_accepts_a_raw_payload(self, orders, widget):
        placement = orders.create_order(
            {
                "orderNumber": "CMD-LEGACY",
                "customerName": "Amira",
                "customerPhone": "20123456",
                "customerAddress": "Tunis",
                "items": [{"id": widget.id, "name": "Widget", "price": 10.5, "quantity": 1}],
            }
        )
        assert orders.find_order("CMD-LEGACY").id == placement.order_id


class TestAllOrNothing:
    def test_failure_after_order_row_leaves_nothing(self, catalog, orders, engine, widget, gadget):
        def disconnect_on_items(conn, cursor, statement, parameters, context, executemany):
            if statement.startswith("INSERT INTO order_items"):
                raise OperationalError(statement, parameters, Exception("server closed the connection"))

        event.listen(engine, "before_cursor_execute", disconnect_on_items)
        try:
            with pytest.raises(InternalFailure):
                orders.create_order(order_request("CMD-FAIL", items=[line(widget, 2), line(gadget, 1)]))
        finally:
            event.remove(engine, "before_cursor_execute", disconnect_on_items)

        with pytest.raises(NotFound):
            orders.find_order("CMD-FAIL")
        assert _item_rows(engine) == 0
        assert catalog.get_product(widget.id).stock == 5
        assert catalog.get_product(gadget.id).stock == 10

    def test_failure_on_last_stock_update_rolls_back_earlier_ones(self, catalog, orders, engine, widget, gadget):
        def fail_second_update(conn, cursor, statement, parameters, context, executemany):
            if statement.startswith("UPDATE products") and tuple(parameters)[-1] == gadget.id:
                raise OperationalError(statement, parameters, Exception("lock wait timeout"))

        event.listen(engine, "before_cursor_execute", fail_second_update)
        try:
            with pytest.raises(InternalFailure):
                orders.create_order(order_request("CMD-FAIL", items=[line(widget, 2), line(gadget, 1)]))
        finally:
            event.remove(engine, "before_cursor_execute", fail_second_update)

        with pytest.raises(NotFound):
            orders.find_order("CMD-FAIL")
        assert catalog.get_product(widget.id).stock == 5


class TestConcurrentOrders:
    def test_stock_never_goes_negative(self, catalog, orders, widget):
        def place(n):
            return orders.create_order(order_request(f"CMD-{n:04d}", items=[line(widget, 2)]))

        with ThreadPoolExecutor(max_workers=4) as pool:
            placements = list(pool.map(place, range(6)))

        assert len({p.order_id for p in placements}) == 6
        assert catalog.get_product(widget.id).stock == 0
        assert len(orders.list_orders()) == 6


class TestQueries:
    def test_list_newest_first_with_items(self, orders, widget, gadget):
        first = orders.create_order(order_request("CMD-0001", items=[line(widget, 1)]))
        second = orders.create_order(order_request("CMD-0002", items=[line(widget, 1), line(gadget, 2)]))

        listed = orders.list_orders()

        assert [o.id for o in listed] == [second.order_id, first.order_id]
        assert [len(o.items) for o in listed] == [2, 1]

    def test_get_missing(self, orders):
        with pytest.raises(NotFound):
            orders.get_order(999)

    def test_find_missing(self, orders):
        with pytest.raises(NotFound):
            orders.find_order("CMD-NOPE")


class TestSetStatus:
    @pytest.fixture()
    def placement(self, orders, widget):
        return orders.create_order(order_request(items=[line(widget, 1)]))

    def test_any_transition_is_allowed(self, orders, placement):
        assert orders.set_status(placement.order_id, "delivered") is OrderStatus.DELIVERED
        assert orders.set_status(placement.order_id, "pending") is OrderStatus.PENDING
        assert orders.get_order(placement.order_id).status is OrderStatus.PENDING

    def test_invalid_status_leaves_status_unchanged(self, orders, placement):
        orders.set_status(placement.order_id, "shipped")

        with pytest.raises(InvalidStatus):
            orders.set_status(placement.order_id, "not-a-status")

        assert orders.get_order(placement.order_id).status is OrderStatus.SHIPPED

    def test_cancelling_does_not_restore_stock(self, catalog, orders, placement, widget):
        orders.set_status(placement.order_id, "cancelled")
        assert catalog.get_product(widget.id).stock == 4

    def test_missing_order(self, orders):
        with pytest.raises(NotFound):
            orders.set_status(999, "shipped")


class TestDeleteOrder:
    def test_cascades_to_items(self, orders, engine, widget, gadget):
        placement = orders.create_order(order_request(items=[line(widget, 1), line(gadget, 1)]))

        deleted = orders.delete_order(placement.order_id)

        assert len(deleted.items) == 2
        assert _item_rows(engine) == 0
        with pytest.raises(NotFound):
            orders.get_order(placement.order_id)

    def test_does_not_restore_stock(self, catalog, orders, widget):
        placement = orders.create_order(order_request(items=[line(widget, 3)]))
        orders.delete_order(placement.order_id)
        assert catalog.get_product(widget.id).stock == 2

    def test_deleting_a_product_keeps_historical_items(self, catalog, orders, widget):
        placement = orders.create_order(order_request(items=[line(widget, 1)]))

        catalog.delete_product(widget.id)

        item = orders.get_order(placement.order_id).items[0]
        assert item.product_id == widget.id
        assert item.product_name == "Widget"

    def test_missing_order(self, orders):
        with pytest.raises(NotFound):
            orders.delete_order(999)
