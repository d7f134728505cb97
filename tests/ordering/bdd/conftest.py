"""Shared BDD fixtures and step definitions for the Ordering context."""

import pytest
from catalogue.product.product import ProductFields
from ordering.order.creation import CreateOrder
from pytest_bdd import given, parsers, then
from shared.errors import StoreError


@pytest.fixture()
def products_by_name():
    return {}


@pytest.fixture()
def error():
    """Container for captured store errors."""
    return {"exc": None}


def order_payload(order_number, items, shipping="0"):
    return {
        "order_number": order_number,
        "customer_name": "Amira Ben Salah",
        "customer_phone": "20123456",
        "customer_address": "12 Rue de Marseille, Tunis",
        "shipping": shipping,
        "items": items,
    }


@pytest.fixture()
def place_order(orders, products_by_name, error):
    """Place an order for ``quantity`` of one named product, capturing store errors."""

    def _place(order_number, name=None, quantity=0, shipping="0"):
        items = []
        if name is not None:
            product = products_by_name[name]
            items.append({"product_id": product.id, "unit_price": str(product.price), "quantity": quantity})
        try:
            return orders.create_order(CreateOrder.parse(order_payload(order_number, items, shipping)))
        except StoreError as exc:
            error["exc"] = exc
            return None

    return _place


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('a product "{name}" priced {price} with stock {stock:d}'))
def product_in_stock(catalog, products_by_name, name, price, stock):
    products_by_name[name] = catalog.create_product(
        ProductFields.parse({"name": name, "price": price, "stock": stock})
    )


@given(
    parsers.cfparse('an order "{order_number}" for {quantity:d} "{name}" was placed'),
    target_fixture="placement",
)
def order_was_placed(place_order, order_number, quantity, name):
    placement = place_order(order_number, name, quantity)
    assert placement is not None
    return placement


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the order is rejected with "{code}"'))
def order_rejected(error, code):
    assert error["exc"] is not None
    assert error["exc"].code == code


@then(parsers.cfparse('the stock of "{name}" is {stock:d}'))
def stock_is(catalog, products_by_name, name, stock):
    assert catalog.get_product(products_by_name[name].id).stock == stock
