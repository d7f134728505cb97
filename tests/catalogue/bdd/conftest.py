"""Shared BDD fixtures and step definitions for the Catalogue context."""

from decimal import Decimal

import pytest
from catalogue.product.product import ProductFields
from pytest_bdd import given, parsers, then
from shared.errors import StoreError


@pytest.fixture()
def error():
    """Container for captured store errors."""
    return {"exc": None}


@pytest.fixture()
def attempt(error):
    """Run an operation, capturing a store error instead of raising it."""

    def _attempt(operation, *args):
        try:
            return operation(*args)
        except StoreError as exc:
            error["exc"] = exc
            return None

    return _attempt


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given("an empty catalogue")
def empty_catalogue(catalog):
    assert catalog.list_products() == []


@given(
    parsers.cfparse('a product "{name}" priced {price} with stock {stock:d}'),
    target_fixture="product",
)
def product_with_stock(catalog, name, price, stock):
    return catalog.create_product(ProductFields.parse({"name": name, "price": price, "stock": stock}))


@given(
    parsers.cfparse('a product "{name}" priced {price} with an uploaded image'),
    target_fixture="product",
)
def product_with_upload(catalog, png, name, price):
    return catalog.create_product(ProductFields.parse({"name": name, "price": price}), png())


@given(
    parsers.cfparse('a product "{name}" priced {price} with image URL "{url}"'),
    target_fixture="product",
)
def product_with_url(catalog, name, price, url):
    return catalog.create_product(ProductFields.parse({"name": name, "price": price, "image_url": url}))


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the request is rejected with "{code}"'))
def request_rejected(error, code):
    assert error["exc"] is not None
    assert error["exc"].code == code


@then(parsers.cfparse("the upload directory holds {count:d} asset"))
@then(parsers.cfparse("the upload directory holds {count:d} assets"))
def upload_directory_holds(stored_assets, count):
    assert len(stored_assets()) == count


@then(parsers.cfparse("the catalogue holds {count:d} products"))
def catalogue_holds(catalog, count):
    assert len(catalog.list_products()) == count


@then(parsers.cfparse('the product name is "{name}"'))
def product_name_is(catalog, product, name):
    assert catalog.get_product(product.id).name == name


@then(parsers.cfparse("the product price is {price}"))
def product_price_is(catalog, product, price):
    assert catalog.get_product(product.id).price == Decimal(price)


@then(parsers.cfparse("the product stock is {stock:d}"))
def product_stock_is(catalog, product, stock):
    assert catalog.get_product(product.id).stock == stock

