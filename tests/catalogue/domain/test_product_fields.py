"""ProductFields: coercion and absent-versus-empty tracking."""

from decimal import Decimal

import pytest
from catalogue.product.product import ProductFields
from shared.errors import InvalidInput


class TestCoercion:
    def test_form_strings_are_coerced(self):
        fields = ProductFields.parse({"name": " Widget ", "price": "10.5", "stock": " 5 "})
        assert fields.name == "Widget"
        assert fields.price == Decimal("10.500")
        assert fields.stock == 5

    def test_non_numeric_price(self):
        with pytest.raises(InvalidInput) as exc_info:
            ProductFields.parse({"name": "Widget", "price": "ten"})
        assert "price" in exc_info.value.details

    def test_non_numeric_stock(self):
        with pytest.raises(InvalidInput) as exc_info:
            ProductFields.parse({"name": "Widget", "price": 1, "stock": "lots"})
        assert "stock" in exc_info.value.details

    @pytest.mark.parametrize("payload", [{"price": -1}, {"stock": -3}])
    def test_negative_values(self, payload):
        with pytest.raises(InvalidInput):
            ProductFields.parse(payload)

    def test_blank_name(self):
        with pytest.raises(InvalidInput):
            ProductFields.parse({"name": "   "})

    def test_unknown_keys_are_ignored(self):
        fields = ProductFields.parse({"name": "Widget", "colour": "red"})
        assert fields.model_fields_set == {"name"}


class TestPresence:
    def test_absent_fields_are_not_supplied(self):
        fields = ProductFields.parse({"name": "Widget"})
        assert fields.supplied("name")
        assert not fields.supplied("description")
        assert not fields.supplied("image_url")

    def test_empty_fields_are_supplied(self):
        fields = ProductFields.parse({"description": "", "image_url": ""})
        assert fields.supplied("description")
        assert fields.description == ""
        assert fields.supplied("image_url")

    def test_explicit_null_is_supplied(self):
        fields = ProductFields.parse({"price": None})
        assert fields.supplied("price")
        assert fields.price is None

    def test_nothing_supplied(self):
        assert ProductFields.parse({}).model_fields_set == set()


class TestNumericRange:
    @pytest.mark.parametrize("price", ["1e30", "9" * 40, 10**40, "12345678.5"])
    def test_price_beyond_column_range(self, price):
        with pytest.raises(InvalidInput) as exc_info:
            ProductFields.parse({"name": "Widget", "price": price})
        assert "price" in exc_info.value.details

    def test_stock_beyond_integer_range(self):
        with pytest.raises(InvalidInput) as exc_info:
            ProductFields.parse({"name": "Widget", "price": 1, "stock": 3_000_000_000})
        assert "stock" in exc_info.value.details

    def test_largest_representable_price(self):
        assert ProductFields.parse({"price": "9999999.999"}).price == Decimal("9999999.999")
