"""Order creation request.

``CreateOrder`` validates everything that can be checked without the store:
required customer fields, at least one line item, positive quantities,
non-negative amounts and ``total == subtotal + shipping``. Unit prices are
taken from the caller as-is; they are not re-read from the catalogue.

Both snake_case keys and the storefront's camelCase keys are accepted, and
line items may use the cart's ``{id, name, price, quantity}`` shape.
"""

from collections.abc import Mapping
from decimal import Decimal
from typing import Annotated

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    StringConstraints,
    ValidationError,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

from ordering.order.order import PaymentMethod
from shared.errors import InvalidInput, field_errors
from shared.money import MAX_AMOUNT, MAX_COUNT, MAX_DIGITS, ZERO, line_total, to_amount

RequiredText = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
Amount = Annotated[Decimal, Field(ge=0, max_digits=MAX_DIGITS, decimal_places=3)]


def _amount_or_none(value):
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return to_amount(value)


class LineItem(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    product_id: int = Field(ge=1, validation_alias=AliasChoices("product_id", "productId", "id"))
    product_name: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=255)] | None = (
        Field(default=None, validation_alias=AliasChoices("product_name", "productName", "name"))
    )
    unit_price: Amount = Field(validation_alias=AliasChoices("unit_price", "unitPrice", "price"))
    quantity: int = Field(ge=1, le=MAX_COUNT)

    @field_validator("unit_price", mode="before")
    @classmethod
    def coerce_price(cls, value):
        return to_amount(value)

    @property
    def line_total(self) -> Decimal:
        return line_total(self.unit_price, self.quantity)


class CreateOrder(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True, alias_generator=to_camel)

    order_number: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=50)]
    customer_name: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=255)]
    customer_phone: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=50)]
    customer_email: str | None = Field(default=None, max_length=255)
    customer_address: RequiredText
    notes: str | None = None
    payment_method: PaymentMethod = PaymentMethod.CASH
    items: list[LineItem] = Field(min_length=1)
    subtotal: Amount | None = None
    shipping: Amount = ZERO
    total: Amount | None = None

    @field_validator("customer_email", "notes", mode="before")
    @classmethod
    def blank_is_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("payment_method", mode="before")
    @classmethod
    def default_payment_method(cls, value):
        if value is None or value == "":
            return PaymentMethod.CASH
        return value

    @field_validator("subtotal", "total", mode="before")
    @classmethod
    def coerce_optional_amount(cls, value):
        return _amount_or_none(value)

    @field_validator("shipping", mode="before")
    @classmethod
    def coerce_shipping(cls, value):
        amount = _amount_or_none(value)
        return ZERO if amount is None else amount

    @model_validator(mode="after")
    def totals_must_agree(self):
        for index, item in enumerate(self.items):
            if item.line_total > MAX_AMOUNT:
                raise ValueError(f"Line total of item {index} exceeds {MAX_AMOUNT}")
        if self.subtotal is None:
            self.subtotal = sum((item.line_total for item in self.items), ZERO)
        expected = self.subtotal + self.shipping
        if self.total is None:
            self.total = expected
        elif self.total != expected:
            raise ValueError(f"Total {self.total} does not equal subtotal {self.subtotal} + shipping {self.shipping}")
        if self.subtotal > MAX_AMOUNT or self.total > MAX_AMOUNT:
            raise ValueError(f"Order total exceeds {MAX_AMOUNT}")
        return self

    @classmethod
    def parse(cls, payload: Mapping) -> "CreateOrder":
        """Build from an untrusted mapping, raising ``InvalidInput`` on bad values."""
        if not isinstance(payload, Mapping):
            raise InvalidInput("Order payload must be an object")
        try:
            return cls.model_validate(dict(payload))
        except ValidationError as exc:
            raise InvalidInput("Incomplete order information", details=field_errors(exc)) from None
