"""Product record and the request struct used to create or update one."""

from collections.abc import Mapping
from datetime import datetime
from decimal import Decimal
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, ValidationError, field_validator

from shared.errors import InvalidInput, field_errors
from shared.money import MAX_COUNT, MAX_DIGITS, to_amount

ProductName = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=255)]


class Product(BaseModel):
    """A catalogue row as stored.

    ``image_ref`` is either an external ``http(s)`` URL or the filename of an
    asset owned by the ``ImageStore``.
    """

    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    description: str | None = None
    price: Decimal
    stock: int
    image_ref: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_row(cls, row) -> "Product":
        return cls.model_validate(dict(row._mapping))


class ProductFields(BaseModel):
    """Fields carried by a create or update request.

    Presence is tracked through ``model_fields_set``: a field the caller left
    out is absent from it, while a field sent empty is present with an empty
    value. Updates rely on that difference.
    """

    model_config = ConfigDict(extra="ignore")

    name: ProductName | None = None
    description: str | None = None
    price: Decimal | None = Field(default=None, ge=0, max_digits=MAX_DIGITS, decimal_places=3)
    stock: int | None = Field(default=None, ge=0, le=MAX_COUNT)
    image_url: str | None = Field(default=None, max_length=500)

    @field_validator("price", mode="before")
    @classmethod
    def coerce_price(cls, value):
        if value is None:
            return None
        return to_amount(value)

    @field_validator("stock", mode="before")
    @classmethod
    def coerce_stock(cls, value):
        if isinstance(value, str):
            value = value.strip()
        return value

    @classmethod
    def parse(cls, payload: Mapping) -> "ProductFields":
        """Build from an untrusted mapping, raising ``InvalidInput`` on bad values."""
        try:
            return cls.model_validate(dict(payload))
        except ValidationError as exc:
            raise InvalidInput("Invalid product fields", details=field_errors(exc)) from None

    def supplied(self, name: str) -> bool:
        return name in self.model_fields_set
