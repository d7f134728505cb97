"""Pydantic response schemas for the Catalogue API.

Requests are parsed into ``ProductFields`` directly so that field presence
survives; only responses are shaped here. Prices leave the API as JSON
numbers.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel

from catalogue.product.images import ImageStore
from catalogue.product.product import Product
from shared.money import as_number

UPLOADS_PATH = "/api/uploads"


class ProductResponse(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "id": 7,
                    "name": "Widget",
                    "description": "A very useful widget.",
                    "price": 10.5,
                    "stock": 5,
                    "image_ref": "product-1717171717171-123456789.png",
                    "image_url": "/api/uploads/product-1717171717171-123456789.png",
                    "created_at": "2024-05-31T15:28:37",
                    "updated_at": "2024-05-31T15:28:37",
                }
            ]
        }
    }

    id: int
    name: str
    description: str | None = None
    price: float
    stock: int
    image_ref: str | None = None
    image_url: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_product(cls, product: Product) -> ProductResponse:
        image_url = product.image_ref
        if ImageStore.is_local(product.image_ref):
            image_url = f"{UPLOADS_PATH}/{product.image_ref}"
        return cls(
            id=product.id,
            name=product.name,
            description=product.description,
            price=as_number(product.price),
            stock=product.stock,
            image_ref=product.image_ref,
            image_url=image_url,
            created_at=product.created_at,
            updated_at=product.updated_at,
        )


class ProductDeletedResponse(BaseModel):
    message: str = "Product deleted"
    deleted_product: ProductResponse
