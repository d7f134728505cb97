"""Faker-based data generators for Locust load test scenarios.

Each generator produces payloads that pass the API's validation rules and
use the field names the endpoints expect.
"""

import random
import time
import uuid

from faker import Faker

fake = Faker()

# Smallest valid PNG: 1x1 transparent pixel.
PNG_BYTES = bytes.fromhex(
    "89504e470d0a1a0a0000000d4948445200000001000000010806000000"
    "1f15c4890000000d49444154789c6360000002000100e221bc330000000049454e44ae426082"
)

ORDER_STATUSES = ["confirmed", "processing", "shipped", "delivered"]

# ---------- Catalogue ----------


def product_form(stock: int | None = None) -> dict:
    """Form fields for POST /api/products."""
    return {
        "name": f"{fake.color_name()} {fake.word().title()} {uuid.uuid4().hex[:4]}"[:255],
        "description": fake.sentence(nb_words=12),
        "price": f"{random.uniform(5, 5000):.3f}",
        "stock": str(stock if stock is not None else random.randint(20, 500)),
    }


def product_image() -> dict:
    """Multipart files mapping with a small PNG upload."""
    return {"image": (f"{uuid.uuid4().hex[:8]}.png", PNG_BYTES, "image/png")}


# ---------- Ordering ----------


def order_number() -> str:
    """Order numbers in the storefront's CMD-<epoch ms> style, made unique per user."""
    return f"CMD-{int(time.time() * 1000)}-{uuid.uuid4().hex[:6]}"


def order_payload(products: list[dict], max_quantity: int = 3) -> dict:
    """Legacy camelCase order payload, as sent by the storefront checkout."""
    items = [
        {
            "id": product["id"],
            "name": product["name"],
            "price": product["price"],
            "quantity": random.randint(1, max_quantity),
        }
        for product in products
    ]
    subtotal = round(sum(item["price"] * item["quantity"] for item in items), 3)
    shipping = random.choice([0, 7, 10])
    return {
        "orderNumber": order_number(),
        "customerName": fake.name()[:255],
        "customerPhone": fake.msisdn()[:20],
        "customerEmail": fake.free_email(),
        "customerAddress": fake.address().replace("\n", ", "),
        "notes": fake.sentence() if random.random() < 0.3 else "",
        "paymentMethod": random.choice(["cash", "card", "transfer"]),
        "items": items,
        "subtotal": subtotal,
        "shipping": shipping,
    }
