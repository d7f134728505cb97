"""Per-user state tracking for Locust load test scenarios.

Each Locust user instance maintains its own state; nothing is shared across users.
State tracks entity IDs returned by creation endpoints so follow-up
operations can reference them.
"""

from dataclasses import dataclass, field


@dataclass
class ProductState:
    """Tracks state for a single simulated product lifecycle."""

    product_id: int | None = None
    name: str | None = None
    price: float | None = None
    stock: int = 0


@dataclass
class OrderState:
    """Tracks state for a single order lifecycle."""

    order_id: int | None = None
    order_number: str | None = None
    current_status: str = "pending"
    products: list[dict] = field(default_factory=list)
