"""Relational schema for products, orders and order items.

Tables are declared with SQLAlchemy Core. ``LATER_COLUMNS`` lists columns
added by later schema revisions; ``ensure_schema`` adds any that an existing
database is missing, so upgrades never need hand-written migration scripts.
"""

from sqlalchemy import (
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    Numeric,
    String,
    Table,
    Text,
    func,
)

PAYMENT_METHODS = ("cash", "card", "transfer")
ORDER_STATUSES = ("pending", "confirmed", "processing", "shipped", "delivered", "cancelled")

metadata = MetaData()

products = Table(
    "products",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(255), nullable=False),
    Column("description", Text),
    Column("price", Numeric(10, 3), nullable=False),
    Column("stock", Integer, nullable=False, server_default="0"),
    Column("image_ref", String(500)),
    Column("created_at", DateTime, nullable=False, server_default=func.now()),
    Column("updated_at", DateTime, nullable=False, server_default=func.now(), onupdate=func.now()),
    Index("idx_products_name", "name"),
    Index("idx_products_price", "price"),
    Index("idx_products_created_at", "created_at"),
)

orders = Table(
    "orders",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("order_number", String(50), nullable=False, unique=True),
    Column("customer_name", String(255), nullable=False),
    Column("customer_phone", String(50), nullable=False),
    Column("customer_email", String(255)),
    Column("customer_address", Text, nullable=False),
    Column("notes", Text),
    Column(
        "payment_method",
        Enum(*PAYMENT_METHODS, name="payment_method"),
        nullable=False,
        server_default="cash",
    ),
    Column(
        "status",
        Enum(*ORDER_STATUSES, name="order_status"),
        nullable=False,
        server_default="pending",
    ),
    Column("subtotal", Numeric(10, 3), nullable=False),
    Column("shipping", Numeric(10, 3), nullable=False, server_default="0"),
    Column("total", Numeric(10, 3), nullable=False),
    Column("created_at", DateTime, nullable=False, server_default=func.now()),
    Column("updated_at", DateTime, nullable=False, server_default=func.now(), onupdate=func.now()),
    Index("idx_orders_status", "status"),
    Index("idx_orders_created_at", "created_at"),
)

order_items = Table(
    "order_items",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("order_id", Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False),
    # Weak reference: no FK, so deleting a product keeps historical snapshots.
    Column("product_id", Integer, nullable=False),
    Column("product_name", String(255), nullable=False),
    Column("product_price", Numeric(10, 3), nullable=False),
    Column("quantity", Integer, nullable=False),
    Column("total", Numeric(10, 3), nullable=False),
    Column("created_at", DateTime, nullable=False, server_default=func.now()),
    Index("idx_order_items_order_id", "order_id"),
)

# table name -> columns introduced after the table's first release
LATER_COLUMNS = {
    "products": ("image_ref",),
}
