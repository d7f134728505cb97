"""Product and image lifecycle.

``ProductCatalog`` owns product rows and the image assets they reference. It
keeps the two in step: an asset is written only after the request has been
validated, removed again if the row write fails, and the previous asset is
removed once a replacement is committed. File operations are not part of the
storage transaction, so a crash between the two can still leave a stray file
behind; that is accepted.
"""

import structlog
from sqlalchemy import delete, insert, select, update
from sqlalchemy.engine import Connection, Engine

from catalogue.product.images import ImageStore, ImageUpload
from catalogue.product.product import Product, ProductFields
from shared.errors import InvalidInput, NotFound, StoreError
from storage.schema import products
from storage.transaction import reading, transaction

logger = structlog.get_logger(__name__)

_NON_NULLABLE = ("name", "price", "stock")


class ProductCatalog:
    def __init__(self, engine: Engine | None, images: ImageStore):
        self.engine = engine
        self.images = images

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def list_products(self) -> list[Product]:
        """All products, newest first."""
        query = select(products).order_by(products.c.created_at.desc(), products.c.id.desc())
        with reading(self.engine) as conn:
            rows = conn.execute(query).all()
        return [Product.from_row(row) for row in rows]

    def get_product(self, product_id: int) -> Product:
        with reading(self.engine) as conn:
            return self._fetch(conn, product_id)

    @staticmethod
    def _fetch(conn: Connection, product_id: int) -> Product:
        row = conn.execute(select(products).where(products.c.id == product_id)).first()
        if row is None:
            raise NotFound(f"Product {product_id} not found")
        return Product.from_row(row)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------
    def create_product(self, fields: ProductFields, image: ImageUpload | None = None) -> Product:
        """Insert a product, storing ``image`` as a new local asset if given.

        Without an upload, ``fields.image_url`` is stored verbatim.
        """
        missing = {name: "Field required" for name in ("name", "price") if getattr(fields, name) is None}
        if missing:
            raise InvalidInput("Name and price are required", details=missing)
        if fields.supplied("stock") and fields.stock is None:
            raise InvalidInput("Stock cannot be empty", details={"stock": "Field cannot be empty"})
        if image is not None:
            self.images.validate(image)

        values = {
            "name": fields.name,
            "description": fields.description,
            "price": fields.price,
            "stock": fields.stock or 0,
            "image_ref": fields.image_url or None,
        }

        asset = None
        try:
            with transaction(self.engine) as conn:
                if image is not None:
                    asset = self.images.save(image)
                    values["image_ref"] = asset
                result = conn.execute(insert(products).values(**values))
                product = self._fetch(conn, result.inserted_primary_key[0])
        except StoreError:
            if asset is not None:
                self.images.delete(asset)
            raise

        logger.info("Product created", product_id=product.id, name=product.name, image_ref=product.image_ref)
        return product

    def update_product(self, product_id: int, fields: ProductFields, image: ImageUpload | None = None) -> Product:
        """Apply the fields present in ``fields``; absent fields keep their value.

        A new upload replaces the image reference and the previous asset is
        deleted if this store owned it. A new ``image_url`` without an upload
        replaces the reference and leaves files alone.
        """
        for name in _NON_NULLABLE:
            if fields.supplied(name) and getattr(fields, name) is None:
                raise InvalidInput(f"{name.capitalize()} cannot be empty", details={name: "Field cannot be empty"})
        if image is not None:
            self.images.validate(image)

        changes = {
            name: getattr(fields, name) for name in ("name", "description", "price", "stock") if fields.supplied(name)
        }
        if fields.supplied("image_url"):
            changes["image_ref"] = fields.image_url or None

        asset = None
        try:
            with transaction(self.engine) as conn:
                previous = self._fetch(conn, product_id)
                if image is not None:
                    asset = self.images.save(image)
                    changes["image_ref"] = asset
                if changes:
                    conn.execute(update(products).where(products.c.id == product_id).values(**changes))
                product = self._fetch(conn, product_id)
        except StoreError:
            if asset is not None:
                self.images.delete(asset)
            raise

        if asset is not None and previous.image_ref != asset and self.images.is_local(previous.image_ref):
            self.images.delete(previous.image_ref)

        if changes:
            logger.info("Product updated", product_id=product_id, fields=sorted(changes))
        return product

    def delete_product(self, product_id: int) -> Product:
        """Delete the row, then its local asset. Returns the deleted snapshot.

        Order items referencing the product are left untouched.
        """
        with transaction(self.engine) as conn:
            product = self._fetch(conn, product_id)
            conn.execute(delete(products).where(products.c.id == product_id))

        if self.images.is_local(product.image_ref):
            self.images.delete(product.image_ref)

        logger.info("Product deleted", product_id=product_id, name=product.name)
        return product
