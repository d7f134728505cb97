"""Demo catalogue used by ``manage.py seed`` and the load tests."""

import structlog
from sqlalchemy import func, select

from catalogue.product.catalog import ProductCatalog
from catalogue.product.product import Product, ProductFields
from storage.schema import products
from storage.transaction import reading

logger = structlog.get_logger(__name__)

DEMO_PRODUCTS = [
    {
        "name": "iPhone 15 Pro Max",
        "description": "Apple smartphone with A17 Pro chip, 6.7-inch Super Retina XDR display and 48MP camera.",
        "price": "4899.000",
        "stock": 15,
        "image_url": "https://images.unsplash.com/photo-1695048133142-1a20484d2569?w=500",
    },
    {
        "name": "Samsung Galaxy S24 Ultra",
        "description": "Samsung smartphone with built-in S Pen, 6.8-inch AMOLED display and 200MP camera.",
        "price": "4299.000",
        "stock": 20,
        "image_url": "https://images.unsplash.com/photo-1610945415295-d9bbf067e59c?w=500",
    },
    {
        "name": "MacBook Pro 14 M3",
        "description": "Apple laptop with M3 Pro chip, 14-inch Liquid Retina XDR display, 18GB RAM and 512GB SSD.",
        "price": "6999.000",
        "stock": 10,
        "image_url": "https://images.unsplash.com/photo-1517336714731-489689fd1ca8?w=500",
    },
    {
        "name": "AirPods Pro 2",
        "description": "Wireless earbuds with active noise cancellation, spatial audio and MagSafe case.",
        "price": "899.000",
        "stock": 50,
        "image_url": "https://images.unsplash.com/photo-1606220588913-b3aacb4d2f46?w=500",
    },
    {
        "name": "Apple Watch Series 9",
        "description": "Smartwatch with S9 chip, Always-On Retina display and fall detection.",
        "price": "1499.000",
        "stock": 30,
        "image_url": "https://images.unsplash.com/photo-1546868871-7041f2a55e12?w=500",
    },
    {
        "name": "iPad Pro 12.9 M2",
        "description": "Apple tablet with M2 chip, 12.9-inch Liquid Retina XDR display and Apple Pencil 2 support.",
        "price": "3799.000",
        "stock": 18,
        "image_url": "https://images.unsplash.com/photo-1544244015-0df4b3ffc6b0?w=500",
    },
    {
        "name": "Sony WH-1000XM5",
        "description": "Premium wireless headphones with noise cancellation, 30h battery and Hi-Res audio.",
        "price": "1199.000",
        "stock": 25,
        "image_url": "https://images.unsplash.com/photo-1505740420928-5e560c06d30e?w=500",
    },
    {
        "name": "PlayStation 5",
        "description": "Sony games console with ultra-fast SSD, ray tracing, 3D audio and DualSense controller.",
        "price": "1899.000",
        "stock": 12,
        "image_url": "https://images.unsplash.com/photo-1606144042614-b2417e99c4e3?w=500",
    },
    {
        "name": "Nintendo Switch OLED",
        "description": "Hybrid games console with 7-inch OLED screen and improved speakers.",
        "price": "1099.000",
        "stock": 22,
        "image_url": "https://images.unsplash.com/photo-1578303512597-81e6cc155b3e?w=500",
    },
    {
        "name": "Canon EOS R6 Mark II",
        "description": "24.2MP full-frame mirrorless camera with 4K 60fps video and in-body stabilisation.",
        "price": "7499.000",
        "stock": 8,
        "image_url": "https://images.unsplash.com/photo-1516035069371-29a1b244cc32?w=500",
    },
    {
        "name": "DJI Mini 3 Pro",
        "description": "Compact drone with 4K HDR camera, tri-directional obstacle sensing and 34 min flight time.",
        "price": "2699.000",
        "stock": 15,
        "image_url": "https://images.unsplash.com/photo-1473968512647-3e447244af8f?w=500",
    },
    {
        "name": "Dyson V15 Detect",
        "description": "Cordless vacuum with dust-detecting laser, LCD screen and 60 min runtime.",
        "price": "2199.000",
        "stock": 20,
        "image_url": "https://images.unsplash.com/photo-1558317374-067fb5f30001?w=500",
    },
]


def seed_catalogue(catalog: ProductCatalog) -> list[Product]:
    """Insert the demo products when the catalogue is empty.

    Returns the products created, or an empty list if there were already some.
    """
    with reading(catalog.engine) as conn:
        existing = conn.execute(select(func.count()).select_from(products)).scalar_one()
    if existing:
        logger.info("Catalogue already populated, skipping seed", products=existing)
        return []

    created = [catalog.create_product(ProductFields.parse(entry)) for entry in DEMO_PRODUCTS]
    logger.info("Demo catalogue seeded", products=len(created))
    return created
