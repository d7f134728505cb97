"""Catalogue context API package."""

from catalogue.api.routes import product_router

__all__ = ["product_router"]
