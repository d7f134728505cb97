"""Catalogue context: products and the image assets they reference."""
