"""Ordering context: order placement, stock decrement and order status."""
