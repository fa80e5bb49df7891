"""API routers module."""

from . import categories, checkout, combos, health, menu, orders, products

__all__ = [
    "categories",
    "checkout",
    "combos",
    "health",
    "menu",
    "orders",
    "products",
]
