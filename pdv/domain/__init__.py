"""
Modelos e regras de domínio do PDV.
Camada de domínio independente de infraestrutura.
"""

from .models import (
    CartLine,
    Category,
    Combo,
    ComboItem,
    Coupon,
    Order,
    OrderItem,
    OrderStatus,
    PaymentMethod,
    Product,
    SizeVariant,
)
from .cart import Cart
from .filters import OrderFilters
from .pricing import OrderTotals, compute_totals

__all__ = [
    "Cart",
    "CartLine",
    "Category",
    "Combo",
    "ComboItem",
    "compute_totals",
    "Coupon",
    "Order",
    "OrderFilters",
    "OrderItem",
    "OrderStatus",
    "OrderTotals",
    "PaymentMethod",
    "Product",
    "SizeVariant",
]
