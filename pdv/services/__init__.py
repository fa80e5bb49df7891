"""
Serviços de domínio separados das rotas.

Inclui administração do catálogo, caixa (checkout) e gestão de pedidos.
"""

from .catalog_service import CatalogService  # noqa: F401
from .catalog_view import CatalogView  # noqa: F401
from .checkout_service import CheckoutService, CheckoutSession  # noqa: F401
from .order_service import OrderService, RequestedItem  # noqa: F401

__all__ = [
    "CatalogService",
    "CatalogView",
    "CheckoutService",
    "CheckoutSession",
    "OrderService",
    "RequestedItem",
]
