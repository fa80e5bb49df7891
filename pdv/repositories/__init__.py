"""
Repositórios para acesso a dados.
Convertem documentos do armazenamento em modelos de domínio.
"""

from .category_repository import CategoryRepository
from .combo_repository import ComboRepository
from .order_repository import OrderRepository
from .product_repository import ProductRepository

__all__ = [
    "CategoryRepository",
    "ComboRepository",
    "OrderRepository",
    "ProductRepository",
]
