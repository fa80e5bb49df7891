"""
Repositório de produtos.
Documentos antigos podem trazer o preço em `price`, `finalPrice` ou
`originalPrice`; os tamanhos ficam em `sizes: [{size, price}]`.
"""

from typing import Any, Optional
from decimal import Decimal

from pdv.domain.models import ZERO, Product, SizeVariant
from pdv.domain.pricing import to_decimal
from pdv.repositories.base import (
    DocumentRepository,
    money_in,
    money_out,
    without_none,
)
from pdv.repositories.protocols import Document


def _size_price(raw: Any) -> Optional[Decimal]:
    # preço ausente conta como 0; texto não numérico fica None
    if raw in (None, "", 0):
        return ZERO
    return to_decimal(raw)


class ProductRepository(DocumentRepository[Product]):
    """
    Repositório para acesso a dados de produtos.
    Encapsula a conversão entre o documento e o modelo `Product`.
    """

    collection = "products"

    @staticmethod
    def from_document(doc: Document) -> Product:
        sizes = [
            SizeVariant(size=str(s.get("size") or ""), price=_size_price(s.get("price")))
            for s in (doc.get("sizes") or [])
            if isinstance(s, dict)
        ]
        return Product(
            id=doc["id"],
            name=doc.get("name") or "",
            category_id=doc.get("categoryId") or None,
            category=doc.get("category"),
            active=bool(doc.get("active")),
            description=doc.get("description") or "",
            image_url=doc.get("imageUrl") or doc.get("image"),
            image_public_id=doc.get("imagePublicId"),
            sizes=sizes,
            price=money_in(doc.get("price"), None),
            final_price=money_in(doc.get("finalPrice"), None),
            original_price=money_in(doc.get("originalPrice"), None),
        )

    @staticmethod
    def to_document(product: Product) -> Document:
        return without_none(
            {
                "name": product.name,
                "categoryId": product.category_id,
                "category": product.category,
                "active": product.active,
                "description": product.description,
                "imageUrl": product.image_url,
                "imagePublicId": product.image_public_id,
                "sizes": [
                    {"size": s.size, "price": money_out(s.price)} for s in product.sizes
                ],
                "price": money_out(product.price),
                "finalPrice": money_out(product.final_price),
                "originalPrice": money_out(product.original_price),
            }
        )
