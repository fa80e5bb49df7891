"""
Repositório de categorias.
"""

from pdv.domain.models import Category
from pdv.repositories.base import (
    DocumentRepository,
    datetime_in,
    datetime_out,
    without_none,
)
from pdv.repositories.protocols import Document


class CategoryRepository(DocumentRepository[Category]):
    collection = "categories"

    @staticmethod
    def from_document(doc: Document) -> Category:
        return Category(
            id=doc["id"],
            name=doc.get("name") or "",
            active=bool(doc.get("active")),
            image_url=doc.get("imageUrl") or doc.get("image"),
            image_public_id=doc.get("imagePublicId"),
            created_at=datetime_in(doc.get("createdAt")),
        )

    @staticmethod
    def to_document(category: Category) -> Document:
        return without_none(
            {
                "name": category.name,
                "active": category.active,
                "imageUrl": category.image_url,
                "imagePublicId": category.image_public_id,
                "createdAt": datetime_out(category.created_at),
            }
        )
