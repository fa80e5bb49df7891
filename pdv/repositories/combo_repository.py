"""
Repositório de combos.
`originalPrice`/`finalPrice` são snapshots gravados no cadastro do combo.
"""

from pdv.domain.models import ZERO, Combo, ComboItem, DiscountType
from pdv.repositories.base import (
    DocumentRepository,
    money_in,
    money_out,
    without_none,
)
from pdv.repositories.protocols import Document


def _discount_type(raw) -> DiscountType:
    try:
        return DiscountType(raw or "none")
    except ValueError:
        return DiscountType.NONE


class ComboRepository(DocumentRepository[Combo]):
    collection = "combos"

    @staticmethod
    def from_document(doc: Document) -> Combo:
        items = [
            ComboItem(
                id=str(item.get("id")),
                name=item.get("name") or "",
                price=money_in(item.get("price")),
                image=item.get("image"),
                category=item.get("category"),
            )
            for item in (doc.get("items") or [])
            if isinstance(item, dict)
        ]
        original = doc.get("originalPrice", doc.get("totalOriginal"))
        final = doc.get("finalPrice", doc.get("totalFinal"))
        return Combo(
            id=doc["id"],
            name=doc.get("name") or "",
            category_id=doc.get("categoryId") or None,
            category=doc.get("category"),
            active=bool(doc.get("active")),
            description=doc.get("description") or "",
            image_url=doc.get("imageUrl") or doc.get("image"),
            image_public_id=doc.get("imagePublicId"),
            discount_type=_discount_type(doc.get("discountType")),
            discount_value=money_in(doc.get("discountValue")) or ZERO,
            items=items,
            price=money_in(doc.get("price"), None),
            original_price=money_in(original, None),
            final_price=money_in(final, None),
        )

    @staticmethod
    def to_document(combo: Combo) -> Document:
        return without_none(
            {
                "name": combo.name,
                "categoryId": combo.category_id,
                "category": combo.category,
                "active": combo.active,
                "description": combo.description,
                "imageUrl": combo.image_url,
                "imagePublicId": combo.image_public_id,
                "discountType": combo.discount_type.value,
                "discountValue": money_out(combo.discount_value),
                "items": [
                    without_none(
                        {
                            "id": item.id,
                            "name": item.name,
                            "price": money_out(item.price),
                            "image": item.image,
                            "category": item.category,
                        }
                    )
                    for item in combo.items
                ],
                "price": money_out(combo.price),
                "originalPrice": money_out(combo.original_price),
                "finalPrice": money_out(combo.final_price),
            }
        )
