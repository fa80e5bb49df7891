"""Catalog administration: categories, products and combos."""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from decimal import Decimal
from typing import Any, Iterable, Optional, Sequence

from pdv.core.logging import catalog_logger
from pdv.domain.errors import CatalogValidationError
from pdv.domain.models import (
    Category,
    Combo,
    ComboItem,
    DiscountType,
    Product,
    SizeVariant,
    ZERO,
)
from pdv.domain.pricing import combo_prices, compute_price, parse_br_number
from pdv.domain.visibility import effective_active
from pdv.repositories.category_repository import CategoryRepository
from pdv.repositories.combo_repository import ComboRepository
from pdv.repositories.product_repository import ProductRepository
from pdv.repositories.protocols import ImageHostProtocol


IMAGE_FOLDERS = {
    "categories": "categories",
    "products": "products",
    "combos": "combos",
}


def parse_sizes(rows: Iterable[dict]) -> list[SizeVariant]:
    """Linhas do formulário de tamanhos; linhas sem tamanho ou sem preço são ignoradas."""
    sizes = []
    for row in rows:
        label = str(row.get("size") or "").strip()
        raw_price = row.get("price")
        if not label or raw_price is None or str(raw_price).strip() == "":
            continue
        sizes.append(SizeVariant(size=label, price=parse_br_number(raw_price)))
    return sizes


class CatalogService:
    """Service for catalog CRUD, combo pricing snapshots and image attachment."""

    def __init__(
        self,
        categories: CategoryRepository,
        products: ProductRepository,
        combos: ComboRepository,
        image_host: Optional[ImageHostProtocol] = None,
    ):
        self.categories = categories
        self.products = products
        self.combos = combos
        self.image_host = image_host

    # ------------------------------------------------------------------
    # Categorias
    # ------------------------------------------------------------------

    def list_categories(self) -> list[Category]:
        return self.categories.list_all()

    def create_category(self, name: str, active: bool = True) -> Category:
        name = (name or "").strip()
        if not name:
            raise CatalogValidationError("Informe o nome da categoria.")
        category = Category(id="", name=name, active=active, created_at=datetime.now())
        created = self.categories.add(CategoryRepository.to_document(category))
        catalog_logger.info("Category created", category_id=created.id)
        return created

    def update_category(self, category_id: str, changes: dict[str, Any]) -> Category:
        data = {}
        if "name" in changes:
            name = (changes["name"] or "").strip()
            if not name:
                raise CatalogValidationError("Informe o nome da categoria.")
            data["name"] = name
        if "active" in changes:
            data["active"] = bool(changes["active"])
        return self.categories.update(category_id, data)

    def toggle_category(self, category_id: str) -> Category:
        category = self._require(self.categories.get(category_id), "categoria")
        return self.categories.update(category_id, {"active": not category.active})

    def delete_category(self, category_id: str) -> None:
        # produtos e combos que apontam para a categoria ficam ocultos
        dangling = [p.id for p in self.products.list_all() if p.category_id == category_id]
        self.categories.delete(category_id)
        catalog_logger.info(
            "Category deleted", category_id=category_id, dangling_products=len(dangling)
        )

    # ------------------------------------------------------------------
    # Produtos
    # ------------------------------------------------------------------

    def list_products(
        self,
        status: Optional[str] = None,
        sort_by: Optional[str] = None,
    ) -> list[tuple[Product, bool]]:
        """Lista administrativa com status efetivo (categoria inativa desativa o produto)."""
        categories = self.categories.list_all()
        rows = [(p, effective_active(p, categories)) for p in self.products.list_all()]

        if status == "active":
            rows = [r for r in rows if r[1]]
        elif status == "inactive":
            rows = [r for r in rows if not r[1]]

        if sort_by == "price-asc":
            rows.sort(key=lambda r: compute_price(r[0]))
        elif sort_by == "price-desc":
            rows.sort(key=lambda r: compute_price(r[0]), reverse=True)
        elif sort_by == "name":
            rows.sort(key=lambda r: r[0].name.lower())
        return rows

    def get_product(self, product_id: str) -> Optional[Product]:
        return self.products.get(product_id)

    def _category_for(self, category_id: Optional[str]) -> Category:
        category = self.categories.get(category_id) if category_id else None
        if category is None:
            raise CatalogValidationError("Selecione uma categoria válida.")
        return category

    def create_product(
        self,
        name: str,
        category_id: str,
        description: str = "",
        active: bool = True,
        sizes: Sequence[dict] = (),
        price: Any = None,
    ) -> Product:
        name = (name or "").strip()
        if not name:
            raise CatalogValidationError("Informe o nome do produto.")
        category = self._category_for(category_id)
        product = Product(
            id="",
            name=name,
            category_id=category.id,
            category=category.name,
            active=active,
            description=(description or "").strip(),
            sizes=parse_sizes(sizes),
            price=parse_br_number(price) if price not in (None, "") else None,
        )
        created = self.products.add(ProductRepository.to_document(product))
        catalog_logger.info("Product created", product_id=created.id, sizes=len(created.sizes))
        return created

    def update_product(self, product_id: str, changes: dict[str, Any]) -> Product:
        current = self._require(self.products.get(product_id), "produto")
        updated = current
        if "name" in changes:
            name = (changes["name"] or "").strip()
            if not name:
                raise CatalogValidationError("Informe o nome do produto.")
            updated = replace(updated, name=name)
        if "category_id" in changes:
            category = self._category_for(changes["category_id"])
            updated = replace(updated, category_id=category.id, category=category.name)
        if "description" in changes:
            updated = replace(updated, description=(changes["description"] or "").strip())
        if "active" in changes:
            updated = replace(updated, active=bool(changes["active"]))
        if "sizes" in changes:
            updated = replace(updated, sizes=parse_sizes(changes["sizes"] or []))
        if "price" in changes:
            raw = changes["price"]
            updated = replace(updated, price=parse_br_number(raw) if raw not in (None, "") else None)
        data = ProductRepository.to_document(updated)
        data.setdefault("price", None)
        return self.products.update(product_id, data)

    def toggle_product(self, product_id: str) -> Product:
        product = self._require(self.products.get(product_id), "produto")
        return self.products.update(product_id, {"active": not product.active})

    def delete_product(self, product_id: str) -> None:
        self.products.delete(product_id)
        catalog_logger.info("Product deleted", product_id=product_id)

    # ------------------------------------------------------------------
    # Combos
    # ------------------------------------------------------------------

    def list_combos(self) -> list[Combo]:
        return self.combos.list_all()

    def get_combo(self, combo_id: str) -> Optional[Combo]:
        return self.combos.get(combo_id)

    def _build_combo(
        self,
        combo_id: str,
        name: str,
        category_id: str,
        description: str,
        active: bool,
        product_ids: Sequence[str],
        discount_type: DiscountType,
        discount_value: Decimal,
        image_url: Optional[str] = None,
        image_public_id: Optional[str] = None,
    ) -> Combo:
        name = (name or "").strip()
        description = (description or "").strip()
        if not name:
            raise CatalogValidationError("Informe o nome do combo.")
        if not description:
            raise CatalogValidationError("A descrição é obrigatória.")
        if not product_ids:
            raise CatalogValidationError("Selecione pelo menos 1 produto.")
        category = self._category_for(category_id)

        by_id = {p.id: p for p in self.products.list_all()}
        missing = [pid for pid in product_ids if pid not in by_id]
        if missing:
            raise CatalogValidationError(f"Produtos não encontrados: {', '.join(missing)}")

        items = [
            ComboItem(
                id=p.id,
                name=p.name,
                price=compute_price(p),
                image=p.image_url,
                category=p.category,
            )
            for p in (by_id[pid] for pid in product_ids)
        ]
        if discount_type == DiscountType.NONE:
            discount_value = ZERO
        original, final = combo_prices((i.price for i in items), discount_type, discount_value)
        return Combo(
            id=combo_id,
            name=name,
            category_id=category.id,
            category=category.name,
            active=active,
            description=description,
            image_url=image_url,
            image_public_id=image_public_id,
            discount_type=discount_type,
            discount_value=discount_value,
            items=items,
            original_price=original,
            final_price=final,
        )

    def create_combo(
        self,
        name: str,
        category_id: str,
        description: str,
        product_ids: Sequence[str],
        active: bool = True,
        discount_type: DiscountType = DiscountType.NONE,
        discount_value: Any = 0,
    ) -> Combo:
        combo = self._build_combo(
            "", name, category_id, description, active, product_ids,
            DiscountType(discount_type), parse_br_number(discount_value),
        )
        created = self.combos.add(ComboRepository.to_document(combo))
        catalog_logger.info(
            "Combo created", combo_id=created.id, final_price=str(created.final_price)
        )
        return created

    def update_combo(self, combo_id: str, changes: dict[str, Any]) -> Combo:
        current = self._require(self.combos.get(combo_id), "combo")
        combo = self._build_combo(
            combo_id,
            changes.get("name", current.name),
            changes.get("category_id", current.category_id),
            changes.get("description", current.description),
            changes.get("active", current.active),
            changes.get("product_ids", [i.id for i in current.items]),
            DiscountType(changes.get("discount_type", current.discount_type)),
            parse_br_number(changes.get("discount_value", current.discount_value)),
            image_url=current.image_url,
            image_public_id=current.image_public_id,
        )
        return self.combos.update(combo_id, ComboRepository.to_document(combo))

    def toggle_combo(self, combo_id: str) -> Combo:
        combo = self._require(self.combos.get(combo_id), "combo")
        return self.combos.update(combo_id, {"active": not combo.active})

    def delete_combo(self, combo_id: str) -> None:
        self.combos.delete(combo_id)
        catalog_logger.info("Combo deleted", combo_id=combo_id)

    # ------------------------------------------------------------------
    # Imagens
    # ------------------------------------------------------------------

    def _repository(self, collection: str):
        return {
            "categories": self.categories,
            "products": self.products,
            "combos": self.combos,
        }[collection]

    async def attach_image(
        self, collection: str, doc_id: str, content: bytes, file_name: str
    ):
        """
        Envia a imagem e grava a URL no documento como uma única operação.

        Se a gravação falhar, a imagem recém enviada é removida; se der certo,
        a imagem anterior do documento é removida.
        """
        if self.image_host is None:
            raise CatalogValidationError("Hospedagem de imagens não configurada.")
        repository = self._repository(collection)
        current = self._require(repository.get(doc_id), "documento")
        previous_public_id = current.image_public_id

        uploaded = await self.image_host.upload_image(
            content, file_name, folder=IMAGE_FOLDERS[collection]
        )
        try:
            updated = repository.update(
                doc_id, {"imageUrl": uploaded.url, "imagePublicId": uploaded.public_id}
            )
        except Exception as exc:
            catalog_logger.error(
                "Image reference write failed, removing uploaded asset",
                exc=exc,
                collection=collection,
                doc_id=doc_id,
                public_id=uploaded.public_id,
            )
            await self._delete_asset(uploaded.public_id)
            raise

        if previous_public_id and previous_public_id != uploaded.public_id:
            await self._delete_asset(previous_public_id)
        return updated

    async def _delete_asset(self, public_id: str) -> None:
        try:
            await self.image_host.delete_image(public_id)
        except Exception as exc:
            catalog_logger.error("Asset cleanup failed", exc=exc, public_id=public_id)

    @staticmethod
    def _require(value, label: str):
        if value is None:
            raise LookupError(f"{label} não encontrado")
        return value
