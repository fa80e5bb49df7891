"""
Visibilidade em cascata do catálogo: categoria -> produto -> combo.
Recalculado do zero a cada mudança em qualquer uma das três coleções.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Optional, Sequence

from pdv.domain.models import CatalogEntry, Category, Combo, Product


NATIVE_COMBO_CATEGORY_ID = "native-combos"
NATIVE_COMBO_CATEGORY_NAME = "Combos"


@dataclass
class VisibleCatalog:
    """Subconjuntos exibidos ao cliente e ao caixa, na ordem de origem."""

    categories: list[Category] = field(default_factory=list)
    products: list[Product] = field(default_factory=list)
    combos: list[Combo] = field(default_factory=list)

    @property
    def entries(self) -> list[CatalogEntry]:
        return [*self.products, *self.combos]


def resolve_category(
    category_id: Optional[str], categories: Sequence[Category]
) -> Optional[Category]:
    if not category_id:
        return None
    for category in categories:
        if category.id == category_id:
            return category
    return None


def is_product_visible(product: Product, categories: Sequence[Category]) -> bool:
    if not product.active:
        return False
    category = resolve_category(product.category_id, categories)
    return bool(category and category.active)


def is_combo_visible(
    combo: Combo, categories: Sequence[Category], products: Sequence[Product]
) -> bool:
    """Combo ativo, categoria ativa e todos os itens apontando para produtos ativos."""
    if not combo.active:
        return False
    category = resolve_category(combo.category_id, categories)
    if not (category and category.active):
        return False
    by_id = {p.id: p for p in products}
    # produto removido conta como inativo
    return all(
        item.id in by_id and by_id[item.id].active for item in combo.items
    )


def resolve_visibility(
    categories: Iterable[Category],
    products: Iterable[Product],
    combos: Iterable[Combo],
) -> VisibleCatalog:
    categories = list(categories)
    products = list(products)
    return VisibleCatalog(
        categories=[c for c in categories if c.active],
        products=[p for p in products if is_product_visible(p, categories)],
        combos=[c for c in combos if is_combo_visible(c, categories, products)],
    )


def effective_active(product: Product, categories: Sequence[Category]) -> bool:
    """Status exibido na administração: produto aparece inativo se a categoria está."""
    category = resolve_category(product.category_id, categories)
    if category is not None and not category.active:
        return False
    return product.active


def filter_entries(
    entries: Iterable[CatalogEntry],
    category_id: Optional[str] = None,
    search: Optional[str] = None,
) -> list[CatalogEntry]:
    """Filtro do cardápio/caixa por categoria selecionada e busca por nome."""
    term = (search or "").strip().lower()
    result = []
    for entry in entries:
        if category_id:
            if category_id == NATIVE_COMBO_CATEGORY_ID:
                if not entry.is_combo:
                    continue
            elif entry.category_id != category_id:
                continue
        if term and term not in (entry.name or "").lower():
            continue
        result.append(entry)
    return result
