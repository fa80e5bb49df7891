"""Visão reativa do catálogo visível (cardápio e caixa)."""

from __future__ import annotations

from typing import Callable, List, Optional

from pdv.core.logging import catalog_logger
from pdv.domain.models import CatalogEntry, Category, Combo, Product
from pdv.domain.visibility import VisibleCatalog, resolve_visibility
from pdv.repositories.category_repository import CategoryRepository
from pdv.repositories.combo_repository import ComboRepository
from pdv.repositories.product_repository import ProductRepository


class CatalogView:
    """
    Assina categorias, produtos e combos e recalcula a visibilidade em cascata
    do zero a cada notificação de qualquer uma das três coleções.
    """

    def __init__(
        self,
        categories: CategoryRepository,
        products: ProductRepository,
        combos: ComboRepository,
    ):
        self._categories: List[Category] = []
        self._products: List[Product] = []
        self._combos: List[Combo] = []
        self.visible = VisibleCatalog()
        self._unsubscribes: List[Callable[[], None]] = [
            categories.subscribe(self._on_categories),
            products.subscribe(self._on_products),
            combos.subscribe(self._on_combos),
        ]

    def _on_categories(self, items: List[Category]) -> None:
        self._categories = items
        self._recompute()

    def _on_products(self, items: List[Product]) -> None:
        self._products = items
        self._recompute()

    def _on_combos(self, items: List[Combo]) -> None:
        self._combos = items
        self._recompute()

    def _recompute(self) -> None:
        self.visible = resolve_visibility(self._categories, self._products, self._combos)
        catalog_logger.debug(
            "Visible catalog recomputed",
            categories=len(self.visible.categories),
            products=len(self.visible.products),
            combos=len(self.visible.combos),
        )

    @property
    def categories(self) -> List[Category]:
        return list(self._categories)

    @property
    def products(self) -> List[Product]:
        return list(self._products)

    @property
    def combos(self) -> List[Combo]:
        return list(self._combos)

    def find_visible(self, entry_id: str) -> Optional[CatalogEntry]:
        for entry in self.visible.entries:
            if entry.id == entry_id:
                return entry
        return None

    def close(self) -> None:
        for unsubscribe in self._unsubscribes:
            unsubscribe()
        self._unsubscribes.clear()
