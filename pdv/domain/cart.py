"""
Carrinho imutável: cada operação devolve um novo Cart.

A identidade de uma linha é o id do produto, ou "produto-tamanho" quando um
tamanho foi escolhido. Adicionar de novo a mesma identidade soma 1 na
quantidade sem atualizar o preço já registrado.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Iterator, Optional

from pdv.domain.errors import SizeSelectionRequired, UnknownSizeError
from pdv.domain.models import CartLine, CatalogEntry, Order, SizeVariant, ZERO


@dataclass(frozen=True)
class Cart:
    lines: tuple[CartLine, ...] = ()

    def __iter__(self) -> Iterator[CartLine]:
        return iter(self.lines)

    def __len__(self) -> int:
        return len(self.lines)

    def __bool__(self) -> bool:
        return bool(self.lines)

    def get(self, line_id: str) -> Optional[CartLine]:
        for line in self.lines:
            if line.id == line_id:
                return line
        return None

    @property
    def item_count(self) -> int:
        return sum(line.quantity for line in self.lines)


def line_id_for(product_id: str, size: Optional[str] = None) -> str:
    return f"{product_id}-{size}" if size else product_id


def _choose_variant(entry: CatalogEntry, size: Optional[str]) -> Optional[SizeVariant]:
    sizes = entry.sizes
    if not sizes:
        return None
    if size is None:
        if len(sizes) > 1:
            raise SizeSelectionRequired(entry.id, [s.size for s in sizes])
        return sizes[0]
    variant = entry.find_size(size)
    if variant is None:
        raise UnknownSizeError(f"Tamanho '{size}' não existe para {entry.name}.")
    return variant


def line_id_for_entry(entry: CatalogEntry, size: Optional[str] = None) -> str:
    variant = _choose_variant(entry, size)
    return line_id_for(entry.id, variant.size if variant else None)


def add_to_cart(cart: Cart, entry: CatalogEntry, size: Optional[str] = None) -> Cart:
    """
    Adiciona uma unidade do produto/combo ao carrinho.

    Produtos com mais de um tamanho exigem `size` já escolhido; produto com
    um único tamanho usa esse tamanho automaticamente.
    """
    variant = _choose_variant(entry, size)
    line_id = line_id_for(entry.id, variant.size if variant else None)

    if cart.get(line_id) is not None:
        return Cart(
            tuple(
                replace(line, quantity=line.quantity + 1) if line.id == line_id else line
                for line in cart.lines
            )
        )

    if variant is not None:
        line = CartLine(
            id=line_id,
            product_id=entry.id,
            name=f"{entry.name} ({variant.size})",
            price=variant.price if variant.price is not None else ZERO,
            size=variant.size,
            category_id=entry.category_id,
            is_combo=entry.is_combo,
            image_url=entry.image_url,
        )
    else:
        line = CartLine(
            id=line_id,
            product_id=entry.id,
            name=entry.name,
            price=entry.display_price(),
            category_id=entry.category_id,
            is_combo=entry.is_combo,
            image_url=entry.image_url,
        )
    return Cart(cart.lines + (line,))


def change_quantity(cart: Cart, line_id: str, delta: int) -> Cart:
    """Soma `delta` à quantidade; nunca fica abaixo de 1 e nunca remove a linha."""
    return Cart(
        tuple(
            replace(line, quantity=max(1, line.quantity + delta)) if line.id == line_id else line
            for line in cart.lines
        )
    )


def remove_from_cart(cart: Cart, line_id: str) -> Cart:
    return Cart(tuple(line for line in cart.lines if line.id != line_id))


def clear_cart() -> Cart:
    return Cart()


def cart_from_order(order: Order) -> Cart:
    """Carrega os itens de um pedido existente para o caixa."""
    return Cart(
        tuple(
            CartLine(
                id=line_id_for(item.product_id, item.size),
                product_id=item.product_id,
                name=item.name,
                price=item.price,
                quantity=item.qty,
                size=item.size,
                category_id=item.category_id,
                is_combo=item.is_combo,
                image_url=item.image_url,
            )
            for item in order.itens
        )
    )
