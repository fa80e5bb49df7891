"""Order (pedido) business logic service."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Iterable, Optional, Sequence

from pdv.core.logging import orders_logger
from pdv.domain import cart as cart_ops
from pdv.domain.cart import Cart
from pdv.domain.errors import CatalogValidationError, EmptyCartError
from pdv.domain.filters import OrderFilters
from pdv.domain.models import CatalogEntry, Order, OrderItem, OrderStatus
from pdv.domain.orders import (
    ORIGIN_CARDAPIO,
    build_order_items,
    build_order_record,
    ensure_editable,
    recompute_order,
    transition,
)
from pdv.domain.pricing import compute_totals
from pdv.repositories.order_repository import OrderRepository
from pdv.services.catalog_view import CatalogView


@dataclass(frozen=True)
class RequestedItem:
    """Item pedido pelo cliente ou adicionado na edição."""

    product_id: str
    size: Optional[str] = None
    qty: int = 1


class OrderService:
    """Service for order-related business logic."""

    def __init__(self, orders: OrderRepository, catalog: CatalogView):
        self.orders = orders
        self.catalog = catalog

    def _entry(self, product_id: str) -> CatalogEntry:
        entry = self.catalog.find_visible(product_id)
        if entry is None:
            raise CatalogValidationError(f"Item indisponível: {product_id}")
        return entry

    def _cart_for(self, items: Iterable[RequestedItem]) -> Cart:
        cart = Cart()
        for item in items:
            entry = self._entry(item.product_id)
            cart = cart_ops.add_to_cart(cart, entry, item.size)
            line_id = cart_ops.line_id_for_entry(entry, item.size)
            cart = cart_ops.change_quantity(cart, line_id, item.qty - 1)
        return cart

    def place_order(
        self,
        items: Sequence[RequestedItem],
        note: str = "",
        *,
        now: Optional[datetime] = None,
    ) -> Order:
        """Pedido do cardápio público: status solicitado e número sequencial."""
        cart = self._cart_for(items)
        if not cart:
            raise EmptyCartError()
        record = build_order_record(
            cart,
            compute_totals(cart),
            status=OrderStatus.SOLICITADO,
            origin=ORIGIN_CARDAPIO,
            note=note,
            now=now,
        )
        record = replace(record, pedido_number=self.orders.next_number())
        order = self.orders.add(OrderRepository.to_document(record))
        orders_logger.info(
            "Order placed",
            order_id=order.id,
            pedido_number=order.pedido_number,
            total=str(order.total),
        )
        return order

    def list_orders(self, filters: Optional[OrderFilters] = None) -> list[Order]:
        orders = self.orders.list_recent()
        return filters.apply(orders) if filters else orders

    def get_order(self, order_id: str) -> Optional[Order]:
        return self.orders.get(order_id)

    def _require(self, order_id: str) -> Order:
        order = self.orders.get(order_id)
        if order is None:
            raise LookupError(f"Pedido {order_id} não encontrado")
        return order

    def update_status(self, order_id: str, status: OrderStatus) -> Order:
        order = transition(self._require(order_id), status)
        updated = self.orders.update(
            order_id,
            {"status": order.status.value, "updatedAt": order.updated_at.isoformat()},
        )
        orders_logger.info("Order status changed", order_id=order_id, status=status.value)
        return updated

    def edit_order(self, order_id: str, items: Sequence[RequestedItem]) -> Order:
        """
        Substitui os itens do pedido. Itens já presentes mantêm preço e nome
        gravados; itens novos vêm do catálogo visível.
        """
        order = self._require(order_id)
        ensure_editable(order)

        existing = {cart_ops.line_id_for(i.product_id, i.size): i for i in order.itens}
        merged: dict[str, RequestedItem] = {}
        for requested in items:
            if requested.qty < 1:
                raise CatalogValidationError("Quantidade mínima é 1.")
            key = cart_ops.line_id_for(requested.product_id, requested.size)
            previous = merged.get(key)
            if previous is not None:
                requested = replace(previous, qty=previous.qty + requested.qty)
            merged[key] = requested

        new_items: list[OrderItem] = []
        for key, requested in merged.items():
            current = existing.get(key)
            if current is not None:
                new_items.append(replace(current, qty=requested.qty))
            else:
                new_items.extend(build_order_items(self._cart_for([requested])))

        updated = recompute_order(order, new_items)
        updated = replace(updated, updated_at=datetime.now())
        saved = self.orders.update(order_id, OrderRepository.to_document(updated))
        orders_logger.info("Order edited", order_id=order_id, items=len(new_items))
        return saved

    def delete_order(self, order_id: str) -> None:
        self.orders.delete(order_id)
        orders_logger.info("Order deleted", order_id=order_id)

    def available_entries(self, order_id: str, search: Optional[str] = None) -> list[CatalogEntry]:
        """Itens visíveis que ainda não estão no pedido (tela de edição)."""
        order = self._require(order_id)
        in_order = {i.product_id for i in order.itens}
        term = (search or "").strip().lower()
        return [
            e
            for e in self.catalog.visible.entries
            if e.id not in in_order and term in e.name.lower()
        ]
