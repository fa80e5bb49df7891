"""
Filtros reutilizáveis da listagem de pedidos.
Centraliza a lógica de filtragem para evitar duplicação entre rotas e serviços.
"""

from dataclasses import dataclass
from typing import Optional

from pdv.domain.models import Order, OrderStatus
from pdv.domain.orders import OPEN_STATUSES


@dataclass
class OrderFilters:
    """
    Filtro de abertos/fechados + busca livre.

    "abertos" = qualquer status diferente de finalizado; "fechados" = finalizado.
    A busca cobre id, id curto, número, total, status, horário e itens.
    """

    scope: str = "abertos"
    search: Optional[str] = None

    def matches_scope(self, order: Order) -> bool:
        if self.scope == "fechados":
            return order.status == OrderStatus.FINALIZADO
        if self.scope == "abertos":
            return order.status in OPEN_STATUSES
        return True

    def search_text(self, order: Order) -> str:
        number = str(order.pedido_number).zfill(2) if order.pedido_number else ""
        items = " ".join(f"{i.qty}x {i.name}" for i in order.itens)
        parts = [
            order.id,
            order.short_id,
            number,
            str(order.total),
            order.status.value,
            order.hora or "",
            items,
        ]
        return " ".join(parts).lower()

    def matches(self, order: Order) -> bool:
        if not self.matches_scope(order):
            return False
        term = (self.search or "").strip().lower()
        return not term or term in self.search_text(order)

    def apply(self, orders: list[Order]) -> list[Order]:
        return [o for o in orders if self.matches(o)]
