"""
Ciclo de vida do pedido e montagem do documento persistido.

    solicitado -> andamento | preparando -> concluido | finalizado
    solicitado -> cancelado

Nenhuma transição volta para trás; finalizado e cancelado são terminais.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import Iterable, Optional

from pdv.domain.errors import InvalidStatusTransition, OrderFinalizedError
from pdv.domain.models import (
    CartLine,
    Coupon,
    Order,
    OrderItem,
    OrderStatus,
    PaymentMethod,
)
from pdv.domain.pricing import OrderTotals, compute_totals


ORIGIN_CARDAPIO = "cardapio"
ORIGIN_CAIXA = "caixa"

_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.SOLICITADO: frozenset(
        {
            OrderStatus.ANDAMENTO,
            OrderStatus.PREPARANDO,
            OrderStatus.CONCLUIDO,
            OrderStatus.FINALIZADO,
            OrderStatus.CANCELADO,
        }
    ),
    OrderStatus.ANDAMENTO: frozenset(
        {OrderStatus.PREPARANDO, OrderStatus.CONCLUIDO, OrderStatus.FINALIZADO}
    ),
    OrderStatus.PREPARANDO: frozenset({OrderStatus.CONCLUIDO, OrderStatus.FINALIZADO}),
    OrderStatus.CONCLUIDO: frozenset({OrderStatus.FINALIZADO}),
    OrderStatus.FINALIZADO: frozenset(),
    OrderStatus.CANCELADO: frozenset(),
}

OPEN_STATUSES = frozenset(s for s in OrderStatus if s != OrderStatus.FINALIZADO)


def can_transition(current: OrderStatus, target: OrderStatus) -> bool:
    return target in _TRANSITIONS[current]


def transition(order: Order, target: OrderStatus, *, now: Optional[datetime] = None) -> Order:
    """Retorna o pedido no novo status ou levanta InvalidStatusTransition."""
    if not can_transition(order.status, target):
        raise InvalidStatusTransition(order.status.value, target.value)
    return replace(order, status=target, updated_at=now or datetime.now())


def ensure_editable(order: Order) -> None:
    if order.is_finalized:
        raise OrderFinalizedError()


def build_order_items(cart: Iterable[CartLine]) -> list[OrderItem]:
    return [
        OrderItem(
            product_id=line.product_id,
            name=line.name,
            qty=line.quantity,
            price=line.price,
            total_item=line.price * line.quantity,
            size=line.size,
            is_combo=line.is_combo,
            category_id=line.category_id,
            image_url=line.image_url,
        )
        for line in cart
    ]


def items_as_cart_lines(items: Iterable[OrderItem]) -> list[CartLine]:
    return [
        CartLine(
            id=item.product_id,
            product_id=item.product_id,
            name=item.name,
            price=item.price,
            quantity=item.qty,
            size=item.size,
        )
        for item in items
    ]


def apply_totals(order: Order, totals: OrderTotals) -> Order:
    return replace(
        order,
        subtotal=totals.subtotal,
        delivery_fee=totals.delivery_fee,
        discount_percent=totals.discount_percent,
        discount_from_percent=totals.discount_from_percent,
        discount_value_manual=totals.discount_value_manual,
        coupon_discount_value=totals.coupon_discount_value,
        total_discounts=totals.total_discounts,
        total=totals.total,
    )


def build_order_record(
    cart: Iterable[CartLine],
    totals: OrderTotals,
    *,
    status: OrderStatus,
    origin: str,
    note: str = "",
    payment_method: Optional[PaymentMethod] = None,
    coupon: Optional[Coupon] = None,
    now: Optional[datetime] = None,
) -> Order:
    """Monta o pedido (ainda sem id e número) a partir do carrinho e dos totais."""
    now = now or datetime.now()
    order = Order(
        id="",
        status=status,
        itens=build_order_items(cart),
        note=note,
        payment_method=payment_method,
        coupon=coupon,
        origin=origin,
        hora=now.strftime("%H:%M"),
        created_at=now,
    )
    return apply_totals(order, totals)


def recompute_order(order: Order, items: Iterable[OrderItem]) -> Order:
    """
    Reaplica os itens editados e recalcula os totais com a mesma função do
    caixa, mantendo taxa de entrega, descontos e cupom já gravados no pedido.
    """
    items = [replace(item, total_item=item.price * item.qty) for item in items]
    totals = compute_totals(
        items_as_cart_lines(items),
        order.delivery_fee,
        order.discount_percent,
        order.discount_value_manual,
        order.coupon,
    )
    return apply_totals(replace(order, itens=items), totals)
