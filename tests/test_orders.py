from dataclasses import replace
from datetime import datetime
from decimal import Decimal

import pytest

from pdv.domain import cart as cart_ops
from pdv.domain.cart import Cart
from pdv.domain.coupons import CouponTable
from pdv.domain.errors import (
    CatalogValidationError,
    EmptyCartError,
    InvalidStatusTransition,
    OrderFinalizedError,
    SizeSelectionRequired,
)
from pdv.domain.filters import OrderFilters
from pdv.domain.models import Order, OrderStatus
from pdv.domain.orders import ORIGIN_CAIXA, build_order_record, can_transition, transition
from pdv.domain.pricing import compute_totals
from pdv.repositories.order_repository import OrderRepository
from pdv.services.order_service import RequestedItem


# -----------------------------------------------------------------------------
# Ciclo de vida
# -----------------------------------------------------------------------------


@pytest.mark.parametrize(
    "current, target",
    [
        (OrderStatus.SOLICITADO, OrderStatus.ANDAMENTO),
        (OrderStatus.SOLICITADO, OrderStatus.CANCELADO),
        (OrderStatus.ANDAMENTO, OrderStatus.CONCLUIDO),
        (OrderStatus.PREPARANDO, OrderStatus.FINALIZADO),
        (OrderStatus.CONCLUIDO, OrderStatus.FINALIZADO),
    ],
)
def test_forward_transitions(current, target):
    assert can_transition(current, target)


@pytest.mark.parametrize(
    "current, target",
    [
        (OrderStatus.ANDAMENTO, OrderStatus.SOLICITADO),
        (OrderStatus.CONCLUIDO, OrderStatus.PREPARANDO),
        (OrderStatus.ANDAMENTO, OrderStatus.CANCELADO),
        (OrderStatus.FINALIZADO, OrderStatus.CANCELADO),
        (OrderStatus.CANCELADO, OrderStatus.SOLICITADO),
    ],
)
def test_backward_or_terminal_transitions_rejected(current, target):
    order = Order(id="o", status=current)
    with pytest.raises(InvalidStatusTransition):
        transition(order, target)


def test_transition_stamps_update_time():
    now = datetime(2024, 1, 2, 3, 4)
    order = transition(Order(id="o", status=OrderStatus.SOLICITADO), OrderStatus.PREPARANDO, now=now)
    assert order.status == OrderStatus.PREPARANDO
    assert order.updated_at == now


# -----------------------------------------------------------------------------
# Serviço de pedidos
# -----------------------------------------------------------------------------


def test_place_order_numbers_sequentially(order_service, seeded):
    first = order_service.place_order([RequestedItem(seeded["cookie"].id)])
    second = order_service.place_order(
        [RequestedItem(seeded["shake"].id, "300ml", 2), RequestedItem(seeded["shake"].id, "300ml")]
    )

    assert first.status == OrderStatus.SOLICITADO
    assert first.origin == "cardapio"
    assert (first.pedido_number, second.pedido_number) == (1, 2)
    # itens repetidos somam na mesma linha
    assert [(i.name, i.qty) for i in second.itens] == [("Milkshake (300ml)", 3)]
    assert second.total == Decimal("36")


def test_numbering_continues_from_legacy_max(order_service, orders_repo, seeded):
    orders_repo.add({"pedidoNumber": 41, "status": "finalizado", "itens": []})
    order = order_service.place_order([RequestedItem(seeded["cookie"].id)])
    assert order.pedido_number == 42


def test_place_order_rejects_empty_and_hidden(order_service, catalog_service, seeded):
    with pytest.raises(EmptyCartError):
        order_service.place_order([])
    catalog_service.toggle_category(seeded["doces"].id)
    with pytest.raises(CatalogValidationError):
        order_service.place_order([RequestedItem(seeded["cookie"].id)])


def test_size_required_on_public_order(order_service, seeded):
    with pytest.raises(SizeSelectionRequired):
        order_service.place_order([RequestedItem(seeded["shake"].id)])


def _order_with_fee(orders_repo, catalog_view, seeded) -> Order:
    cookie = catalog_view.find_visible(seeded["cookie"].id)
    cart = cart_ops.add_to_cart(Cart(), cookie)
    coupon = CouponTable.default().lookup("PROMO10")
    record = build_order_record(
        cart,
        compute_totals(cart, "4,00", None, "1", coupon),
        status=OrderStatus.ANDAMENTO,
        origin=ORIGIN_CAIXA,
        coupon=coupon,
        now=datetime(2024, 3, 1, 12, 0),
    )
    return orders_repo.add(OrderRepository.to_document(replace(record, pedido_number=7)))


def test_edit_keeps_fee_discounts_and_coupon(order_service, orders_repo, catalog_view, seeded):
    order = _order_with_fee(orders_repo, catalog_view, seeded)
    assert order.total == Decimal("10.2")  # 8 + 4 - 1 - 0.8

    edited = order_service.edit_order(
        order.id,
        [RequestedItem(seeded["cookie"].id, qty=2), RequestedItem(seeded["combo"].id)],
    )

    assert [(i.product_id, i.qty, i.total_item) for i in edited.itens] == [
        (seeded["cookie"].id, 2, Decimal("16")),
        (seeded["combo"].id, 1, Decimal("15")),
    ]
    assert edited.subtotal == Decimal("31")
    assert edited.delivery_fee == Decimal("4")
    assert edited.coupon.code == "PROMO10"
    # 31 + 4 - 1 - 3.1
    assert edited.total == Decimal("30.9")
    assert edited.pedido_number == 7


def test_edit_existing_item_keeps_snapshot_price(order_service, orders_repo, catalog_view, catalog_service, seeded):
    order = _order_with_fee(orders_repo, catalog_view, seeded)
    catalog_service.update_product(seeded["cookie"].id, {"price": "20"})

    edited = order_service.edit_order(order.id, [RequestedItem(seeded["cookie"].id, qty=3)])

    assert edited.itens[0].price == Decimal("8")


def test_edit_finalized_order_rejected(order_service, seeded):
    order = order_service.place_order([RequestedItem(seeded["cookie"].id)])
    order_service.update_status(order.id, OrderStatus.FINALIZADO)
    with pytest.raises(OrderFinalizedError):
        order_service.edit_order(order.id, [RequestedItem(seeded["cookie"].id)])


def test_update_status_backwards_rejected(order_service, seeded):
    order = order_service.place_order([RequestedItem(seeded["cookie"].id)])
    order_service.update_status(order.id, OrderStatus.CONCLUIDO)
    with pytest.raises(InvalidStatusTransition):
        order_service.update_status(order.id, OrderStatus.PREPARANDO)


def test_list_orders_filters(order_service, seeded):
    open_order = order_service.place_order(
        [RequestedItem(seeded["cookie"].id)], now=datetime(2024, 1, 1, 9, 0)
    )
    closed = order_service.place_order(
        [RequestedItem(seeded["shake"].id, "500ml")], now=datetime(2024, 1, 1, 10, 0)
    )
    order_service.update_status(closed.id, OrderStatus.FINALIZADO)

    assert [o.id for o in order_service.list_orders(OrderFilters("abertos"))] == [open_order.id]
    assert [o.id for o in order_service.list_orders(OrderFilters("fechados"))] == [closed.id]
    assert [o.id for o in order_service.list_orders(OrderFilters("todos"))] == [closed.id, open_order.id]
    assert [o.id for o in order_service.list_orders(OrderFilters("todos", "cookie"))] == [open_order.id]


def test_available_entries_excludes_items_in_order(order_service, seeded):
    order = order_service.place_order([RequestedItem(seeded["cookie"].id)])
    ids = {e.id for e in order_service.available_entries(order.id)}
    assert ids == {seeded["shake"].id, seeded["combo"].id}
    assert [e.id for e in order_service.available_entries(order.id, "combo")] == [seeded["combo"].id]


def test_delete_order(order_service, seeded):
    order = order_service.place_order([RequestedItem(seeded["cookie"].id)])
    order_service.delete_order(order.id)
    assert order_service.get_order(order.id) is None


def test_edit_merges_repeated_items_into_one_line(order_service, orders_repo, catalog_view, seeded):
    order = _order_with_fee(orders_repo, catalog_view, seeded)
    cookie_id = seeded["cookie"].id
    shake_id = seeded["shake"].id

    edited = order_service.edit_order(
        order.id,
        [
            RequestedItem(cookie_id, qty=1),
            RequestedItem(shake_id, "300ml"),
            RequestedItem(cookie_id, qty=2),
            RequestedItem(shake_id, "300ml", qty=2),
        ],
    )

    assert [(i.product_id, i.size, i.qty) for i in edited.itens] == [
        (cookie_id, None, 3),
        (shake_id, "300ml", 3),
    ]
    assert edited.subtotal == Decimal("60")  # 3 * 8 + 3 * 12


def test_legacy_item_id_with_size_suffix_loads_as_product_id():
    order = OrderRepository.from_document(
        {
            "id": "o1",
            "status": "solicitado",
            "itens": [
                {"id": "shake-P", "size": "P", "name": "Milkshake", "qty": 2, "price": 12},
                {"id": "cookie", "name": "Cookie", "qty": 1, "price": 8},
            ],
        }
    )

    assert [i.product_id for i in order.itens] == ["shake", "cookie"]
    assert [line.id for line in cart_ops.cart_from_order(order)] == ["shake-P", "cookie"]
