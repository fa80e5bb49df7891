import threading
from datetime import datetime
from decimal import Decimal

import pytest

from pdv.domain import cart as cart_ops
from pdv.domain.coupons import CouponTable
from pdv.domain.errors import (
    CatalogValidationError,
    CheckoutInProgressError,
    CheckoutSaveError,
    EmptyCartError,
    InvalidCouponError,
    InvalidPaymentMethodError,
    InvalidStatusTransition,
    MissingPaymentMethodError,
)
from pdv.domain.models import OrderStatus, PaymentMethod
from pdv.repositories.order_repository import OrderRepository
from pdv.services.checkout_service import CheckoutService, CheckoutSession
from pdv.services.order_service import RequestedItem


class FailingOrderRepository(OrderRepository):
    def add(self, data):
        raise RuntimeError("store offline")


class _StoreStub:
    def list(self, collection):
        return []

    def next_sequence(self, name, seed):
        return seed()


def test_finalize_empty_cart_writes_nothing(checkout_service, orders_repo):
    session = checkout_service.open_session()
    session.set_payment_method("pix")

    with pytest.raises(EmptyCartError) as info:
        checkout_service.finalize(session.id)

    assert info.value.message == "Carrinho vazio."
    assert orders_repo.list_all() == []


def test_finalize_requires_payment_method(checkout_service, seeded, orders_repo):
    session = checkout_service.open_session()
    checkout_service.add_item(session.id, seeded["cookie"].id)

    with pytest.raises(MissingPaymentMethodError):
        checkout_service.finalize(session.id)
    assert orders_repo.list_all() == []


def test_unknown_coupon_clears_applied(checkout_service):
    session = checkout_service.open_session()
    checkout_service.apply_coupon(session.id, "promo10")
    assert session.applied_coupon.code == "PROMO10"

    with pytest.raises(InvalidCouponError) as info:
        checkout_service.apply_coupon(session.id, "XYZ")

    assert info.value.message == "Cupom inválido."
    assert session.applied_coupon is None


def test_empty_coupon_code_removes_coupon(checkout_service):
    session = checkout_service.open_session()
    checkout_service.apply_coupon(session.id, "DESC5")
    checkout_service.apply_coupon(session.id, "  ")
    assert session.applied_coupon is None


def test_invalid_payment_method(checkout_service):
    session = checkout_service.open_session()
    with pytest.raises(InvalidPaymentMethodError):
        checkout_service.set_payment_method(session.id, "cheque")


def test_add_hidden_item_rejected(checkout_service, catalog_service, seeded):
    catalog_service.toggle_product(seeded["cookie"].id)
    session = checkout_service.open_session()
    with pytest.raises(CatalogValidationError):
        checkout_service.add_item(session.id, seeded["cookie"].id)


def test_finalize_creates_finalized_order(checkout_service, seeded, orders_repo):
    session = checkout_service.open_session()
    checkout_service.add_item(session.id, seeded["shake"].id, "500ml")
    checkout_service.add_item(session.id, seeded["cookie"].id)
    checkout_service.add_item(session.id, seeded["cookie"].id)
    checkout_service.update_inputs(
        session.id, {"delivery_fee_input": "3,00", "discount_percent_input": "10", "note": "sem gelo"}
    )
    checkout_service.apply_coupon(session.id, "DESC5")
    checkout_service.set_payment_method(session.id, "money")

    sale = checkout_service.finalize(session.id)

    assert sale.status == OrderStatus.FINALIZADO
    assert sale.origin == "caixa"
    assert sale.pedido_number == 1
    assert sale.payment_method == PaymentMethod.MONEY
    assert sale.subtotal == Decimal("32")
    # 32 + 3 - 3.2 - 5
    assert sale.total == Decimal("26.8")
    assert sale.coupon.code == "DESC5"
    assert sale.note == "sem gelo"

    # estado do caixa limpo após a venda
    assert not session.cart
    assert session.payment_method is None
    assert session.applied_coupon is None
    assert session.last_sale.id == sale.id
    assert orders_repo.get(sale.id).total == Decimal("26.8")


def test_save_failure_keeps_state(seeded, catalog_view):
    session = CheckoutSession(id="s1")
    entry = catalog_view.find_visible(seeded["cookie"].id)
    session.cart = cart_ops.add_to_cart(session.cart, entry)
    session.set_payment_method("pix")
    failing = FailingOrderRepository(_StoreStub())

    with pytest.raises(CheckoutSaveError):
        session.finalize(failing)

    assert session.save_error == "Erro ao finalizar venda."
    assert session.saving is False
    assert len(session.cart) == 1
    assert session.payment_method == PaymentMethod.PIX


def test_load_order_then_finalize_in_place(checkout_service, order_service, seeded, orders_repo):
    placed = order_service.place_order(
        [RequestedItem(seeded["cookie"].id, qty=2)],
        note="mesa 4",
        now=datetime(2024, 5, 1, 10, 30),
    )
    session = checkout_service.open_session()
    checkout_service.load_order(session.id, placed.id)
    assert session.pedido_id == placed.id
    assert session.cart.get(seeded["cookie"].id).quantity == 2
    assert session.note == "mesa 4"

    checkout_service.set_payment_method(session.id, "debit")
    sale = checkout_service.finalize(session.id)

    assert sale.id == placed.id
    assert sale.status == OrderStatus.FINALIZADO
    assert sale.pedido_number == placed.pedido_number
    assert sale.hora == "10:30"
    assert sale.origin == "cardapio"
    assert len(orders_repo.list_all()) == 1


def test_finalize_existing_finalized_order_rejected(checkout_service, order_service, seeded):
    placed = order_service.place_order([RequestedItem(seeded["cookie"].id)])
    order_service.update_status(placed.id, OrderStatus.FINALIZADO)

    session = checkout_service.open_session()
    checkout_service.load_order(session.id, placed.id)
    checkout_service.set_payment_method(session.id, "pix")

    with pytest.raises(InvalidStatusTransition):
        checkout_service.finalize(session.id)
    assert session.save_error == ""


def test_load_missing_order_is_noop(checkout_service, seeded):
    session = checkout_service.open_session()
    checkout_service.add_item(session.id, seeded["cookie"].id)
    checkout_service.load_order(session.id, "missing")
    assert session.pedido_id is None
    assert len(session.cart) == 1


class BlockingOrderRepository(OrderRepository):
    """Segura a gravação até `release` ser sinalizado."""

    def __init__(self, store):
        super().__init__(store)
        self.entered = threading.Event()
        self.release = threading.Event()

    def add(self, data):
        self.entered.set()
        self.release.wait(timeout=5)
        return super().add(data)


def test_second_finalize_while_saving_is_rejected(store, catalog_view, seeded):
    blocking = BlockingOrderRepository(store)
    service = CheckoutService(blocking, catalog_view, CouponTable.default())
    session = service.open_session()
    service.add_item(session.id, seeded["cookie"].id)
    service.set_payment_method(session.id, "pix")

    results = []
    worker = threading.Thread(target=lambda: results.append(service.finalize(session.id)))
    worker.start()
    assert blocking.entered.wait(timeout=5)

    with pytest.raises(CheckoutInProgressError):
        service.finalize(session.id)

    blocking.release.set()
    worker.join(timeout=5)

    assert len(results) == 1
    assert [o.id for o in blocking.list_all()] == [results[0].id]
    assert session.saving is False
    assert not session.cart
    # venda concluída: nova tentativa encontra o carrinho vazio
    with pytest.raises(EmptyCartError):
        service.finalize(session.id)


def test_idle_sessions_are_evicted(orders_repo, catalog_view):
    now = [0.0]
    service = CheckoutService(
        orders_repo, catalog_view, CouponTable.default(), idle_ttl=60, clock=lambda: now[0]
    )
    idle = service.open_session()
    busy = service.open_session()

    now[0] = 50.0
    service.get_session(busy.id)
    now[0] = 100.0
    fresh = service.open_session()

    with pytest.raises(LookupError):
        service.get_session(idle.id)
    assert service.get_session(busy.id) is busy
    assert service.get_session(fresh.id) is fresh
