"""
Cashier (caixa) checkout.

`CheckoutSession` holds the state of one cashier screen: cart, note, fee and
discount inputs, applied coupon, payment method and the order being
finalized. Sessions live in process memory in `CheckoutService`.
"""

from __future__ import annotations

import threading
import time
import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Callable, Dict, Optional

from pdv.core.config import settings
from pdv.core.logging import checkout_logger
from pdv.domain import cart as cart_ops
from pdv.domain.cart import Cart
from pdv.domain.coupons import CouponTable, normalize_code
from pdv.domain.errors import (
    CatalogValidationError,
    CheckoutInProgressError,
    CheckoutSaveError,
    EmptyCartError,
    InvalidCouponError,
    InvalidPaymentMethodError,
    MissingPaymentMethodError,
    PDVError,
)
from pdv.domain.models import Coupon, Order, OrderStatus, PaymentMethod
from pdv.domain.orders import ORIGIN_CAIXA, build_order_record, transition
from pdv.domain.pricing import OrderTotals, compute_totals
from pdv.repositories.order_repository import OrderRepository
from pdv.services.catalog_view import CatalogView


@dataclass
class CheckoutSession:
    id: str
    cart: Cart = field(default_factory=Cart)
    note: str = ""
    delivery_fee_input: str = ""
    discount_percent_input: str = ""
    discount_value_input: str = ""
    coupon_input: str = ""
    applied_coupon: Optional[Coupon] = None
    payment_method: Optional[PaymentMethod] = None
    pedido_id: Optional[str] = None
    saving: bool = False
    save_error: str = ""
    last_sale: Optional[Order] = None
    touched_at: float = field(default_factory=time.monotonic)
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False, compare=False)

    @property
    def totals(self) -> OrderTotals:
        return compute_totals(
            self.cart,
            self.delivery_fee_input,
            self.discount_percent_input,
            self.discount_value_input,
            self.applied_coupon,
        )

    # -- carrinho ---------------------------------------------------------

    def clear(self) -> None:
        self.cart = cart_ops.clear_cart()
        self.note = ""

    def apply_coupon(self, code: Optional[str], coupons: CouponTable) -> Optional[Coupon]:
        """Código vazio remove o cupom; código desconhecido remove e levanta InvalidCouponError."""
        self.coupon_input = code or ""
        if not normalize_code(code):
            self.applied_coupon = None
            return None
        coupon = coupons.lookup(code)
        if coupon is None:
            self.applied_coupon = None
            raise InvalidCouponError()
        self.applied_coupon = coupon
        return coupon

    def set_payment_method(self, method: Optional[str]) -> None:
        if method is None:
            self.payment_method = None
            return
        try:
            self.payment_method = PaymentMethod(method)
        except ValueError:
            raise InvalidPaymentMethodError() from None

    def load_order(self, order: Order) -> None:
        self.pedido_id = order.id
        self.cart = cart_ops.cart_from_order(order)
        self.note = order.note

    def reset(self) -> None:
        self.cart = Cart()
        self.pedido_id = None
        self.note = ""
        self.delivery_fee_input = ""
        self.coupon_input = ""
        self.applied_coupon = None
        self.discount_percent_input = ""
        self.discount_value_input = ""
        self.payment_method = None

    # -- finalização ------------------------------------------------------

    def finalize(self, orders: OrderRepository, *, now: Optional[datetime] = None) -> Order:
        """
        Grava a venda como pedido finalizado.

        Carrinho vazio ou sem forma de pagamento: nada é gravado. Falha no
        banco: o erro fica em `save_error` e o estado é mantido para nova tentativa.
        Uma segunda chamada enquanto a primeira grava levanta CheckoutInProgressError.
        """
        with self._lock:
            if self.saving:
                raise CheckoutInProgressError()
            self.save_error = ""
            if not self.cart:
                raise EmptyCartError()
            if self.payment_method is None:
                raise MissingPaymentMethodError()

            now = now or datetime.now()
            record = build_order_record(
                self.cart,
                self.totals,
                status=OrderStatus.FINALIZADO,
                origin=ORIGIN_CAIXA,
                note=self.note,
                payment_method=self.payment_method,
                coupon=self.applied_coupon,
                now=now,
            )
            self.saving = True

        try:
            if self.pedido_id:
                sale = self._finalize_existing(orders, record, now)
            else:
                sale = self._create_finalized(orders, record)
        except PDVError:
            raise
        except Exception as exc:
            checkout_logger.error(
                "Checkout finalize failed", exc=exc, session_id=self.id, pedido_id=self.pedido_id
            )
            self.save_error = CheckoutSaveError.default_message
            raise CheckoutSaveError() from exc
        else:
            self.last_sale = sale
            self.reset()
        finally:
            self.saving = False

        checkout_logger.info(
            "Sale finalized",
            session_id=self.id,
            order_id=sale.id,
            pedido_number=sale.pedido_number,
            total=str(sale.total),
        )
        return sale

    def _create_finalized(self, orders: OrderRepository, record: Order) -> Order:
        record = replace(record, pedido_number=orders.next_number())
        return orders.add(OrderRepository.to_document(record))

    def _finalize_existing(self, orders: OrderRepository, record: Order, now: datetime) -> Order:
        existing = orders.get(self.pedido_id)
        if existing is None:
            raise LookupError(f"Pedido {self.pedido_id} não encontrado")
        transition(existing, OrderStatus.FINALIZADO, now=now)

        payload = OrderRepository.to_document(record)
        # número e data de criação são do pedido original
        payload.pop("pedidoNumber", None)
        payload.pop("createdAt", None)
        payload.pop("hora", None)
        payload.pop("origin", None)
        payload["updatedAt"] = now.isoformat()
        return orders.update(self.pedido_id, payload)


class CheckoutService:
    """
    Registro de sessões de caixa e operações sobre elas.

    Sessões sem uso há mais de `idle_ttl` segundos são descartadas na abertura
    de uma nova sessão; o cliente deve fechar a sua com `close_session`.
    """

    def __init__(
        self,
        orders: OrderRepository,
        catalog: CatalogView,
        coupons: CouponTable,
        *,
        idle_ttl: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.orders = orders
        self.catalog = catalog
        self.coupons = coupons
        self.idle_ttl = settings.CHECKOUT_SESSION_TTL if idle_ttl is None else idle_ttl
        self._clock = clock
        self._sessions: Dict[str, CheckoutSession] = {}
        self._registry_lock = threading.Lock()

    def open_session(self) -> CheckoutSession:
        session = CheckoutSession(id=uuid.uuid4().hex, touched_at=self._clock())
        with self._registry_lock:
            self._evict_idle()
            self._sessions[session.id] = session
        checkout_logger.info("Checkout session opened", session_id=session.id)
        return session

    def _evict_idle(self) -> None:
        limit = self._clock() - self.idle_ttl
        stale = [
            sid for sid, s in self._sessions.items() if s.touched_at < limit and not s.saving
        ]
        for sid in stale:
            del self._sessions[sid]
        if stale:
            checkout_logger.info("Idle checkout sessions evicted", count=len(stale))

    def get_session(self, session_id: str) -> CheckoutSession:
        with self._registry_lock:
            session = self._sessions.get(session_id)
        if session is None:
            raise LookupError(f"Sessão de caixa {session_id} não encontrada")
        session.touched_at = self._clock()
        return session

    def close_session(self, session_id: str) -> None:
        with self._registry_lock:
            self._sessions.pop(session_id, None)

    def add_item(self, session_id: str, entry_id: str, size: Optional[str] = None) -> CheckoutSession:
        session = self.get_session(session_id)
        entry = self.catalog.find_visible(entry_id)
        if entry is None:
            raise CatalogValidationError("Item indisponível no catálogo.")
        session.cart = cart_ops.add_to_cart(session.cart, entry, size)
        return session

    def change_quantity(self, session_id: str, line_id: str, delta: int) -> CheckoutSession:
        session = self.get_session(session_id)
        session.cart = cart_ops.change_quantity(session.cart, line_id, delta)
        return session

    def remove_item(self, session_id: str, line_id: str) -> CheckoutSession:
        session = self.get_session(session_id)
        session.cart = cart_ops.remove_from_cart(session.cart, line_id)
        return session

    def clear_cart(self, session_id: str) -> CheckoutSession:
        session = self.get_session(session_id)
        session.clear()
        return session

    def apply_coupon(self, session_id: str, code: Optional[str]) -> CheckoutSession:
        session = self.get_session(session_id)
        session.apply_coupon(code, self.coupons)
        return session

    def update_inputs(self, session_id: str, changes: dict) -> CheckoutSession:
        """Observação, taxa de entrega e descontos manuais (texto como digitado)."""
        session = self.get_session(session_id)
        for key in ("note", "delivery_fee_input", "discount_percent_input", "discount_value_input"):
            if key in changes:
                setattr(session, key, changes[key] or "")
        return session

    def set_payment_method(self, session_id: str, method: Optional[str]) -> CheckoutSession:
        session = self.get_session(session_id)
        session.set_payment_method(method)
        return session

    def load_order(self, session_id: str, order_id: str) -> CheckoutSession:
        """Pedido inexistente não altera a sessão."""
        session = self.get_session(session_id)
        order = self.orders.get(order_id)
        if order is None:
            checkout_logger.info("Order to load not found", session_id=session_id, order_id=order_id)
            return session
        session.load_order(order)
        return session

    def finalize(self, session_id: str) -> Order:
        session = self.get_session(session_id)
        return session.finalize(self.orders)
