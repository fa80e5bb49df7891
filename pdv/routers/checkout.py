"""Caixa: sessões de venda no balcão."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel

from pdv.routers.schemas import (
    CartLineOut,
    CouponOut,
    OrderOut,
    TotalsOut,
    cart_lines_out,
    coupon_out,
    order_out,
    totals_out,
)
from pdv.services.checkout_service import CheckoutService, CheckoutSession
from pdv.services.dependencies import get_checkout_service


router = APIRouter(prefix="/caixa/sessions", tags=["caixa"])


# -----------------------------------------------------------------------------
# Models
# -----------------------------------------------------------------------------


class SessionOut(BaseModel):
    id: str
    lines: list[CartLineOut]
    item_count: int
    note: str
    delivery_fee_input: str
    discount_percent_input: str
    discount_value_input: str
    coupon_input: str
    applied_coupon: Optional[CouponOut] = None
    payment_method: Optional[str] = None
    pedido_id: Optional[str] = None
    saving: bool
    save_error: str
    totals: TotalsOut
    last_sale: Optional[OrderOut] = None


class AddItemIn(BaseModel):
    entry_id: str
    size: Optional[str] = None


class QuantityIn(BaseModel):
    delta: int


class InputsIn(BaseModel):
    note: Optional[str] = None
    delivery_fee_input: Optional[str] = None
    discount_percent_input: Optional[str] = None
    discount_value_input: Optional[str] = None


class CouponIn(BaseModel):
    code: Optional[str] = None


class PaymentIn(BaseModel):
    method: Optional[str] = None


def session_out(session: CheckoutSession) -> SessionOut:
    return SessionOut(
        id=session.id,
        lines=cart_lines_out(session.cart),
        item_count=session.cart.item_count,
        note=session.note,
        delivery_fee_input=session.delivery_fee_input,
        discount_percent_input=session.discount_percent_input,
        discount_value_input=session.discount_value_input,
        coupon_input=session.coupon_input,
        applied_coupon=coupon_out(session.applied_coupon),
        payment_method=session.payment_method.value if session.payment_method else None,
        pedido_id=session.pedido_id,
        saving=session.saving,
        save_error=session.save_error,
        totals=totals_out(session.totals),
        last_sale=order_out(session.last_sale) if session.last_sale else None,
    )


# -----------------------------------------------------------------------------
# Endpoints
# -----------------------------------------------------------------------------


@router.post("", response_model=SessionOut, status_code=201)
def open_session(service: CheckoutService = Depends(get_checkout_service)):
    return session_out(service.open_session())


@router.get("/{session_id}", response_model=SessionOut)
def get_session(session_id: str, service: CheckoutService = Depends(get_checkout_service)):
    return session_out(service.get_session(session_id))


@router.delete("/{session_id}", status_code=204)
def close_session(session_id: str, service: CheckoutService = Depends(get_checkout_service)):
    service.close_session(session_id)
    return Response(status_code=204)


@router.post("/{session_id}/items", response_model=SessionOut)
def add_item(
    session_id: str,
    body: AddItemIn,
    service: CheckoutService = Depends(get_checkout_service),
):
    """Produto com vários tamanhos exige `size` (422 com a lista de tamanhos)."""
    return session_out(service.add_item(session_id, body.entry_id, body.size))


@router.patch("/{session_id}/items/{line_id}", response_model=SessionOut)
def change_quantity(
    session_id: str,
    line_id: str,
    body: QuantityIn,
    service: CheckoutService = Depends(get_checkout_service),
):
    return session_out(service.change_quantity(session_id, line_id, body.delta))


@router.delete("/{session_id}/items/{line_id}", response_model=SessionOut)
def remove_item(
    session_id: str,
    line_id: str,
    service: CheckoutService = Depends(get_checkout_service),
):
    return session_out(service.remove_item(session_id, line_id))


@router.delete("/{session_id}/items", response_model=SessionOut)
def clear_cart(session_id: str, service: CheckoutService = Depends(get_checkout_service)):
    return session_out(service.clear_cart(session_id))


@router.put("/{session_id}/inputs", response_model=SessionOut)
def update_inputs(
    session_id: str,
    body: InputsIn,
    service: CheckoutService = Depends(get_checkout_service),
):
    return session_out(service.update_inputs(session_id, body.model_dump(exclude_unset=True)))


@router.put("/{session_id}/coupon", response_model=SessionOut)
def apply_coupon(
    session_id: str,
    body: CouponIn,
    service: CheckoutService = Depends(get_checkout_service),
):
    """Código vazio remove o cupom; código desconhecido responde 422."""
    return session_out(service.apply_coupon(session_id, body.code))


@router.put("/{session_id}/payment", response_model=SessionOut)
def set_payment_method(
    session_id: str,
    body: PaymentIn,
    service: CheckoutService = Depends(get_checkout_service),
):
    return session_out(service.set_payment_method(session_id, body.method))


@router.post("/{session_id}/pedido/{order_id}", response_model=SessionOut)
def load_order(
    session_id: str,
    order_id: str,
    service: CheckoutService = Depends(get_checkout_service),
):
    """Envia um pedido ao caixa: o carrinho passa a refletir os itens gravados."""
    return session_out(service.load_order(session_id, order_id))


@router.post("/{session_id}/finalize", response_model=OrderOut)
def finalize(session_id: str, service: CheckoutService = Depends(get_checkout_service)):
    return order_out(service.finalize(session_id))
