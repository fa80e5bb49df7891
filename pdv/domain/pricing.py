"""
Regras de preço: preço de exibição do catálogo, preços de combo e totais do pedido.
Funções puras, recalculadas a cada mudança de estado.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Iterable, Optional, Union

from pdv.domain.models import (
    ZERO,
    CartLine,
    CatalogEntry,
    Coupon,
    DiscountType,
)

NumberInput = Union[str, int, float, Decimal, None]

_NON_NUMERIC = re.compile(r"[^\d,.-]")
_LEADING_NUMBER = re.compile(r"-?(\d+(\.\d*)?|\.\d+)")
_HUNDRED = Decimal("100")


def parse_br_number(value: NumberInput) -> Decimal:
    """
    Converte texto no formato brasileiro ("1.234,50") em Decimal.

    Pontos são tratados como separador de milhar e a primeira vírgula como
    separador decimal. Entrada vazia ou não numérica resulta em 0.
    """
    if value is None or value == "":
        return ZERO
    if isinstance(value, Decimal):
        return value if value.is_finite() else ZERO
    if isinstance(value, (int, float)):
        return to_decimal(value) or ZERO

    cleaned = _NON_NUMERIC.sub("", str(value)).replace(".", "").replace(",", ".", 1)
    match = _LEADING_NUMBER.match(cleaned)
    if not match:
        return ZERO
    return Decimal(match.group(0))


def to_decimal(value: object) -> Optional[Decimal]:
    """Conversão tolerante para Decimal; None quando o valor não é numérico."""
    if value is None or isinstance(value, bool):
        return None
    try:
        result = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None
    return result if result.is_finite() else None


def compute_price(entry: CatalogEntry) -> Decimal:
    """Preço único de exibição de um produto ou combo."""
    return entry.display_price()


def combo_prices(
    item_prices: Iterable[Decimal],
    discount_type: DiscountType,
    discount_value: Decimal,
) -> tuple[Decimal, Decimal]:
    """Retorna (originalPrice, finalPrice) de um combo; finalPrice nunca é negativo."""
    original = sum(item_prices, ZERO)
    if discount_type == DiscountType.PERCENT:
        discount = original * discount_value / _HUNDRED
    elif discount_type == DiscountType.VALUE:
        discount = discount_value
    else:
        discount = ZERO
    return original, max(ZERO, original - discount)


@dataclass(frozen=True)
class OrderTotals:
    """Bloco de totais de um pedido."""

    subtotal: Decimal
    delivery_fee: Decimal
    discount_percent: Decimal
    discount_from_percent: Decimal
    discount_value_manual: Decimal
    coupon_discount_value: Decimal
    total_discounts: Decimal
    total: Decimal


def coupon_discount(subtotal: Decimal, coupon: Optional[Coupon]) -> Decimal:
    if coupon is None:
        return ZERO
    if coupon.type == DiscountType.PERCENT:
        return subtotal * coupon.value / _HUNDRED
    # valor fixo, independente do subtotal
    return coupon.value


def compute_totals(
    cart: Iterable[CartLine],
    delivery_fee_input: NumberInput = None,
    discount_percent_input: NumberInput = None,
    discount_value_input: NumberInput = None,
    applied_coupon: Optional[Coupon] = None,
) -> OrderTotals:
    """
    Calcula subtotal, taxa de entrega, descontos e total.

    Os três descontos (percentual, valor manual e cupom) se somam; a taxa de
    entrega entra antes dos descontos e o total nunca fica negativo.
    """
    subtotal = sum((line.price * line.quantity for line in cart), ZERO)
    delivery_fee = parse_br_number(delivery_fee_input)
    discount_percent = parse_br_number(discount_percent_input)
    discount_value_manual = parse_br_number(discount_value_input)

    discount_from_percent = subtotal * discount_percent / _HUNDRED
    coupon_value = coupon_discount(subtotal, applied_coupon)
    total_discounts = discount_from_percent + discount_value_manual + coupon_value

    total = subtotal + delivery_fee - total_discounts
    if total < ZERO:
        total = ZERO

    return OrderTotals(
        subtotal=subtotal,
        delivery_fee=delivery_fee,
        discount_percent=discount_percent,
        discount_from_percent=discount_from_percent,
        discount_value_manual=discount_value_manual,
        coupon_discount_value=coupon_value,
        total_discounts=total_discounts,
        total=total,
    )
