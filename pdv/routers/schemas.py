"""Modelos de resposta compartilhados entre as rotas do catálogo, caixa e pedidos."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Literal, Optional, Union

from pydantic import BaseModel

from pdv.domain.cart import Cart
from pdv.domain.models import (
    CatalogEntry,
    Category,
    Combo,
    Coupon,
    Order,
    Product,
)
from pdv.domain.pricing import OrderTotals


def _money(value: Optional[Decimal]) -> Optional[float]:
    return float(value) if value is not None else None


# -----------------------------------------------------------------------------
# Catálogo
# -----------------------------------------------------------------------------


class CategoryOut(BaseModel):
    id: str
    name: str
    active: bool
    image_url: Optional[str] = None


class SizeOut(BaseModel):
    size: str
    price: Optional[float] = None


class ProductOut(BaseModel):
    id: str
    kind: Literal["product"] = "product"
    name: str
    category_id: Optional[str] = None
    category: Optional[str] = None
    active: bool
    effective_active: Optional[bool] = None
    description: str = ""
    image_url: Optional[str] = None
    sizes: list[SizeOut] = []
    base_price: Optional[float] = None
    price: float


class ComboItemOut(BaseModel):
    id: str
    name: str
    price: float
    image: Optional[str] = None
    category: Optional[str] = None


class ComboOut(BaseModel):
    id: str
    kind: Literal["combo"] = "combo"
    name: str
    category_id: Optional[str] = None
    category: Optional[str] = None
    active: bool
    description: str = ""
    image_url: Optional[str] = None
    discount_type: str
    discount_value: float
    items: list[ComboItemOut] = []
    original_price: Optional[float] = None
    final_price: Optional[float] = None
    price: float


EntryOut = Union[ProductOut, ComboOut]


def category_out(category: Category) -> CategoryOut:
    return CategoryOut(
        id=category.id,
        name=category.name,
        active=category.active,
        image_url=category.image_url,
    )


def product_out(product: Product, effective_active: Optional[bool] = None) -> ProductOut:
    return ProductOut(
        id=product.id,
        name=product.name,
        category_id=product.category_id,
        category=product.category,
        active=product.active,
        effective_active=effective_active,
        description=product.description,
        image_url=product.image_url,
        sizes=[SizeOut(size=s.size, price=_money(s.price)) for s in product.sizes],
        base_price=_money(product.price),
        price=float(product.display_price()),
    )


def combo_out(combo: Combo) -> ComboOut:
    return ComboOut(
        id=combo.id,
        name=combo.name,
        category_id=combo.category_id,
        category=combo.category,
        active=combo.active,
        description=combo.description,
        image_url=combo.image_url,
        discount_type=combo.discount_type.value,
        discount_value=float(combo.discount_value),
        items=[
            ComboItemOut(
                id=i.id, name=i.name, price=float(i.price), image=i.image, category=i.category
            )
            for i in combo.items
        ],
        original_price=_money(combo.original_price),
        final_price=_money(combo.final_price),
        price=float(combo.display_price()),
    )


def entry_out(entry: CatalogEntry) -> EntryOut:
    return combo_out(entry) if entry.is_combo else product_out(entry)


# -----------------------------------------------------------------------------
# Carrinho, totais e pedidos
# -----------------------------------------------------------------------------


class CartLineOut(BaseModel):
    id: str
    product_id: str
    name: str
    price: float
    quantity: int
    size: Optional[str] = None
    is_combo: bool = False
    image_url: Optional[str] = None
    line_total: float


class TotalsOut(BaseModel):
    subtotal: float
    delivery_fee: float
    discount_percent: float
    discount_from_percent: float
    discount_value_manual: float
    coupon_discount_value: float
    total_discounts: float
    total: float


class CouponOut(BaseModel):
    code: str
    type: str
    value: float
    label: str = ""


class OrderItemOut(BaseModel):
    product_id: str
    name: str
    qty: int
    price: float
    total_item: float
    size: Optional[str] = None
    is_combo: bool = False


class OrderOut(BaseModel):
    id: str
    short_id: str
    pedido_number: Optional[int] = None
    status: str
    itens: list[OrderItemOut]
    note: str = ""
    payment_method: Optional[str] = None
    payment_label: Optional[str] = None
    totals: TotalsOut
    coupon: Optional[CouponOut] = None
    origin: Optional[str] = None
    hora: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


def cart_lines_out(cart: Cart) -> list[CartLineOut]:
    return [
        CartLineOut(
            id=line.id,
            product_id=line.product_id,
            name=line.name,
            price=float(line.price),
            quantity=line.quantity,
            size=line.size,
            is_combo=line.is_combo,
            image_url=line.image_url,
            line_total=float(line.line_total),
        )
        for line in cart
    ]


def totals_out(totals: OrderTotals) -> TotalsOut:
    return TotalsOut(
        subtotal=float(totals.subtotal),
        delivery_fee=float(totals.delivery_fee),
        discount_percent=float(totals.discount_percent),
        discount_from_percent=float(totals.discount_from_percent),
        discount_value_manual=float(totals.discount_value_manual),
        coupon_discount_value=float(totals.coupon_discount_value),
        total_discounts=float(totals.total_discounts),
        total=float(totals.total),
    )


def coupon_out(coupon: Optional[Coupon]) -> Optional[CouponOut]:
    if coupon is None:
        return None
    return CouponOut(
        code=coupon.code, type=coupon.type.value, value=float(coupon.value), label=coupon.label
    )


def order_out(order: Order) -> OrderOut:
    return OrderOut(
        id=order.id,
        short_id=order.short_id,
        pedido_number=order.pedido_number,
        status=order.status.value,
        itens=[
            OrderItemOut(
                product_id=i.product_id,
                name=i.name,
                qty=i.qty,
                price=float(i.price),
                total_item=float(i.total_item),
                size=i.size,
                is_combo=i.is_combo,
            )
            for i in order.itens
        ],
        note=order.note,
        payment_method=order.payment_method.value if order.payment_method else None,
        payment_label=order.payment_method.label if order.payment_method else None,
        totals=TotalsOut(
            subtotal=float(order.subtotal),
            delivery_fee=float(order.delivery_fee),
            discount_percent=float(order.discount_percent),
            discount_from_percent=float(order.discount_from_percent),
            discount_value_manual=float(order.discount_value_manual),
            coupon_discount_value=float(order.coupon_discount_value),
            total_discounts=float(order.total_discounts),
            total=float(order.total),
        ),
        coupon=coupon_out(order.coupon),
        origin=order.origin,
        hora=order.hora,
        created_at=order.created_at,
        updated_at=order.updated_at,
    )
