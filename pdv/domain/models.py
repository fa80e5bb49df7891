"""
Modelos de domínio.
Representam os conceitos de negócio independentes da infraestrutura.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import ClassVar, Optional, Union


ZERO = Decimal("0")


class DiscountType(str, Enum):
    NONE = "none"
    PERCENT = "percent"
    VALUE = "value"


class OrderStatus(str, Enum):
    SOLICITADO = "solicitado"
    ANDAMENTO = "andamento"
    PREPARANDO = "preparando"
    CONCLUIDO = "concluido"
    FINALIZADO = "finalizado"
    CANCELADO = "cancelado"


class PaymentMethod(str, Enum):
    PIX = "pix"
    MONEY = "money"
    DEBIT = "debit"
    CREDIT = "credit"

    @property
    def label(self) -> str:
        return _PAYMENT_LABELS[self]


_PAYMENT_LABELS = {
    PaymentMethod.PIX: "PIX",
    PaymentMethod.MONEY: "Dinheiro",
    PaymentMethod.DEBIT: "Débito",
    PaymentMethod.CREDIT: "Crédito",
}


def _first_defined(*values: Optional[Decimal]) -> Decimal:
    for value in values:
        if value is not None:
            return value
    return ZERO


@dataclass
class Category:
    """Categoria do cardápio."""

    id: str
    name: str
    active: bool = True
    image_url: Optional[str] = None
    image_public_id: Optional[str] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class SizeVariant:
    """Um tamanho de produto com seu preço. `price` None = valor não numérico."""

    size: str
    price: Optional[Decimal]


@dataclass
class Product:
    """Produto vendável, com preço fixo ou por tamanho."""

    kind: ClassVar[str] = "product"
    is_combo: ClassVar[bool] = False

    id: str
    name: str
    category_id: Optional[str] = None
    category: Optional[str] = None
    active: bool = True
    description: str = ""
    image_url: Optional[str] = None
    image_public_id: Optional[str] = None
    sizes: list[SizeVariant] = field(default_factory=list)
    price: Optional[Decimal] = None
    final_price: Optional[Decimal] = None
    original_price: Optional[Decimal] = None

    def display_price(self) -> Decimal:
        """Menor preço entre os tamanhos; sem tamanhos, finalPrice -> price -> originalPrice."""
        if self.sizes:
            prices = [s.price for s in self.sizes]
            if any(p is None for p in prices):
                return ZERO
            return min(prices)
        return _first_defined(self.final_price, self.price, self.original_price)

    def find_size(self, label: str) -> Optional[SizeVariant]:
        for variant in self.sizes:
            if variant.size == label:
                return variant
        return None


@dataclass(frozen=True)
class ComboItem:
    """Snapshot de um produto dentro de um combo."""

    id: str
    name: str
    price: Decimal
    image: Optional[str] = None
    category: Optional[str] = None


@dataclass
class Combo:
    """Combo de produtos com desconto; preços são snapshots do momento do cadastro."""

    kind: ClassVar[str] = "combo"
    is_combo: ClassVar[bool] = True

    id: str
    name: str
    category_id: Optional[str] = None
    category: Optional[str] = None
    active: bool = True
    description: str = ""
    image_url: Optional[str] = None
    image_public_id: Optional[str] = None
    discount_type: DiscountType = DiscountType.NONE
    discount_value: Decimal = ZERO
    items: list[ComboItem] = field(default_factory=list)
    price: Optional[Decimal] = None
    original_price: Optional[Decimal] = None
    final_price: Optional[Decimal] = None

    @property
    def sizes(self) -> list[SizeVariant]:
        return []

    def display_price(self) -> Decimal:
        return _first_defined(self.final_price, self.price, self.original_price)


CatalogEntry = Union[Product, Combo]


@dataclass(frozen=True)
class Coupon:
    """Cupom de desconto aplicado uma vez por pedido."""

    code: str
    type: DiscountType
    value: Decimal
    label: str = ""


@dataclass(frozen=True)
class CartLine:
    """Linha do carrinho. `id` é o produto ou "produto-tamanho"."""

    id: str
    product_id: str
    name: str
    price: Decimal
    quantity: int = 1
    size: Optional[str] = None
    category_id: Optional[str] = None
    is_combo: bool = False
    image_url: Optional[str] = None

    @property
    def line_total(self) -> Decimal:
        return self.price * self.quantity


@dataclass(frozen=True)
class OrderItem:
    """Item persistido no pedido."""

    product_id: str
    name: str
    qty: int
    price: Decimal
    total_item: Decimal
    size: Optional[str] = None
    is_combo: bool = False
    category_id: Optional[str] = None
    image_url: Optional[str] = None


@dataclass
class Order:
    """Pedido (documento da coleção `pedidos`)."""

    id: str
    status: OrderStatus
    itens: list[OrderItem] = field(default_factory=list)
    pedido_number: Optional[int] = None
    note: str = ""
    payment_method: Optional[PaymentMethod] = None
    subtotal: Decimal = ZERO
    delivery_fee: Decimal = ZERO
    discount_percent: Decimal = ZERO
    discount_from_percent: Decimal = ZERO
    discount_value_manual: Decimal = ZERO
    coupon: Optional[Coupon] = None
    coupon_discount_value: Decimal = ZERO
    total_discounts: Decimal = ZERO
    total: Decimal = ZERO
    origin: Optional[str] = None
    hora: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def is_finalized(self) -> bool:
        return self.status == OrderStatus.FINALIZADO

    @property
    def short_id(self) -> str:
        return self.id[:7]
