"""
Repositório de pedidos (coleção `pedidos`).
"""

from typing import Any, List, Optional

from pdv.domain.models import (
    Coupon,
    DiscountType,
    Order,
    OrderItem,
    OrderStatus,
    PaymentMethod,
)
from pdv.repositories.base import (
    DocumentRepository,
    datetime_in,
    datetime_out,
    money_in,
    money_out,
    without_none,
)
from pdv.repositories.protocols import Document

ORDER_NUMBER_SEQUENCE = "pedidoNumber"


def _status(raw: Any) -> OrderStatus:
    try:
        return OrderStatus(raw)
    except ValueError:
        return OrderStatus.SOLICITADO


def _payment(raw: Any) -> Optional[PaymentMethod]:
    try:
        return PaymentMethod(raw) if raw else None
    except ValueError:
        return None


def _coupon_in(raw: Any) -> Optional[Coupon]:
    if not isinstance(raw, dict) or not raw.get("code"):
        return None
    try:
        kind = DiscountType(raw.get("type"))
    except ValueError:
        return None
    return Coupon(
        code=raw["code"],
        type=kind,
        value=money_in(raw.get("value")),
        label=raw.get("label") or "",
    )


def _coupon_out(coupon: Optional[Coupon]) -> Optional[dict]:
    if coupon is None:
        return None
    return {
        "code": coupon.code,
        "type": coupon.type.value,
        "value": money_out(coupon.value),
        "label": coupon.label,
    }


def _legacy_product_id(raw: dict) -> str:
    """Pedidos antigos gravam o id da linha ("produto-tamanho") em `id`."""
    line_id = str(raw.get("id") or "")
    size = raw.get("size")
    suffix = f"-{size}"
    if size and line_id.endswith(suffix):
        return line_id[: -len(suffix)]
    return line_id


def _item_in(raw: dict) -> OrderItem:
    qty = int(raw.get("qty") or raw.get("quantity") or 1)
    price = money_in(raw.get("price"))
    total_item = money_in(raw.get("totalItem"), None)
    return OrderItem(
        product_id=str(raw.get("productId") or _legacy_product_id(raw)),
        name=raw.get("name") or "",
        qty=qty,
        price=price,
        total_item=total_item if total_item is not None else price * qty,
        size=raw.get("size"),
        is_combo=bool(raw.get("isCombo")),
        category_id=raw.get("categoryId"),
        image_url=raw.get("imageUrl"),
    )


def item_to_document(item: OrderItem) -> dict:
    return {
        "productId": item.product_id,
        "name": item.name,
        "qty": item.qty,
        "price": money_out(item.price),
        "totalItem": money_out(item.total_item),
        "size": item.size,
        "isCombo": item.is_combo,
        "categoryId": item.category_id,
        "imageUrl": item.image_url,
    }


class OrderRepository(DocumentRepository[Order]):
    collection = "pedidos"

    @staticmethod
    def from_document(doc: Document) -> Order:
        number = doc.get("pedidoNumber")
        return Order(
            id=doc["id"],
            status=_status(doc.get("status")),
            itens=[_item_in(i) for i in (doc.get("itens") or []) if isinstance(i, dict)],
            pedido_number=int(number) if number is not None else None,
            note=doc.get("note") or doc.get("obs") or "",
            payment_method=_payment(doc.get("paymentMethod")),
            subtotal=money_in(doc.get("subtotal")),
            delivery_fee=money_in(doc.get("deliveryFee")),
            discount_percent=money_in(doc.get("discountPercent")),
            discount_from_percent=money_in(doc.get("discountFromPercent")),
            discount_value_manual=money_in(doc.get("discountValueManual")),
            coupon=_coupon_in(doc.get("coupon")),
            coupon_discount_value=money_in(doc.get("couponDiscountValue")),
            total_discounts=money_in(doc.get("totalDiscounts")),
            total=money_in(doc.get("total")),
            origin=doc.get("origin"),
            hora=doc.get("hora"),
            created_at=datetime_in(doc.get("createdAt")),
            updated_at=datetime_in(doc.get("updatedAt")),
        )

    @staticmethod
    def to_document(order: Order) -> Document:
        data = {
            "pedidoNumber": order.pedido_number,
            "status": order.status.value,
            "itens": [item_to_document(i) for i in order.itens],
            "note": order.note,
            "paymentMethod": order.payment_method.value if order.payment_method else None,
            "subtotal": money_out(order.subtotal),
            "deliveryFee": money_out(order.delivery_fee),
            "discountPercent": money_out(order.discount_percent),
            "discountFromPercent": money_out(order.discount_from_percent),
            "discountValueManual": money_out(order.discount_value_manual),
            "coupon": _coupon_out(order.coupon),
            "couponDiscountValue": money_out(order.coupon_discount_value),
            "totalDiscounts": money_out(order.total_discounts),
            "total": money_out(order.total),
            "origin": order.origin,
            "hora": order.hora,
            "createdAt": datetime_out(order.created_at),
            "updatedAt": datetime_out(order.updated_at),
        }
        data = without_none(data)
        data["coupon"] = _coupon_out(order.coupon)
        return data

    def list_recent(self) -> List[Order]:
        """Pedidos do mais recente para o mais antigo."""
        orders = self.list_all()
        return sorted(
            orders,
            key=lambda o: o.created_at.timestamp() if o.created_at else 0.0,
            reverse=True,
        )

    def _max_number(self) -> int:
        numbers = [o.pedido_number for o in self.list_all() if o.pedido_number is not None]
        return max(numbers, default=0)

    def next_number(self) -> int:
        """Número sequencial do próximo pedido (contador atômico no banco)."""
        return self.store.next_sequence(
            ORDER_NUMBER_SEQUENCE, lambda: self._max_number() + 1
        )
