"""Cardápio público: catálogo visível e envio de pedidos."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from pydantic import BaseModel, Field

from pdv.core.cache import etag_json
from pdv.domain.visibility import (
    NATIVE_COMBO_CATEGORY_ID,
    NATIVE_COMBO_CATEGORY_NAME,
    filter_entries,
)
from pdv.routers.schemas import CategoryOut, OrderOut, category_out, entry_out, order_out
from pdv.services.catalog_view import CatalogView
from pdv.services.dependencies import get_catalog_view, get_order_service
from pdv.services.order_service import OrderService, RequestedItem


router = APIRouter(prefix="/cardapio", tags=["cardapio"])


class RequestedItemIn(BaseModel):
    product_id: str
    size: Optional[str] = None
    qty: int = Field(1, ge=1)


class PlaceOrderIn(BaseModel):
    items: list[RequestedItemIn]
    note: str = ""


def _menu_categories(view: CatalogView) -> list[CategoryOut]:
    categories = [category_out(c) for c in view.visible.categories]
    # categoria virtual com todos os combos visíveis
    if view.visible.combos:
        categories.append(
            CategoryOut(id=NATIVE_COMBO_CATEGORY_ID, name=NATIVE_COMBO_CATEGORY_NAME, active=True)
        )
    return categories


@router.get("")
def get_menu(
    request: Request,
    category: Optional[str] = Query(None, description="Id da categoria (ou native-combos)"),
    search: Optional[str] = Query(None, description="Busca por nome"),
    view: CatalogView = Depends(get_catalog_view),
):
    """Categorias ativas e itens visíveis; responde 304 quando o ETag bate."""
    entries = filter_entries(view.visible.entries, category, search)
    payload = {
        "categories": [c.model_dump(mode="json") for c in _menu_categories(view)],
        "items": [entry_out(e).model_dump(mode="json") for e in entries],
    }
    return etag_json(request, payload, vary_authorization=False)


@router.post("/pedidos", response_model=OrderOut, status_code=201)
def place_order(body: PlaceOrderIn, service: OrderService = Depends(get_order_service)):
    order = service.place_order(
        [RequestedItem(i.product_id, i.size, i.qty) for i in body.items],
        note=body.note,
    )
    return order_out(order)
