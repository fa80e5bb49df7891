"""Gestão de pedidos: listagem, status, edição de itens e exclusão."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from pydantic import BaseModel, Field

from pdv.domain.filters import OrderFilters
from pdv.domain.models import OrderStatus
from pdv.routers.schemas import EntryOut, OrderOut, entry_out, order_out
from pdv.services.dependencies import get_order_service
from pdv.services.order_service import OrderService, RequestedItem


router = APIRouter(prefix="/pedidos", tags=["pedidos"])


class StatusIn(BaseModel):
    status: OrderStatus


class EditItemIn(BaseModel):
    product_id: str
    size: Optional[str] = None
    qty: int = Field(1, ge=1)


class EditOrderIn(BaseModel):
    items: list[EditItemIn]


@router.get("", response_model=list[OrderOut])
def list_orders(
    scope: str = Query("abertos", pattern="^(abertos|fechados|todos)$"),
    search: Optional[str] = Query(None, description="Id, número, total, status, hora ou item"),
    service: OrderService = Depends(get_order_service),
):
    """Pedidos do mais recente para o mais antigo."""
    filters = OrderFilters(scope=scope, search=search)
    return [order_out(o) for o in service.list_orders(filters)]


@router.get("/{order_id}", response_model=OrderOut)
def get_order(order_id: str, service: OrderService = Depends(get_order_service)):
    order = service.get_order(order_id)
    if order is None:
        raise HTTPException(status_code=404, detail="Pedido não encontrado")
    return order_out(order)


@router.patch("/{order_id}/status", response_model=OrderOut)
def update_status(
    order_id: str,
    body: StatusIn,
    service: OrderService = Depends(get_order_service),
):
    return order_out(service.update_status(order_id, body.status))


@router.put("/{order_id}/itens", response_model=OrderOut)
def edit_order(
    order_id: str,
    body: EditOrderIn,
    service: OrderService = Depends(get_order_service),
):
    """Substitui os itens e recalcula os totais mantendo taxa, descontos e cupom."""
    items = [RequestedItem(i.product_id, i.size, i.qty) for i in body.items]
    return order_out(service.edit_order(order_id, items))


@router.delete("/{order_id}", status_code=204)
def delete_order(order_id: str, service: OrderService = Depends(get_order_service)):
    service.delete_order(order_id)
    return Response(status_code=204)


@router.get("/{order_id}/disponiveis", response_model=list[EntryOut])
def available_entries(
    order_id: str,
    search: Optional[str] = Query(None),
    service: OrderService = Depends(get_order_service),
):
    """Itens do catálogo visível que ainda não estão no pedido."""
    return [entry_out(e) for e in service.available_entries(order_id, search)]
