"""Combos (administração)."""

from __future__ import annotations

from typing import Optional, Union

from fastapi import APIRouter, Depends, File, HTTPException, Response, UploadFile
from pydantic import BaseModel, Field

from pdv.domain.models import DiscountType
from pdv.routers.schemas import ComboOut, combo_out
from pdv.services.catalog_service import CatalogService
from pdv.services.dependencies import get_catalog_service


router = APIRouter(prefix="/combos", tags=["combos"])


class ComboIn(BaseModel):
    name: str
    category_id: str
    description: str
    product_ids: list[str] = Field(default_factory=list)
    active: bool = True
    discount_type: DiscountType = DiscountType.NONE
    discount_value: Union[float, str] = 0


class ComboUpdate(BaseModel):
    name: Optional[str] = None
    category_id: Optional[str] = None
    description: Optional[str] = None
    product_ids: Optional[list[str]] = None
    active: Optional[bool] = None
    discount_type: Optional[DiscountType] = None
    discount_value: Optional[Union[float, str]] = None


@router.get("", response_model=list[ComboOut])
def list_combos(service: CatalogService = Depends(get_catalog_service)):
    return [combo_out(c) for c in service.list_combos()]


@router.get("/{combo_id}", response_model=ComboOut)
def get_combo(combo_id: str, service: CatalogService = Depends(get_catalog_service)):
    combo = service.get_combo(combo_id)
    if combo is None:
        raise HTTPException(status_code=404, detail="Combo não encontrado")
    return combo_out(combo)


@router.post("", response_model=ComboOut, status_code=201)
def create_combo(body: ComboIn, service: CatalogService = Depends(get_catalog_service)):
    """Preços dos itens são gravados como snapshot no momento do cadastro."""
    combo = service.create_combo(
        name=body.name,
        category_id=body.category_id,
        description=body.description,
        product_ids=body.product_ids,
        active=body.active,
        discount_type=body.discount_type,
        discount_value=body.discount_value,
    )
    return combo_out(combo)


@router.patch("/{combo_id}", response_model=ComboOut)
def update_combo(
    combo_id: str,
    body: ComboUpdate,
    service: CatalogService = Depends(get_catalog_service),
):
    changes = {k: v for k, v in body.model_dump(exclude_unset=True).items() if v is not None}
    return combo_out(service.update_combo(combo_id, changes))


@router.post("/{combo_id}/toggle", response_model=ComboOut)
def toggle_combo(combo_id: str, service: CatalogService = Depends(get_catalog_service)):
    return combo_out(service.toggle_combo(combo_id))


@router.delete("/{combo_id}", status_code=204)
def delete_combo(combo_id: str, service: CatalogService = Depends(get_catalog_service)):
    service.delete_combo(combo_id)
    return Response(status_code=204)


@router.post("/{combo_id}/image", response_model=ComboOut)
async def upload_combo_image(
    combo_id: str,
    file: UploadFile = File(...),
    service: CatalogService = Depends(get_catalog_service),
):
    content = await file.read()
    combo = await service.attach_image("combos", combo_id, content, file.filename or "image")
    return combo_out(combo)
