"""Categorias do cardápio (administração)."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, File, Response, UploadFile
from pydantic import BaseModel

from pdv.routers.schemas import CategoryOut, category_out
from pdv.services.catalog_service import CatalogService
from pdv.services.dependencies import get_catalog_service


router = APIRouter(prefix="/categories", tags=["categories"])


class CategoryIn(BaseModel):
    name: str
    active: bool = True


class CategoryUpdate(BaseModel):
    name: Optional[str] = None
    active: Optional[bool] = None


@router.get("", response_model=list[CategoryOut])
def list_categories(service: CatalogService = Depends(get_catalog_service)):
    return [category_out(c) for c in service.list_categories()]


@router.post("", response_model=CategoryOut, status_code=201)
def create_category(body: CategoryIn, service: CatalogService = Depends(get_catalog_service)):
    return category_out(service.create_category(body.name, body.active))


@router.patch("/{category_id}", response_model=CategoryOut)
def update_category(
    category_id: str,
    body: CategoryUpdate,
    service: CatalogService = Depends(get_catalog_service),
):
    return category_out(service.update_category(category_id, body.model_dump(exclude_unset=True)))


@router.post("/{category_id}/toggle", response_model=CategoryOut)
def toggle_category(category_id: str, service: CatalogService = Depends(get_catalog_service)):
    """Ativa/desativa; produtos e combos da categoria somem do cardápio em cascata."""
    return category_out(service.toggle_category(category_id))


@router.delete("/{category_id}", status_code=204)
def delete_category(category_id: str, service: CatalogService = Depends(get_catalog_service)):
    service.delete_category(category_id)
    return Response(status_code=204)


@router.post("/{category_id}/image", response_model=CategoryOut)
async def upload_category_image(
    category_id: str,
    file: UploadFile = File(...),
    service: CatalogService = Depends(get_catalog_service),
):
    content = await file.read()
    category = await service.attach_image("categories", category_id, content, file.filename or "image")
    return category_out(category)
