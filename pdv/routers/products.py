"""Produtos do cardápio (administração)."""

from __future__ import annotations

from typing import Optional, Union

from fastapi import APIRouter, Depends, File, HTTPException, Query, Response, UploadFile
from pydantic import BaseModel

from pdv.routers.schemas import ProductOut, product_out
from pdv.services.catalog_service import CatalogService
from pdv.services.dependencies import get_catalog_service


router = APIRouter(prefix="/products", tags=["products"])

# Preços chegam como digitados no formulário ("12,50") ou numéricos.
PriceInput = Optional[Union[float, str]]


# -----------------------------------------------------------------------------
# Request Models
# -----------------------------------------------------------------------------


class SizeIn(BaseModel):
    size: str = ""
    price: PriceInput = None


class ProductIn(BaseModel):
    name: str
    category_id: str
    description: str = ""
    active: bool = True
    sizes: list[SizeIn] = []
    price: PriceInput = None


class ProductUpdate(BaseModel):
    name: Optional[str] = None
    category_id: Optional[str] = None
    description: Optional[str] = None
    active: Optional[bool] = None
    sizes: Optional[list[SizeIn]] = None
    price: PriceInput = None


# -----------------------------------------------------------------------------
# Endpoints
# -----------------------------------------------------------------------------


@router.get("", response_model=list[ProductOut])
def list_products(
    status: Optional[str] = Query(None, pattern="^(active|inactive)$", description="Status efetivo"),
    sort: Optional[str] = Query(None, pattern="^(price-asc|price-desc|name)$"),
    service: CatalogService = Depends(get_catalog_service),
):
    """Lista administrativa; `effective_active` considera a categoria."""
    return [product_out(p, effective) for p, effective in service.list_products(status, sort)]


@router.get("/{product_id}", response_model=ProductOut)
def get_product(product_id: str, service: CatalogService = Depends(get_catalog_service)):
    product = service.get_product(product_id)
    if product is None:
        raise HTTPException(status_code=404, detail="Produto não encontrado")
    return product_out(product)


@router.post("", response_model=ProductOut, status_code=201)
def create_product(body: ProductIn, service: CatalogService = Depends(get_catalog_service)):
    product = service.create_product(
        name=body.name,
        category_id=body.category_id,
        description=body.description,
        active=body.active,
        sizes=[s.model_dump() for s in body.sizes],
        price=body.price,
    )
    return product_out(product)


@router.patch("/{product_id}", response_model=ProductOut)
def update_product(
    product_id: str,
    body: ProductUpdate,
    service: CatalogService = Depends(get_catalog_service),
):
    return product_out(service.update_product(product_id, body.model_dump(exclude_unset=True)))


@router.post("/{product_id}/toggle", response_model=ProductOut)
def toggle_product(product_id: str, service: CatalogService = Depends(get_catalog_service)):
    return product_out(service.toggle_product(product_id))


@router.delete("/{product_id}", status_code=204)
def delete_product(product_id: str, service: CatalogService = Depends(get_catalog_service)):
    service.delete_product(product_id)
    return Response(status_code=204)


@router.post("/{product_id}/image", response_model=ProductOut)
async def upload_product_image(
    product_id: str,
    file: UploadFile = File(...),
    service: CatalogService = Depends(get_catalog_service),
):
    content = await file.read()
    product = await service.attach_image("products", product_id, content, file.filename or "image")
    return product_out(product)
