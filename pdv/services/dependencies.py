"""FastAPI dependency providers for service layer."""

from functools import lru_cache

from pdv.core.config import settings
from pdv.core.logging import app_logger
from pdv.domain.coupons import CouponTable
from pdv.infra.cloudinary_client import CloudinaryClient
from pdv.infra.document_store import DocumentStore
from pdv.repositories.category_repository import CategoryRepository
from pdv.repositories.combo_repository import ComboRepository
from pdv.repositories.order_repository import OrderRepository
from pdv.repositories.product_repository import ProductRepository
from pdv.services.catalog_service import CatalogService
from pdv.services.catalog_view import CatalogView
from pdv.services.checkout_service import CheckoutService
from pdv.services.order_service import OrderService


# Serviços com estado (assinaturas, sessões de caixa) são únicos por processo.


@lru_cache()
def get_document_store() -> DocumentStore:
    return DocumentStore()


@lru_cache()
def get_catalog_view() -> CatalogView:
    store = get_document_store()
    return CatalogView(
        CategoryRepository(store),
        ProductRepository(store),
        ComboRepository(store),
    )


@lru_cache()
def get_coupon_table() -> CouponTable:
    if settings.COUPONS_FILE:
        table = CouponTable.from_file(settings.COUPONS_FILE)
        app_logger.info("Coupons loaded", path=settings.COUPONS_FILE, count=len(table))
        return table
    return CouponTable.default()


def get_catalog_service() -> CatalogService:
    store = get_document_store()
    return CatalogService(
        CategoryRepository(store),
        ProductRepository(store),
        ComboRepository(store),
        image_host=CloudinaryClient(),
    )


@lru_cache()
def get_checkout_service() -> CheckoutService:
    return CheckoutService(
        OrderRepository(get_document_store()),
        get_catalog_view(),
        get_coupon_table(),
    )


def get_order_service() -> OrderService:
    return OrderService(OrderRepository(get_document_store()), get_catalog_view())
