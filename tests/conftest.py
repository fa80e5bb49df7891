from pathlib import Path

import pytest

from pdv.domain.coupons import CouponTable
from pdv.infra.cloudinary_client import UploadedImage
from pdv.infra.db import make_engine
from pdv.infra.document_store import DocumentStore
from pdv.repositories.category_repository import CategoryRepository
from pdv.repositories.combo_repository import ComboRepository
from pdv.repositories.order_repository import OrderRepository
from pdv.repositories.product_repository import ProductRepository
from pdv.services.catalog_service import CatalogService
from pdv.services.catalog_view import CatalogView
from pdv.services.checkout_service import CheckoutService
from pdv.services.order_service import OrderService


class FakeImageHost:
    """Hospedagem de imagens em memória; registra uploads e remoções."""

    def __init__(self, fail_delete: bool = False):
        self.uploaded = []
        self.deleted = []
        self.fail_delete = fail_delete

    async def upload_image(self, content: bytes, filename: str, folder: str = "categories"):
        public_id = f"{folder}/img{len(self.uploaded) + 1}"
        self.uploaded.append(public_id)
        return UploadedImage(url=f"https://img.test/{public_id}.png", public_id=public_id)

    async def delete_image(self, public_id: str) -> None:
        if self.fail_delete:
            raise RuntimeError("delete failed")
        self.deleted.append(public_id)


@pytest.fixture
def engine(tmp_path: Path):
    eng = make_engine(f"sqlite:///{tmp_path / 'pdv_test.sqlite'}")
    yield eng
    eng.dispose()


@pytest.fixture
def store(engine):
    return DocumentStore(engine)


@pytest.fixture
def image_host():
    return FakeImageHost()


@pytest.fixture
def catalog_service(store, image_host):
    return CatalogService(
        CategoryRepository(store),
        ProductRepository(store),
        ComboRepository(store),
        image_host=image_host,
    )


@pytest.fixture
def catalog_view(store):
    view = CatalogView(
        CategoryRepository(store),
        ProductRepository(store),
        ComboRepository(store),
    )
    yield view
    view.close()


@pytest.fixture
def seeded(catalog_service):
    """Catálogo mínimo: milkshake com 2 tamanhos, cookie de preço fixo e um combo."""
    bebidas = catalog_service.create_category("Bebidas")
    doces = catalog_service.create_category("Doces")
    shake = catalog_service.create_product(
        "Milkshake",
        bebidas.id,
        sizes=[{"size": "300ml", "price": "12,00"}, {"size": "500ml", "price": "16,00"}],
    )
    cookie = catalog_service.create_product("Cookie", doces.id, price="8,00")
    combo = catalog_service.create_combo(
        "Combo Lanche",
        doces.id,
        "Milkshake + cookie",
        [shake.id, cookie.id],
        discount_type="value",
        discount_value="5",
    )
    return {
        "bebidas": bebidas,
        "doces": doces,
        "shake": shake,
        "cookie": cookie,
        "combo": combo,
    }


@pytest.fixture
def orders_repo(store):
    return OrderRepository(store)


@pytest.fixture
def order_service(orders_repo, catalog_view):
    return OrderService(orders_repo, catalog_view)


@pytest.fixture
def checkout_service(orders_repo, catalog_view):
    return CheckoutService(orders_repo, catalog_view, CouponTable.default())
