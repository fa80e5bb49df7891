from decimal import Decimal

from pdv.domain.models import Category, Combo, ComboItem, Product
from pdv.domain.visibility import (
    NATIVE_COMBO_CATEGORY_ID,
    effective_active,
    filter_entries,
    resolve_visibility,
)


def _catalog(cookie_active=True, doces_active=True):
    categories = [
        Category(id="c1", name="Bebidas", active=True),
        Category(id="c2", name="Doces", active=doces_active),
    ]
    products = [
        Product(id="shake", name="Milkshake", category_id="c1", price=Decimal("12")),
        Product(id="cookie", name="Cookie", category_id="c2", active=cookie_active, price=Decimal("8")),
    ]
    combos = [
        Combo(
            id="combo",
            name="Combo Lanche",
            category_id="c1",
            items=[ComboItem("shake", "Milkshake", Decimal("12")), ComboItem("cookie", "Cookie", Decimal("8"))],
            final_price=Decimal("15"),
        )
    ]
    return categories, products, combos


def test_everything_active_is_visible():
    visible = resolve_visibility(*_catalog())
    assert [p.id for p in visible.products] == ["shake", "cookie"]
    assert [c.id for c in visible.combos] == ["combo"]


def test_inactive_category_hides_its_products():
    visible = resolve_visibility(*_catalog(doces_active=False))
    assert [c.id for c in visible.categories] == ["c1"]
    assert [p.id for p in visible.products] == ["shake"]


def test_combo_with_inactive_product_is_hidden():
    visible = resolve_visibility(*_catalog(cookie_active=False))
    assert visible.combos == []


def test_combo_item_ignores_item_category():
    # o item só precisa estar ativo; a categoria do item não entra na regra
    visible = resolve_visibility(*_catalog(doces_active=False))
    assert [c.id for c in visible.combos] == ["combo"]


def test_combo_with_deleted_product_is_hidden():
    categories, products, combos = _catalog()
    visible = resolve_visibility(categories, [p for p in products if p.id != "cookie"], combos)
    assert visible.combos == []


def test_product_without_category_id_is_hidden():
    categories, _, _ = _catalog()
    legacy = Product(id="old", name="Antigo", category="Bebidas", price=Decimal("1"))
    visible = resolve_visibility(categories, [legacy], [])
    assert visible.products == []


def test_effective_active_follows_category():
    categories, products, _ = _catalog(doces_active=False)
    assert effective_active(products[0], categories) is True
    assert effective_active(products[1], categories) is False


def test_filter_entries_by_category_and_search():
    visible = resolve_visibility(*_catalog())
    entries = visible.entries
    assert [e.id for e in filter_entries(entries, "c2")] == ["cookie"]
    assert [e.id for e in filter_entries(entries, NATIVE_COMBO_CATEGORY_ID)] == ["combo"]
    assert [e.id for e in filter_entries(entries, search="MILK")] == ["shake"]
