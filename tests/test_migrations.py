from pdv.infra.migrations import backfill_category_ids


def test_backfill_category_ids(store):
    bebidas = store.add("categories", {"name": "Bebidas", "active": True})
    store.add("categories", {"name": "Doces", "active": True})
    store.add("categories", {"name": "Doces", "active": False})

    legacy = store.add("products", {"name": "Shake", "category": "Bebidas", "active": True})
    ambiguous = store.add("products", {"name": "Cookie", "category": "Doces", "active": True})
    modern = store.add("products", {"name": "Água", "category": "Bebidas", "categoryId": "keep"})
    combo = store.add("combos", {"name": "Combo", "category": "Bebidas ", "items": []})

    updated = backfill_category_ids(store)

    assert updated == {"products": 1, "combos": 1}
    assert store.get("products", legacy)["categoryId"] == bebidas
    assert "categoryId" not in store.get("products", ambiguous)
    assert store.get("products", modern)["categoryId"] == "keep"
    assert store.get("combos", combo)["categoryId"] == bebidas

    # idempotente
    assert backfill_category_ids(store) == {"products": 0, "combos": 0}
