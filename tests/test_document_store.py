import pytest

from pdv.infra.db import health_check
from pdv.infra.document_store import DocumentNotFoundError


def test_crud_roundtrip(store):
    doc_id = store.add("categories", {"name": "Bebidas", "active": True})

    assert store.get("categories", doc_id) == {"id": doc_id, "name": "Bebidas", "active": True}

    merged = store.update("categories", doc_id, {"active": False})
    assert merged["name"] == "Bebidas"
    assert merged["active"] is False

    store.delete("categories", doc_id)
    assert store.get("categories", doc_id) is None
    assert store.list("categories") == []


def test_update_missing_document(store):
    with pytest.raises(DocumentNotFoundError):
        store.update("products", "nope", {"active": True})


def test_set_creates_then_replaces(store):
    store.set("products", "p1", {"name": "A", "price": 1.0})
    store.set("products", "p1", {"name": "B"})
    assert store.get("products", "p1") == {"id": "p1", "name": "B"}


def test_subscribe_receives_snapshot_and_changes(store):
    store.add("categories", {"name": "Bebidas"})
    seen = []

    unsubscribe = store.subscribe("categories", lambda docs: seen.append([d["name"] for d in docs]))
    store.add("categories", {"name": "Doces"})
    store.add("products", {"name": "ignorado"})
    unsubscribe()
    store.add("categories", {"name": "Depois"})

    assert seen == [["Bebidas"], ["Bebidas", "Doces"]]


def test_failing_listener_does_not_break_writes(store):
    def broken(docs):
        if docs:
            raise ValueError("boom")

    store.subscribe("categories", broken)
    doc_id = store.add("categories", {"name": "Bebidas"})
    assert store.get("categories", doc_id)["name"] == "Bebidas"


def test_next_sequence_seeds_once(store):
    calls = []

    def seed():
        calls.append(1)
        return 10

    assert [store.next_sequence("pedidoNumber", seed) for _ in range(3)] == [10, 11, 12]
    assert len(calls) == 1


def test_health_check(engine):
    info = health_check(engine)
    assert info["ok"] is True
    assert info["dialect"] == "sqlite"
