"""
Migrações de dados aplicadas na subida da aplicação.

`backfill_category_ids` preenche `categoryId` em produtos e combos antigos
que só guardavam o nome da categoria. Depois dela a resolução de categoria
usa apenas o id.
"""

from __future__ import annotations

from typing import Dict

from pdv.core.logging import db_logger
from pdv.infra.document_store import DocumentStore

CATEGORIES = "categories"
REFERENCING_COLLECTIONS = ("products", "combos")


def backfill_category_ids(store: DocumentStore) -> Dict[str, int]:
    """Retorna quantos documentos foram atualizados por coleção."""
    ids_by_name: Dict[str, str] = {}
    ambiguous = set()
    for category in store.list(CATEGORIES):
        name = (category.get("name") or "").strip()
        if not name:
            continue
        if name in ids_by_name:
            ambiguous.add(name)
        ids_by_name[name] = category["id"]

    for name in ambiguous:
        db_logger.warning("Ambiguous category name, skipping backfill", category_name=name)
        ids_by_name.pop(name, None)

    updated: Dict[str, int] = {}
    for collection in REFERENCING_COLLECTIONS:
        count = 0
        for doc in store.list(collection):
            if doc.get("categoryId"):
                continue
            category_id = ids_by_name.get((doc.get("category") or "").strip())
            if category_id is None:
                continue
            store.update(collection, doc["id"], {"categoryId": category_id})
            count += 1
        updated[collection] = count

    db_logger.info("Category ids backfilled", **{f"{k}_updated": v for k, v in updated.items()})
    return updated
