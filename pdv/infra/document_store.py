"""
Banco de documentos sobre SQLAlchemy.

Cada coleção guarda documentos JSON sem schema, identificados por um id opaco
gerado pelo banco. Assinantes de uma coleção recebem a lista completa logo
ao se inscrever e novamente após cada escrita nela (last write wins).
"""

from __future__ import annotations

import uuid
from collections import defaultdict
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy import delete, insert, select, update
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError

from pdv.core.logging import db_logger
from pdv.infra.db import counters, documents, get_engine

Document = Dict[str, Any]
Listener = Callable[[List[Document]], None]
Unsubscribe = Callable[[], None]


class DocumentNotFoundError(LookupError):
    def __init__(self, collection: str, doc_id: str):
        super().__init__(f"Documento não encontrado: {collection}/{doc_id}")
        self.collection = collection
        self.doc_id = doc_id


def _as_document(doc_id: str, data: Dict[str, Any]) -> Document:
    return {**data, "id": doc_id}


def _payload(data: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in data.items() if k != "id"}


class DocumentStore:
    """Coleções de documentos com leitura, escrita e notificação de mudanças."""

    def __init__(self, engine: Optional[Engine] = None):
        self.engine = engine or get_engine()
        self._listeners: Dict[str, List[Listener]] = defaultdict(list)

    # ------------------------------------------------------------------
    # Leitura
    # ------------------------------------------------------------------

    def list(self, collection: str) -> List[Document]:
        stmt = (
            select(documents.c.id, documents.c.data)
            .where(documents.c.collection == collection)
            .order_by(documents.c.created_at, documents.c.id)
        )
        with self.engine.connect() as conn:
            rows = conn.execute(stmt).all()
        return [_as_document(row.id, row.data) for row in rows]

    def get(self, collection: str, doc_id: str) -> Optional[Document]:
        stmt = select(documents.c.data).where(
            documents.c.collection == collection, documents.c.id == doc_id
        )
        with self.engine.connect() as conn:
            data = conn.execute(stmt).scalar_one_or_none()
        return None if data is None else _as_document(doc_id, data)

    # ------------------------------------------------------------------
    # Escrita
    # ------------------------------------------------------------------

    def add(self, collection: str, data: Dict[str, Any]) -> str:
        doc_id = uuid.uuid4().hex
        with self.engine.begin() as conn:
            conn.execute(
                insert(documents).values(
                    collection=collection,
                    id=doc_id,
                    data=_payload(data),
                    created_at=datetime.now(),
                )
            )
        db_logger.debug("Document created", collection=collection, doc_id=doc_id)
        self._notify(collection)
        return doc_id

    def set(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        """Grava o documento inteiro, criando se não existir."""
        now = datetime.now()
        with self.engine.begin() as conn:
            result = conn.execute(
                update(documents)
                .where(documents.c.collection == collection, documents.c.id == doc_id)
                .values(data=_payload(data), updated_at=now)
            )
            if result.rowcount == 0:
                conn.execute(
                    insert(documents).values(
                        collection=collection, id=doc_id, data=_payload(data), created_at=now
                    )
                )
        self._notify(collection)

    def update(self, collection: str, doc_id: str, changes: Dict[str, Any]) -> Document:
        """Mescla `changes` no documento existente."""
        where = (documents.c.collection == collection, documents.c.id == doc_id)
        with self.engine.begin() as conn:
            current = conn.execute(select(documents.c.data).where(*where)).scalar_one_or_none()
            if current is None:
                raise DocumentNotFoundError(collection, doc_id)
            merged = {**current, **_payload(changes)}
            conn.execute(
                update(documents).where(*where).values(data=merged, updated_at=datetime.now())
            )
        db_logger.debug("Document updated", collection=collection, doc_id=doc_id)
        self._notify(collection)
        return _as_document(doc_id, merged)

    def delete(self, collection: str, doc_id: str) -> None:
        with self.engine.begin() as conn:
            conn.execute(
                delete(documents).where(
                    documents.c.collection == collection, documents.c.id == doc_id
                )
            )
        db_logger.debug("Document deleted", collection=collection, doc_id=doc_id)
        self._notify(collection)

    def next_sequence(self, name: str, seed: Callable[[], int]) -> int:
        """
        Incremento atômico de um contador nomeado.

        Na primeira chamada o contador nasce com `seed()`.
        """
        while True:
            with self.engine.begin() as conn:
                result = conn.execute(
                    update(counters)
                    .where(counters.c.name == name)
                    .values(value=counters.c.value + 1)
                )
                if result.rowcount:
                    return conn.execute(
                        select(counters.c.value).where(counters.c.name == name)
                    ).scalar_one()

            start = seed()
            try:
                with self.engine.begin() as conn:
                    conn.execute(insert(counters).values(name=name, value=start))
                return start
            except IntegrityError:
                # outro escritor criou o contador primeiro
                continue

    # ------------------------------------------------------------------
    # Assinaturas
    # ------------------------------------------------------------------

    def subscribe(self, collection: str, on_change: Listener) -> Unsubscribe:
        self._listeners[collection].append(on_change)
        on_change(self.list(collection))

        def unsubscribe() -> None:
            if on_change in self._listeners[collection]:
                self._listeners[collection].remove(on_change)

        return unsubscribe

    def _notify(self, collection: str) -> None:
        listeners = list(self._listeners.get(collection, ()))
        if not listeners:
            return
        snapshot = self.list(collection)
        for listener in listeners:
            try:
                listener(snapshot)
            except Exception as exc:
                db_logger.error("Listener failed", exc=exc, collection=collection)
