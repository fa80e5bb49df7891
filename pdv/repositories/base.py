"""
Base dos repositórios de documentos.
Converte entre documentos JSON (camelCase, números float) e modelos de domínio.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any, Callable, Generic, List, Optional, TypeVar

from pdv.domain.models import ZERO
from pdv.domain.pricing import to_decimal
from pdv.repositories.protocols import Document, DocumentStoreProtocol

T = TypeVar("T")


def money_out(value: Optional[Decimal]) -> Optional[float]:
    return None if value is None else float(value)


def money_in(value: Any, default: Optional[Decimal] = ZERO) -> Optional[Decimal]:
    parsed = to_decimal(value)
    return default if parsed is None else parsed


def datetime_out(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def datetime_in(value: Any) -> Optional[datetime]:
    if isinstance(value, datetime):
        return value
    if not value:
        return None
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return None


def without_none(data: dict) -> dict:
    return {k: v for k, v in data.items() if v is not None}


class DocumentRepository(Generic[T]):
    """Acesso a uma coleção, convertendo documentos com `from_document`."""

    collection: str = ""

    def __init__(self, store: DocumentStoreProtocol):
        self.store = store

    @staticmethod
    def from_document(doc: Document) -> T:
        raise NotImplementedError

    def list_all(self) -> List[T]:
        return [self.from_document(doc) for doc in self.store.list(self.collection)]

    def get(self, doc_id: str) -> Optional[T]:
        doc = self.store.get(self.collection, doc_id)
        return None if doc is None else self.from_document(doc)

    def add(self, data: dict) -> T:
        doc_id = self.store.add(self.collection, data)
        return self.from_document({**data, "id": doc_id})

    def update(self, doc_id: str, changes: dict) -> T:
        return self.from_document(self.store.update(self.collection, doc_id, changes))

    def delete(self, doc_id: str) -> None:
        self.store.delete(self.collection, doc_id)

    def subscribe(self, on_change: Callable[[List[T]], None]) -> Callable[[], None]:
        return self.store.subscribe(
            self.collection,
            lambda docs: on_change([self.from_document(d) for d in docs]),
        )
