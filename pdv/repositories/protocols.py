"""Contratos de infraestrutura usados pelos repositórios e serviços."""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional, Protocol

from pdv.infra.cloudinary_client import UploadedImage

Document = Dict[str, Any]


class DocumentStoreProtocol(Protocol):
    """Banco de documentos com assinatura por coleção."""

    def list(self, collection: str) -> List[Document]: ...

    def get(self, collection: str, doc_id: str) -> Optional[Document]: ...

    def add(self, collection: str, data: Dict[str, Any]) -> str: ...

    def set(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None: ...

    def update(self, collection: str, doc_id: str, changes: Dict[str, Any]) -> Document: ...

    def delete(self, collection: str, doc_id: str) -> None: ...

    def next_sequence(self, name: str, seed: Callable[[], int]) -> int: ...

    def subscribe(
        self, collection: str, on_change: Callable[[List[Document]], None]
    ) -> Callable[[], None]: ...


class ImageHostProtocol(Protocol):
    """Hospedagem externa de imagens."""

    async def upload_image(
        self, content: bytes, filename: str, folder: str = "categories"
    ) -> UploadedImage: ...

    async def delete_image(self, public_id: str) -> None: ...
