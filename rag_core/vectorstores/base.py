from __future__ import annotations

from typing import Callable, Iterable, Optional, Protocol, Sequence

from ..types import SearchResult, VectorDocument, VectorStoreConfig


DocumentFilter = Callable[[VectorDocument], bool]


class VectorStore(Protocol):
    @property
    def config(self) -> VectorStoreConfig:
        raise NotImplementedError

    def add(self, doc: VectorDocument) -> None:
        raise NotImplementedError

    def add_batch(self, docs: Iterable[VectorDocument]) -> None:
        raise NotImplementedError

    def search(
        self,
        query_embedding: Sequence[float],
        top_k: int = 5,
        filter: Optional[DocumentFilter] = None,
    ) -> list[SearchResult]:
        raise NotImplementedError

    def get(self, doc_id: str) -> Optional[VectorDocument]:
        raise NotImplementedError

    def delete(self, doc_id: str) -> bool:
        raise NotImplementedError

    def clear(self) -> None:
        raise NotImplementedError

    def size(self) -> int:
        raise NotImplementedError

    def export(self) -> list[VectorDocument]:
        raise NotImplementedError

    def import_documents(self, docs: Iterable[VectorDocument]) -> None:
        raise NotImplementedError
