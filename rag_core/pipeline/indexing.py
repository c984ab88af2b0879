from __future__ import annotations

import uuid
from typing import Any, Iterable, Mapping, Optional, Sequence, Union

from ..embeddings.base import EmbeddingProvider
from ..logger import get_logger
from ..types import Metadata, TextChunk, VectorDocument
from ..vectorstores.base import VectorStore

logger = get_logger(__name__)

DocumentInput = Union[Mapping[str, Any], tuple[str, Optional[Metadata]], str]


def new_document_id() -> str:
    return f"doc-{uuid.uuid4().hex}"


class Indexer:
    def __init__(self, *, vector_store: VectorStore, embedding_provider: EmbeddingProvider):
        self._vector_store = vector_store
        self._embedding_provider = embedding_provider

    def index(self, content: str, metadata: Optional[Metadata] = None) -> str:
        doc_id = new_document_id()
        result = self._embedding_provider.embed(content)
        self._vector_store.add(
            VectorDocument(id=doc_id, content=content, embedding=result.embedding, metadata=metadata)
        )
        logger.debug("Indexed document %s (%d chars)", doc_id, len(content))
        return doc_id

    def index_batch(self, documents: Iterable[DocumentInput]) -> list[str]:
        pairs = [_normalize_input(d) for d in documents]
        if not pairs:
            return []

        results = self._embedding_provider.embed_batch([content for content, _ in pairs])

        ids: list[str] = []
        for (content, metadata), result in zip(pairs, results):
            doc_id = new_document_id()
            self._vector_store.add(
                VectorDocument(id=doc_id, content=content, embedding=result.embedding, metadata=metadata)
            )
            ids.append(doc_id)

        logger.info("Indexed batch of %d documents", len(ids))
        return ids

    def index_chunks(self, chunks: Sequence[TextChunk], metadata: Optional[Metadata] = None) -> list[str]:
        documents = []
        for chunk in chunks:
            merged: dict[str, Any] = dict(metadata or {})
            merged.update(chunk.metadata or {})
            merged.update(
                {"chunk_index": chunk.index, "start_offset": chunk.start_offset, "end_offset": chunk.end_offset}
            )
            documents.append((chunk.content, merged))
        return self.index_batch(documents)

    def remove(self, doc_id: str) -> bool:
        return self._vector_store.delete(doc_id)

    def clear(self) -> None:
        self._vector_store.clear()


def _normalize_input(item: DocumentInput) -> tuple[str, Optional[Metadata]]:
    if isinstance(item, str):
        return item, None
    if isinstance(item, Mapping):
        return str(item["content"]), item.get("metadata")
    content, metadata = item
    return str(content), metadata
