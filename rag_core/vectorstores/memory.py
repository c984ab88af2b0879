from __future__ import annotations

import itertools
import threading
from dataclasses import replace
from datetime import datetime, timezone
from typing import Iterable, Optional, Sequence

import numpy as np

from ..embeddings.similarity import cosine_similarities, euclidean_distances
from ..errors import DimensionMismatchError
from ..logger import get_logger
from ..types import SearchResult, VectorDocument, VectorStoreConfig
from .base import DocumentFilter

logger = get_logger(__name__)


class InMemoryVectorStore:
    """Exhaustive-scan vector store keyed by document id.

    When ``max_documents`` is set, inserting a new id into a full store
    evicts the single document with the oldest ``created_at``. Every public
    method holds ``self._lock``, so one instance can be shared by threads.
    """

    def __init__(self, config: Optional[VectorStoreConfig] = None):
        self._config = config or VectorStoreConfig()
        self._documents: dict[str, VectorDocument] = {}
        self._sequence: dict[str, int] = {}
        self._counter = itertools.count()
        self._last_created_at: Optional[datetime] = None
        self._lock = threading.RLock()

    @property
    def config(self) -> VectorStoreConfig:
        return self._config

    def add(self, doc: VectorDocument) -> None:
        self._check_dimensions(doc.embedding, what="embedding")

        with self._lock:
            if doc.id not in self._documents and self._at_capacity():
                self._evict_oldest()

            stored = replace(_detached(doc), created_at=self._now())
            self._documents[doc.id] = stored
            self._sequence[doc.id] = next(self._counter)

        logger.debug("Added document %s to vector store", doc.id)

    def add_batch(self, docs: Iterable[VectorDocument]) -> None:
        for doc in docs:
            self.add(doc)

    def search(
        self,
        query_embedding: Sequence[float],
        top_k: int = 5,
        filter: Optional[DocumentFilter] = None,
    ) -> list[SearchResult]:
        self._check_dimensions(query_embedding, what="query")
        if int(top_k) <= 0:
            return []

        with self._lock:
            candidates = [doc for doc in self._documents.values() if filter is None or filter(doc)]
            sequences = [self._sequence[doc.id] for doc in candidates]
        if not candidates:
            return []

        # Imported snapshots skip the dimension check, so verify before stacking.
        for doc in candidates:
            self._check_dimensions(doc.embedding, what="document")
        matrix = np.asarray([doc.embedding for doc in candidates], dtype=float)

        distances: list[Optional[float]]
        if self._config.similarity_metric == "cosine":
            scores = cosine_similarities(matrix, query_embedding).tolist()
            distances = [None] * len(candidates)
        else:
            distances = euclidean_distances(matrix, query_embedding).tolist()
            scores = [1.0 / (1.0 + d) for d in distances]

        order = sorted(range(len(candidates)), key=lambda i: (-scores[i], sequences[i]))[: int(top_k)]
        return [
            SearchResult(document=_detached(candidates[i]), score=scores[i], distance=distances[i]) for i in order
        ]

    def get(self, doc_id: str) -> Optional[VectorDocument]:
        with self._lock:
            doc = self._documents.get(doc_id)
        return _detached(doc) if doc is not None else None

    def delete(self, doc_id: str) -> bool:
        with self._lock:
            if doc_id not in self._documents:
                return False
            del self._documents[doc_id]
            del self._sequence[doc_id]
        logger.debug("Deleted document %s from vector store", doc_id)
        return True

    def clear(self) -> None:
        with self._lock:
            self._documents.clear()
            self._sequence.clear()
        logger.info("Cleared vector store")

    def size(self) -> int:
        with self._lock:
            return len(self._documents)

    def export(self) -> list[VectorDocument]:
        with self._lock:
            docs = list(self._documents.values())
        return [_detached(doc) for doc in docs]

    def import_documents(self, docs: Iterable[VectorDocument]) -> None:
        # No dimension check and no eviction: the snapshot is trusted as-is.
        count = 0
        with self._lock:
            for doc in docs:
                doc = _detached(doc)
                if doc.created_at is None:
                    doc = replace(doc, created_at=self._now())
                elif doc.created_at.tzinfo is None:
                    doc = replace(doc, created_at=doc.created_at.replace(tzinfo=timezone.utc))
                self._documents[doc.id] = doc
                self._sequence[doc.id] = next(self._counter)
                count += 1
        logger.info("Imported %d documents into vector store", count)

    def __len__(self) -> int:
        return self.size()

    def __contains__(self, doc_id: object) -> bool:
        with self._lock:
            return doc_id in self._documents

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(dimensions={self._config.dimensions}, "
            f"metric='{self._config.similarity_metric}', size={self.size()})"
        )

    def _check_dimensions(self, vector: Sequence[float], *, what: str) -> None:
        if len(vector) != self._config.dimensions:
            raise DimensionMismatchError(self._config.dimensions, len(vector), what=what)

    def _at_capacity(self) -> bool:
        limit = self._config.max_documents
        return limit is not None and len(self._documents) >= limit

    def _evict_oldest(self) -> None:
        oldest_id = min(
            self._documents,
            key=lambda doc_id: (self._documents[doc_id].created_at, self._sequence[doc_id]),
        )
        del self._documents[oldest_id]
        del self._sequence[oldest_id]
        logger.debug("Evicted oldest document %s", oldest_id)

    def _now(self) -> datetime:
        now = datetime.now(timezone.utc)
        if self._last_created_at is not None and now < self._last_created_at:
            now = self._last_created_at
        self._last_created_at = now
        return now


def _detached(doc: VectorDocument) -> VectorDocument:
    # Records handed in or out never share their mutable parts with the store.
    metadata = dict(doc.metadata) if doc.metadata is not None else None
    return replace(doc, embedding=list(doc.embedding), metadata=metadata)
