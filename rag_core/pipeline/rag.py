from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Callable, Optional, TypeVar

from ..embeddings.base import EmbeddingProvider
from ..types import RetrievalResult
from ..vectorstores.base import VectorStore
from .indexing import Indexer
from .retrieval import RetrievalConfig, Retriever

T = TypeVar("T")


@dataclass(frozen=True)
class RAGSystem:
    retriever: Retriever
    indexer: Indexer

    def retrieve(self, query: str, **overrides) -> RetrievalResult:
        return self.retriever.retrieve(query, **overrides)


def create_rag_system(
    *,
    vector_store: VectorStore,
    embedding_provider: EmbeddingProvider,
    config: Optional[RetrievalConfig] = None,
) -> RAGSystem:
    return RAGSystem(
        retriever=Retriever(vector_store=vector_store, embedding_provider=embedding_provider, config=config),
        indexer=Indexer(vector_store=vector_store, embedding_provider=embedding_provider),
    )


class ComponentRegistry:
    """Named cache of providers and stores, created on first request.

    Passed around explicitly instead of living in module globals, so two
    registries never share instances.
    """

    def __init__(self):
        self._providers: dict[str, EmbeddingProvider] = {}
        self._stores: dict[str, VectorStore] = {}
        self._lock = threading.Lock()

    def provider(self, name: str, factory: Callable[[], EmbeddingProvider]) -> EmbeddingProvider:
        return self._get_or_create(self._providers, name, factory)

    def store(self, name: str, factory: Callable[[], VectorStore]) -> VectorStore:
        return self._get_or_create(self._stores, name, factory)

    def rag_system(
        self,
        name: str,
        *,
        provider_factory: Callable[[], EmbeddingProvider],
        store_factory: Callable[[], VectorStore],
        config: Optional[RetrievalConfig] = None,
    ) -> RAGSystem:
        return create_rag_system(
            vector_store=self.store(name, store_factory),
            embedding_provider=self.provider(name, provider_factory),
            config=config,
        )

    def clear(self) -> None:
        with self._lock:
            self._providers.clear()
            self._stores.clear()

    def _get_or_create(self, cache: dict[str, T], name: str, factory: Callable[[], T]) -> T:
        with self._lock:
            if name not in cache:
                cache[name] = factory()
            return cache[name]
