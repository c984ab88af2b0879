from __future__ import annotations

import math
import time
from dataclasses import dataclass, replace
from typing import Any, Optional, Sequence

from ..embeddings.base import EmbeddingProvider
from ..errors import ConfigurationError
from ..logger import get_logger
from ..types import RetrievalResult, SearchResult
from ..vectorstores.base import DocumentFilter, VectorStore

logger = get_logger(__name__)


@dataclass(frozen=True)
class RetrievalConfig:
    top_k: int = 5
    min_score: float = 0.5
    max_context_length: int = 4000
    include_metadata: bool = True
    separator: str = "\n\n---\n\n"

    def __post_init__(self) -> None:
        if int(self.top_k) < 0:
            raise ConfigurationError(f"top_k 不能为负数: {self.top_k}")
        if int(self.max_context_length) < 0:
            raise ConfigurationError(f"max_context_length 不能为负数: {self.max_context_length}")


def estimate_context_tokens(context: str) -> int:
    return math.ceil(len(context) / 4)


class Retriever:
    def __init__(
        self,
        *,
        vector_store: VectorStore,
        embedding_provider: EmbeddingProvider,
        config: Optional[RetrievalConfig] = None,
    ):
        self._vector_store = vector_store
        self._embedding_provider = embedding_provider
        self._config = config or RetrievalConfig()

    @property
    def config(self) -> RetrievalConfig:
        return self._config

    def update_config(self, **overrides: Any) -> RetrievalConfig:
        self._config = replace(self._config, **overrides)
        return self._config

    def retrieve(
        self,
        query: str,
        *,
        filter: Optional[DocumentFilter] = None,
        **overrides: Any,
    ) -> RetrievalResult:
        cfg = replace(self._config, **overrides) if overrides else self._config
        started = time.perf_counter()

        query_embedding = self._embedding_provider.embed(query)
        results = self._vector_store.search(query_embedding.embedding, top_k=cfg.top_k, filter=filter)
        filtered = [r for r in results if r.score >= cfg.min_score]
        context = build_context(filtered, cfg)

        logger.debug(
            "Retrieved %d/%d documents for query %r in %.1f ms",
            len(filtered),
            len(results),
            query[:50],
            (time.perf_counter() - started) * 1000,
        )

        return RetrievalResult(
            query=query,
            documents=filtered,
            context=context,
            token_estimate=estimate_context_tokens(context),
        )


def build_context(results: Sequence[SearchResult], config: RetrievalConfig) -> str:
    """Join formatted documents in rank order until the length budget is hit.

    The budget counts formatted document text only; separators are free.
    """
    parts: list[str] = []
    current_length = 0
    for result in results:
        formatted = format_document(result, include_metadata=config.include_metadata)
        if current_length + len(formatted) > config.max_context_length:
            break
        parts.append(formatted)
        current_length += len(formatted)
    return config.separator.join(parts)


def format_document(result: SearchResult, *, include_metadata: bool = True) -> str:
    document = result.document
    lines: list[str] = []
    if include_metadata and document.metadata:
        rendered = ", ".join(f"{k}: {v}" for k, v in document.metadata.items() if v is not None)
        if rendered:
            lines.append(f"[{rendered}]")
    lines.append(document.content)
    return "\n".join(lines)
