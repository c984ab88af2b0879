from __future__ import annotations

from typing import Optional

from ..errors import ConfigurationError
from .base import EmbeddingProvider
from .hashing import HashedBagOfWordsEmbedder
from .openai_embedder import OpenAIEmbeddingProvider
from .sbert import SentenceTransformerEmbedder
from .similarity import cosine_similarity, dot_product, euclidean_distance


def create_embedding_provider(
    provider: str = "local",
    *,
    model: Optional[str] = None,
    dimensions: Optional[int] = None,
    api_key: Optional[str] = None,
    base_url: Optional[str] = None,
) -> EmbeddingProvider:
    key = str(provider).lower().strip()
    if key == "openai":
        return OpenAIEmbeddingProvider(
            model=model or "text-embedding-3-small",
            dimensions=int(dimensions or 1536),
            api_key=api_key,
            base_url=base_url,
        )
    if key in {"local", "hashed", "hashed_bow"}:
        return HashedBagOfWordsEmbedder(dimensions=int(dimensions or 512))
    if key in {"sbert", "sentence_transformers"}:
        if not model:
            raise ConfigurationError("sbert 需要指定 embeddings.model")
        return SentenceTransformerEmbedder(model=model, dimensions=dimensions)
    raise ConfigurationError(f"不支持的 embeddings.provider: {provider}")


__all__ = [
    "EmbeddingProvider",
    "HashedBagOfWordsEmbedder",
    "OpenAIEmbeddingProvider",
    "SentenceTransformerEmbedder",
    "cosine_similarity",
    "create_embedding_provider",
    "dot_product",
    "euclidean_distance",
]
