from .embeddings import (
    EmbeddingProvider,
    HashedBagOfWordsEmbedder,
    OpenAIEmbeddingProvider,
    cosine_similarity,
    create_embedding_provider,
    euclidean_distance,
)
from .errors import (
    ConfigurationError,
    DependencyNotInstalledError,
    DimensionMismatchError,
    ProviderError,
    RagCoreError,
    SnapshotDecodeError,
)
from .pipeline import ComponentRegistry, Indexer, RetrievalConfig, Retriever, create_rag_system
from .text import ChunkConfig, chunk_by_sentences, chunk_text, merge_small_chunks
from .types import EmbeddingResult, RetrievalResult, SearchResult, TextChunk, VectorDocument, VectorStoreConfig
from .vectorstores import InMemoryVectorStore, PersistentVectorStore, create_vector_store

__version__ = "0.1.0"

__all__ = [
    "ChunkConfig",
    "ComponentRegistry",
    "ConfigurationError",
    "DependencyNotInstalledError",
    "DimensionMismatchError",
    "EmbeddingProvider",
    "EmbeddingResult",
    "HashedBagOfWordsEmbedder",
    "InMemoryVectorStore",
    "Indexer",
    "OpenAIEmbeddingProvider",
    "PersistentVectorStore",
    "ProviderError",
    "RagCoreError",
    "RetrievalConfig",
    "RetrievalResult",
    "Retriever",
    "SearchResult",
    "SnapshotDecodeError",
    "TextChunk",
    "VectorDocument",
    "VectorStoreConfig",
    "chunk_by_sentences",
    "chunk_text",
    "cosine_similarity",
    "create_embedding_provider",
    "create_rag_system",
    "create_vector_store",
    "euclidean_distance",
    "merge_small_chunks",
]
