from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Literal, Mapping, Optional, Sequence

from .errors import ConfigurationError


Embedding = Sequence[float]
Metadata = Mapping[str, Any]
SimilarityMetric = Literal["cosine", "euclidean"]

SIMILARITY_METRICS: tuple[str, ...] = ("cosine", "euclidean")


@dataclass(frozen=True)
class TextChunk:
    content: str
    index: int
    start_offset: int
    end_offset: int
    metadata: Optional[Metadata] = None


@dataclass(frozen=True)
class EmbeddingResult:
    embedding: list[float]
    text: str
    model: str
    dimensions: int


@dataclass(frozen=True)
class VectorDocument:
    id: str
    content: str
    embedding: list[float]
    metadata: Optional[Metadata] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class SearchResult:
    document: VectorDocument
    score: float
    distance: Optional[float] = None


@dataclass(frozen=True)
class VectorStoreConfig:
    dimensions: int = 1536
    similarity_metric: SimilarityMetric = "cosine"
    max_documents: Optional[int] = None

    def __post_init__(self) -> None:
        if int(self.dimensions) <= 0:
            raise ConfigurationError(f"dimensions 必须大于 0: {self.dimensions}")
        if self.similarity_metric not in SIMILARITY_METRICS:
            raise ConfigurationError(f"不支持的 similarity_metric: {self.similarity_metric}")
        if self.max_documents is not None and int(self.max_documents) <= 0:
            raise ConfigurationError(f"max_documents 必须大于 0: {self.max_documents}")


@dataclass(frozen=True)
class RetrievalResult:
    query: str
    documents: list[SearchResult] = field(default_factory=list)
    context: str = ""
    token_estimate: int = 0
