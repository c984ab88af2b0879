from __future__ import annotations

from typing import Protocol, Sequence

from ..types import EmbeddingResult


class EmbeddingProvider(Protocol):
    model: str
    dimensions: int

    def embed(self, text: str) -> EmbeddingResult:
        raise NotImplementedError

    def embed_batch(self, texts: Sequence[str]) -> list[EmbeddingResult]:
        raise NotImplementedError
