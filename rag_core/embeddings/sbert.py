from __future__ import annotations

import importlib
from typing import Optional, Sequence

from ..errors import ConfigurationError, DependencyNotInstalledError
from ..types import EmbeddingResult


class SentenceTransformerEmbedder:
    def __init__(self, *, model: str, normalize: bool = True, dimensions: Optional[int] = None):
        self._model = model
        self._normalize = bool(normalize)
        self._st = _load_st_model(model)

        native = int(self._st.get_sentence_embedding_dimension())
        if dimensions is not None and int(dimensions) != native:
            raise ConfigurationError(f"模型 {model} 的维度为 {native}，与配置的 {dimensions} 不一致")
        self._dimensions = native

    @property
    def model(self) -> str:
        return self._model

    @property
    def dimensions(self) -> int:
        return self._dimensions

    def embed(self, text: str) -> EmbeddingResult:
        return self.embed_batch([text])[0]

    def embed_batch(self, texts: Sequence[str]) -> list[EmbeddingResult]:
        inputs = list(texts)
        if not inputs:
            return []
        vectors = self._st.encode(inputs, normalize_embeddings=self._normalize)
        return [
            EmbeddingResult(embedding=[float(x) for x in v], text=t, model=self._model, dimensions=len(v))
            for t, v in zip(inputs, vectors)
        ]


def _load_st_model(model: str):
    try:
        st = importlib.import_module("sentence_transformers")
    except Exception as e:
        raise DependencyNotInstalledError(
            "缺少可选依赖: sentence-transformers，请安装 extra: sbert"
        ) from e
    SentenceTransformer = getattr(st, "SentenceTransformer")
    return SentenceTransformer(model)
