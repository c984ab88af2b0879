from __future__ import annotations

import re
from typing import Sequence

import numpy as np

from ..errors import ConfigurationError
from ..types import EmbeddingResult
from .similarity import l2_normalize


_NON_WORD_RE = re.compile(r"[^\w\s]")

MODEL_ID = "local-hashed-bow"


def tokenize(text: str) -> list[str]:
    words = _NON_WORD_RE.sub(" ", text.lower()).split()
    return [w for w in words if len(w) > 2]


def string_hash(value: str) -> int:
    # 32-bit signed rolling hash over UTF-16 code units, h = h * 31 + unit,
    # wrapped like int32. Characters outside the BMP contribute two units.
    data = value.encode("utf-16-le", "surrogatepass")
    h = 0
    for i in range(0, len(data), 2):
        h = (h * 31 + int.from_bytes(data[i : i + 2], "little")) & 0xFFFFFFFF
    if h >= 0x80000000:
        h -= 0x100000000
    return h


class HashedBagOfWordsEmbedder:
    """Offline embedder: hashed term frequencies, L2 normalized.

    There is no inverse-document-frequency weighting; vectors depend only on
    the text itself, so results are deterministic across processes.
    """

    def __init__(self, *, dimensions: int = 512):
        if int(dimensions) <= 0:
            raise ConfigurationError(f"dimensions 必须大于 0: {dimensions}")
        self._dimensions = int(dimensions)

    @property
    def model(self) -> str:
        return MODEL_ID

    @property
    def dimensions(self) -> int:
        return self._dimensions

    def embed(self, text: str) -> EmbeddingResult:
        return self.embed_batch([text])[0]

    def embed_batch(self, texts: Sequence[str]) -> list[EmbeddingResult]:
        results: list[EmbeddingResult] = []
        for text in texts:
            vector = self._vectorize(text)
            results.append(EmbeddingResult(embedding=vector, text=text, model=MODEL_ID, dimensions=len(vector)))
        return results

    def _vectorize(self, text: str) -> list[float]:
        vector = np.zeros(self._dimensions)
        for token in tokenize(text):
            vector[abs(string_hash(token)) % self._dimensions] += 1.0
        return l2_normalize(vector).tolist()
