"""
Shared fixtures for the rag_core test suite.

Provides: small fixed-dimension stores, a deterministic fake embedding
provider and an in-memory key-value backend for the persistent store.
"""

import logging
from typing import Sequence

import pytest

from rag_core.types import EmbeddingResult, VectorStoreConfig
from rag_core.vectorstores import InMemoryKeyValueStorage, InMemoryVectorStore


class FakeEmbeddingProvider:
    """Looks vectors up in a table; unknown texts map to ``default``."""

    def __init__(self, table: dict[str, list[float]], *, dimensions: int = 3, default: list[float] | None = None):
        self.table = dict(table)
        self.dimensions = dimensions
        self.model = "fake-embedder"
        self.default = default if default is not None else [0.0] * dimensions
        self.batch_calls: list[list[str]] = []

    def embed(self, text: str) -> EmbeddingResult:
        return self.embed_batch([text])[0]

    def embed_batch(self, texts: Sequence[str]) -> list[EmbeddingResult]:
        self.batch_calls.append(list(texts))
        return [
            EmbeddingResult(
                embedding=list(self.table.get(t, self.default)),
                text=t,
                model=self.model,
                dimensions=self.dimensions,
            )
            for t in texts
        ]


@pytest.fixture
def store() -> InMemoryVectorStore:
    return InMemoryVectorStore(VectorStoreConfig(dimensions=3))


@pytest.fixture
def kv_storage() -> InMemoryKeyValueStorage:
    return InMemoryKeyValueStorage()


@pytest.fixture
def fake_provider() -> FakeEmbeddingProvider:
    return FakeEmbeddingProvider(
        {
            "gpio pins": [1.0, 0.0, 0.0],
            "pull-up resistor": [0.9, 0.1, 0.0],
            "decoupling capacitor": [0.0, 0.1, 0.9],
        }
    )


@pytest.fixture(autouse=True)
def _reset_package_logger():
    """Undo ``configure_logging`` so caplog keeps seeing package records."""
    logger = logging.getLogger("rag_core")
    handlers, level, propagate = list(logger.handlers), logger.level, logger.propagate
    yield
    logger.handlers[:] = handlers
    logger.setLevel(level)
    logger.propagate = propagate
