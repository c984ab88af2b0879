from __future__ import annotations

from typing import Optional

from ..errors import ConfigurationError
from ..logger import get_logger
from ..types import VectorStoreConfig
from .base import DocumentFilter, VectorStore
from .memory import InMemoryVectorStore
from .persistent import FileKeyValueStorage, InMemoryKeyValueStorage, KeyValueStorage, PersistentVectorStore
from .serialization import dumps_snapshot, loads_snapshot

logger = get_logger(__name__)


def create_vector_store(
    kind: str = "memory",
    config: Optional[VectorStoreConfig] = None,
    *,
    storage: Optional[KeyValueStorage] = None,
    storage_key: Optional[str] = None,
) -> VectorStore:
    key = str(kind).lower().strip()
    if key == "persistent":
        if storage is not None and storage_key:
            return PersistentVectorStore(storage, storage_key, config)
        logger.warning("persistent vector store requested without storage/key; using in-memory store")
        return InMemoryVectorStore(config)
    if key == "memory":
        return InMemoryVectorStore(config)
    raise ConfigurationError(f"不支持的 vector_store.provider: {kind}")


__all__ = [
    "DocumentFilter",
    "FileKeyValueStorage",
    "InMemoryKeyValueStorage",
    "InMemoryVectorStore",
    "KeyValueStorage",
    "PersistentVectorStore",
    "VectorStore",
    "create_vector_store",
    "dumps_snapshot",
    "loads_snapshot",
]
