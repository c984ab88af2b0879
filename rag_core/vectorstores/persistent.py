from __future__ import annotations

import os
import tempfile
import threading
from pathlib import Path
from typing import Iterable, Optional, Protocol
from urllib.parse import quote

from ..errors import SnapshotDecodeError
from ..logger import get_logger
from ..types import VectorDocument, VectorStoreConfig
from .memory import InMemoryVectorStore
from .serialization import dumps_snapshot, loads_snapshot

logger = get_logger(__name__)


class KeyValueStorage(Protocol):
    def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def set(self, key: str, value: str) -> None:
        raise NotImplementedError


class InMemoryKeyValueStorage:
    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._data: dict[str, str] = dict(initial or {})
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self._data[key] = value


class FileKeyValueStorage:
    """One UTF-8 file per key under ``root``; writes replace the file atomically."""

    def __init__(self, root: str | Path):
        self._root = Path(root)

    @property
    def root(self) -> Path:
        return self._root

    def path_for(self, key: str) -> Path:
        # Percent-encoding is reversible, so distinct keys never share a file.
        return self._root / f"{quote(key, safe='')}.json"

    def get(self, key: str) -> Optional[str]:
        path = self.path_for(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set(self, key: str, value: str) -> None:
        self._root.mkdir(parents=True, exist_ok=True)
        path = self.path_for(key)
        fd, tmp = tempfile.mkstemp(dir=str(self._root), prefix=path.name, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(value)
            os.replace(tmp, path)
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise


class PersistentVectorStore(InMemoryVectorStore):
    """In-memory store that writes a full snapshot after every mutation.

    The snapshot format is the ``export`` format (see ``serialization``). A
    snapshot that cannot be decoded is logged and ignored, leaving the store
    empty. Mutations hold the store lock until their snapshot is written, so
    concurrent writers reach storage in mutation order.
    """

    def __init__(
        self,
        storage: KeyValueStorage,
        storage_key: str,
        config: Optional[VectorStoreConfig] = None,
    ):
        super().__init__(config)
        self._storage = storage
        self._storage_key = storage_key
        self._load()

    @property
    def storage_key(self) -> str:
        return self._storage_key

    def add(self, doc: VectorDocument) -> None:
        with self._lock:
            super().add(doc)
            self._save()

    def delete(self, doc_id: str) -> bool:
        with self._lock:
            removed = super().delete(doc_id)
            if removed:
                self._save()
        return removed

    def clear(self) -> None:
        with self._lock:
            super().clear()
            self._save()

    def import_documents(self, docs: Iterable[VectorDocument]) -> None:
        with self._lock:
            super().import_documents(docs)
            self._save()

    def _save(self) -> None:
        try:
            self._storage.set(self._storage_key, dumps_snapshot(self.export()))
        except Exception:
            logger.warning("Failed to persist vector store snapshot '%s'", self._storage_key, exc_info=True)

    def _load(self) -> None:
        try:
            data = self._storage.get(self._storage_key)
        except Exception:
            logger.warning("Failed to read vector store snapshot '%s'", self._storage_key, exc_info=True)
            return
        if not data:
            return

        try:
            docs = loads_snapshot(data)
        except SnapshotDecodeError as e:
            logger.warning("Ignoring undecodable vector store snapshot '%s': %s", self._storage_key, e)
            return

        super().import_documents(docs)
