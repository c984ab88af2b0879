from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from .errors import ConfigurationError


@dataclass(frozen=True)
class ChunkingSettings:
    max_chunk_size: int
    chunk_overlap: int
    separators: tuple[str, ...]
    min_chunk_size: int


@dataclass(frozen=True)
class EmbeddingsSettings:
    provider: str
    model: Optional[str]
    dimensions: int


@dataclass(frozen=True)
class VectorStoreSettings:
    provider: str
    similarity_metric: str
    max_documents: Optional[int]
    persist_path: str
    storage_key: str


@dataclass(frozen=True)
class RetrievalSettings:
    top_k: int
    min_score: float
    max_context_length: int
    include_metadata: bool


@dataclass(frozen=True)
class LoggingSettings:
    level: str


@dataclass(frozen=True)
class AppConfig:
    chunking: ChunkingSettings
    embeddings: EmbeddingsSettings
    vector_store: VectorStoreSettings
    retrieval: RetrievalSettings
    logging: LoggingSettings
    base_dir: Path = field(default_factory=Path.cwd)

    def resolve_path(self, maybe_relative_path: str) -> str:
        p = Path(maybe_relative_path)
        if p.is_absolute():
            return str(p)
        return str((self.base_dir / p).resolve())


def load_config(config_path: str) -> AppConfig:
    path = Path(config_path)
    if not path.is_absolute():
        path = (Path.cwd() / path).resolve()
    if not path.exists():
        raise ConfigurationError(f"配置文件不存在: {path}")

    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except ValueError as e:
        raise ConfigurationError(f"配置文件不是合法的 JSON: {path}: {e}") from e
    if not isinstance(raw, dict):
        raise ConfigurationError(f"配置文件顶层必须是对象: {path}")
    return parse_config(raw, base_dir=path.parent)


def default_config(base_dir: Optional[Path] = None) -> AppConfig:
    return parse_config({}, base_dir=base_dir or Path.cwd())


def parse_config(raw: dict[str, Any], *, base_dir: Path) -> AppConfig:
    chunking_raw = raw.get("chunking") or {}
    embeddings_raw = raw.get("embeddings") or {}
    vector_store_raw = raw.get("vector_store") or {}
    retrieval_raw = raw.get("retrieval") or {}
    logging_raw = raw.get("logging") or {}

    try:
        chunking = ChunkingSettings(
            max_chunk_size=int(chunking_raw.get("max_chunk_size", 1000)),
            chunk_overlap=int(chunking_raw.get("chunk_overlap", 200)),
            separators=tuple(chunking_raw.get("separators", ("\n\n", "\n", ". ", ", ", " "))),
            min_chunk_size=int(chunking_raw.get("min_chunk_size", 0)),
        )
        embeddings = EmbeddingsSettings(
            provider=str(embeddings_raw.get("provider", "local")),
            model=embeddings_raw.get("model"),
            dimensions=int(embeddings_raw.get("dimensions", 512)),
        )
        max_documents = vector_store_raw.get("max_documents")
        vector_store = VectorStoreSettings(
            provider=str(vector_store_raw.get("provider", "persistent")),
            similarity_metric=str(vector_store_raw.get("similarity_metric", "cosine")),
            max_documents=int(max_documents) if max_documents is not None else None,
            persist_path=str(vector_store_raw.get("persist_path", str(Path("data") / "vector_store"))),
            storage_key=str(vector_store_raw.get("storage_key", "rag-core-vectors")),
        )
        retrieval = RetrievalSettings(
            top_k=int(retrieval_raw.get("top_k", 5)),
            min_score=float(retrieval_raw.get("min_score", 0.5)),
            max_context_length=int(retrieval_raw.get("max_context_length", 4000)),
            include_metadata=bool(retrieval_raw.get("include_metadata", True)),
        )
        logging_cfg = LoggingSettings(
            level=str(logging_raw.get("level", get_env("RAG_CORE_LOG_LEVEL", "INFO"))),
        )
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"配置参数类型不合法: {e}") from e

    if chunking.max_chunk_size <= 0 or chunking.chunk_overlap < 0:
        raise ConfigurationError("chunking 参数不合法")
    if chunking.chunk_overlap >= chunking.max_chunk_size:
        raise ConfigurationError("chunking.chunk_overlap 必须小于 chunking.max_chunk_size")
    if embeddings.dimensions <= 0:
        raise ConfigurationError("embeddings.dimensions 必须大于 0")
    if vector_store.similarity_metric not in {"cosine", "euclidean"}:
        raise ConfigurationError(f"不支持的 vector_store.similarity_metric: {vector_store.similarity_metric}")
    if vector_store.max_documents is not None and vector_store.max_documents <= 0:
        raise ConfigurationError("vector_store.max_documents 必须大于 0")
    if retrieval.top_k < 0 or retrieval.max_context_length < 0:
        raise ConfigurationError("retrieval 参数不合法")

    return AppConfig(
        chunking=chunking,
        embeddings=embeddings,
        vector_store=vector_store,
        retrieval=retrieval,
        logging=logging_cfg,
        base_dir=Path(base_dir),
    )


def get_env(name: str, default: Optional[str] = None) -> Optional[str]:
    v = os.getenv(name)
    if v is None or v == "":
        return default
    return v
