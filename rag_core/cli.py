from __future__ import annotations

import argparse
import json
from pathlib import Path

from .config import AppConfig, default_config, load_config
from .embeddings import EmbeddingProvider, create_embedding_provider
from .errors import RagCoreError
from .logger import configure_logging, get_logger
from .pipeline import Indexer, RetrievalConfig, Retriever
from .text.cleaning import clean_text, strip_html
from .text.splitter import ChunkConfig, chunk_code, chunk_text, merge_small_chunks
from .text.tokens import estimate_tokens
from .types import TextChunk, VectorStoreConfig
from .vectorstores import FileKeyValueStorage, VectorStore, create_vector_store

logger = get_logger(__name__)

_HTML_SUFFIXES = {".html", ".htm"}
_CODE_SUFFIXES = {".py", ".js", ".ts", ".tsx", ".jsx"}


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="rag-core")
    parser.add_argument(
        "--config",
        default=str(Path("configs") / "app.json"),
        help="配置文件路径（JSON），不存在时使用默认配置",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    p_ingest = sub.add_parser("ingest", help="清洗、切分文本文件并写入向量库")
    p_ingest.add_argument("paths", nargs="+", help="文本文件路径（.txt/.md/.html/代码文件）")
    p_ingest.add_argument("--reset", action="store_true", help="写入前清空向量库")

    p_query = sub.add_parser("query", help="检索并拼接上下文")
    p_query.add_argument("text", help="用户问题")
    p_query.add_argument("--top-k", type=int, default=None)
    p_query.add_argument("--min-score", type=float, default=None)
    p_query.add_argument("--json", action="store_true")

    sub.add_parser("stats", help="输出向量库文档数量")

    p_tokens = sub.add_parser("tokens", help="估算文本的 token 数")
    p_tokens.add_argument("text", help="待估算文本")
    p_tokens.add_argument("--model", default="gpt-4")

    args = parser.parse_args(argv)

    try:
        cfg = _load(args.config)
        configure_logging(cfg.logging.level)

        if args.command == "ingest":
            _cmd_ingest(cfg, paths=list(args.paths), reset=bool(args.reset))
            return 0
        if args.command == "query":
            _cmd_query(cfg, query=args.text, top_k=args.top_k, min_score=args.min_score, as_json=bool(args.json))
            return 0
        if args.command == "stats":
            _cmd_stats(cfg)
            return 0
        if args.command == "tokens":
            print(estimate_tokens(args.text, model=args.model))
            return 0
    except RagCoreError as e:
        logger.error("%s", e)
        return 1

    parser.print_help()
    return 2


def _load(config_path: str) -> AppConfig:
    if Path(config_path).exists():
        return load_config(config_path)
    logger.debug("Config %s not found, using defaults", config_path)
    return default_config()


def _cmd_ingest(cfg: AppConfig, *, paths: list[str], reset: bool) -> None:
    embedder = _build_embedder(cfg)
    store = _build_store(cfg, dimensions=embedder.dimensions)
    if reset:
        store.clear()

    indexer = Indexer(vector_store=store, embedding_provider=embedder)
    total = 0
    for raw_path in paths:
        path = Path(raw_path)
        chunks = _chunk_file(cfg, path)
        ids = indexer.index_chunks(chunks, metadata={"source": path.name})
        total += len(ids)
        print(f"{path}: {len(ids)} chunks")

    print(f"已写入向量库: {total} chunks（共 {store.size()} 条）")


def _chunk_file(cfg: AppConfig, path: Path) -> list[TextChunk]:
    text = path.read_text(encoding="utf-8")
    chunk_cfg = ChunkConfig(
        max_chunk_size=cfg.chunking.max_chunk_size,
        chunk_overlap=cfg.chunking.chunk_overlap,
        separators=cfg.chunking.separators,
    )

    suffix = path.suffix.lower()
    if suffix in _CODE_SUFFIXES:
        chunks = chunk_code(text, chunk_cfg)
    elif suffix in _HTML_SUFFIXES:
        chunks = chunk_text(strip_html(text), chunk_cfg)
    else:
        chunks = chunk_text(clean_text(text), chunk_cfg)

    if cfg.chunking.min_chunk_size > 0:
        chunks = merge_small_chunks(chunks, cfg.chunking.min_chunk_size)
    return chunks


def _cmd_query(
    cfg: AppConfig,
    *,
    query: str,
    top_k: int | None,
    min_score: float | None,
    as_json: bool,
) -> None:
    embedder = _build_embedder(cfg)
    store = _build_store(cfg, dimensions=embedder.dimensions)
    retriever = Retriever(
        vector_store=store,
        embedding_provider=embedder,
        config=RetrievalConfig(
            top_k=cfg.retrieval.top_k,
            min_score=cfg.retrieval.min_score,
            max_context_length=cfg.retrieval.max_context_length,
            include_metadata=cfg.retrieval.include_metadata,
        ),
    )

    overrides: dict[str, object] = {}
    if top_k is not None:
        overrides["top_k"] = int(top_k)
    if min_score is not None:
        overrides["min_score"] = float(min_score)
    result = retriever.retrieve(query, **overrides)

    if as_json:
        payload = {
            "query": result.query,
            "documents": [
                {
                    "id": r.document.id,
                    "score": r.score,
                    "distance": r.distance,
                    "metadata": dict(r.document.metadata or {}),
                    "content": r.document.content,
                }
                for r in result.documents
            ],
            "context": result.context,
            "token_estimate": result.token_estimate,
        }
        print(json.dumps(payload, ensure_ascii=False, indent=2))
        return

    for i, r in enumerate(result.documents, start=1):
        print(f"[{i}] score={r.score:.4f} id={r.document.id}")
    print("-" * 10 + "context" + "-" * 10)
    print(result.context)
    print("-" * 10 + f"~{result.token_estimate} tokens" + "-" * 10)


def _cmd_stats(cfg: AppConfig) -> None:
    store = _build_store(cfg, dimensions=cfg.embeddings.dimensions)
    print(f"向量库文档数: {store.size()}")


def _build_embedder(cfg: AppConfig) -> EmbeddingProvider:
    return create_embedding_provider(
        cfg.embeddings.provider,
        model=cfg.embeddings.model,
        dimensions=cfg.embeddings.dimensions,
    )


def _build_store(cfg: AppConfig, *, dimensions: int) -> VectorStore:
    store_cfg = VectorStoreConfig(
        dimensions=int(dimensions),
        similarity_metric=cfg.vector_store.similarity_metric,
        max_documents=cfg.vector_store.max_documents,
    )
    provider = cfg.vector_store.provider.lower().strip()
    if provider == "persistent":
        storage = FileKeyValueStorage(cfg.resolve_path(cfg.vector_store.persist_path))
        return create_vector_store(
            "persistent", store_cfg, storage=storage, storage_key=cfg.vector_store.storage_key
        )
    return create_vector_store(provider, store_cfg)
