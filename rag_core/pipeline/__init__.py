from .indexing import Indexer, new_document_id
from .rag import ComponentRegistry, RAGSystem, create_rag_system
from .retrieval import RetrievalConfig, Retriever, build_context, format_document

__all__ = [
    "ComponentRegistry",
    "Indexer",
    "RAGSystem",
    "RetrievalConfig",
    "Retriever",
    "build_context",
    "create_rag_system",
    "format_document",
    "new_document_id",
]
