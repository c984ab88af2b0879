from .cleaning import clean_text, sanitize_text, strip_html
from .splitter import ChunkConfig, chunk_by_sentences, chunk_code, chunk_text, merge_small_chunks, split_sentences
from .tokens import (
    HeuristicTokenCounter,
    SimpleTokenCounter,
    TokenCounter,
    calculate_context_usage,
    create_token_counter,
    estimate_tokens,
)

__all__ = [
    "ChunkConfig",
    "HeuristicTokenCounter",
    "SimpleTokenCounter",
    "TokenCounter",
    "calculate_context_usage",
    "chunk_by_sentences",
    "chunk_code",
    "chunk_text",
    "clean_text",
    "create_token_counter",
    "estimate_tokens",
    "merge_small_chunks",
    "sanitize_text",
    "split_sentences",
    "strip_html",
]
