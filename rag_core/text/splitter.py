from __future__ import annotations

import re
from dataclasses import dataclass, replace
from typing import Any, Optional, Sequence

from ..errors import ConfigurationError
from ..types import TextChunk


DEFAULT_SEPARATORS: tuple[str, ...] = ("\n\n", "\n", ". ", ", ", " ")

_SENTENCE_RE = re.compile(r"[^.!?]*[.!?]+|[^.!?]+$")

_CODE_KEYWORDS = r"(?:export\s+)?(?:async\s+def|def|class|function|const|let|var|interface|type)\s+\w+"
_CODE_BLOCK_RE = re.compile(
    r"(?:^|\n)(" + _CODE_KEYWORDS + r"[\s\S]*?)(?=\n" + _CODE_KEYWORDS + r"|\Z)"
)


@dataclass(frozen=True)
class ChunkConfig:
    max_chunk_size: int = 1000
    chunk_overlap: int = 200
    separators: tuple[str, ...] = DEFAULT_SEPARATORS
    # Not used by the splitter; carried for callers that render chunks.
    preserve_structure: bool = True

    def __post_init__(self) -> None:
        if int(self.max_chunk_size) <= 0:
            raise ConfigurationError(f"max_chunk_size 必须大于 0: {self.max_chunk_size}")
        if int(self.chunk_overlap) < 0:
            raise ConfigurationError(f"chunk_overlap 不能为负数: {self.chunk_overlap}")
        if int(self.chunk_overlap) >= int(self.max_chunk_size):
            raise ConfigurationError(
                f"chunk_overlap ({self.chunk_overlap}) 必须小于 max_chunk_size ({self.max_chunk_size})"
            )
        if any(not s for s in self.separators):
            raise ConfigurationError("separators 中不能包含空字符串")
        object.__setattr__(self, "separators", tuple(self.separators))


def _resolve_config(config: Optional[ChunkConfig], overrides: dict[str, Any]) -> ChunkConfig:
    cfg = config or ChunkConfig()
    if config is None and "max_chunk_size" in overrides and "chunk_overlap" not in overrides:
        # The default overlap belongs to the default window; shrink it with the window.
        overrides = {**overrides, "chunk_overlap": min(cfg.chunk_overlap, int(overrides["max_chunk_size"]) // 5)}
    if overrides:
        cfg = replace(cfg, **overrides)
    return cfg


def chunk_text(text: str, config: Optional[ChunkConfig] = None, **overrides: Any) -> list[TextChunk]:
    """Split ``text`` recursively on progressively finer separators.

    Each unit after the first is prefixed with the last ``chunk_overlap``
    characters of the previous raw unit. ``start_offset``/``end_offset``
    describe the raw, non-overlapping units, not the prefixed content.
    """
    cfg = _resolve_config(config, overrides)
    raw_units = _split_recursively(text, list(cfg.separators), cfg)

    chunks: list[TextChunk] = []
    offset = 0
    for i, raw in enumerate(raw_units):
        content = raw
        if i > 0 and cfg.chunk_overlap > 0:
            content = raw_units[i - 1][-cfg.chunk_overlap:] + content

        start = offset
        offset += len(raw)

        content = content.strip()
        if not content:
            continue
        chunks.append(TextChunk(content=content, index=len(chunks), start_offset=start, end_offset=offset))

    return chunks


def _split_recursively(text: str, separators: list[str], cfg: ChunkConfig) -> list[str]:
    if len(text) <= cfg.max_chunk_size:
        return [text]

    if not separators:
        stride = cfg.max_chunk_size - cfg.chunk_overlap
        return [text[i : i + cfg.max_chunk_size] for i in range(0, len(text), stride)]

    separator, finer = separators[0], separators[1:]
    result: list[str] = []
    current = ""
    for part in text.split(separator):
        candidate = f"{current}{separator}{part}" if current else part
        if len(candidate) <= cfg.max_chunk_size:
            current = candidate
            continue

        if current:
            result.append(current)
        if len(part) > cfg.max_chunk_size:
            result.extend(_split_recursively(part, finer, cfg))
            current = ""
        else:
            current = part

    if current:
        result.append(current)
    return result


def split_sentences(text: str) -> list[str]:
    parts = _SENTENCE_RE.findall(text)
    return [p.strip() for p in parts if p and p.strip()]


def chunk_by_sentences(text: str, sentences_per_chunk: int = 5) -> list[TextChunk]:
    if int(sentences_per_chunk) <= 0:
        raise ConfigurationError(f"sentences_per_chunk 必须大于 0: {sentences_per_chunk}")

    sentences = split_sentences(text)
    chunks: list[TextChunk] = []
    offset = 0
    for i in range(0, len(sentences), sentences_per_chunk):
        content = " ".join(sentences[i : i + sentences_per_chunk])
        chunks.append(
            TextChunk(content=content, index=len(chunks), start_offset=offset, end_offset=offset + len(content))
        )
        offset += len(content) + 1
    return chunks


def chunk_code(code: str, config: Optional[ChunkConfig] = None, **overrides: Any) -> list[TextChunk]:
    cfg = _resolve_config(config, overrides)

    chunks: list[TextChunk] = []
    for match in _CODE_BLOCK_RE.finditer(code):
        content = match.group(1).strip()
        if not content:
            continue
        start = match.start(1)

        if len(content) <= cfg.max_chunk_size:
            chunks.append(
                TextChunk(
                    content=content,
                    index=len(chunks),
                    start_offset=start,
                    end_offset=start + len(content),
                    metadata={"type": "code"},
                )
            )
            continue

        for sub in chunk_text(content, cfg):
            chunks.append(
                replace(
                    sub,
                    index=len(chunks),
                    start_offset=start + sub.start_offset,
                    end_offset=start + sub.end_offset,
                    metadata={"type": "code"},
                )
            )

    if not chunks:
        return chunk_text(code, cfg)
    return chunks


def merge_small_chunks(chunks: Sequence[TextChunk], min_size: int = 100) -> list[TextChunk]:
    merged: list[TextChunk] = []
    current: Optional[TextChunk] = None

    for chunk in chunks:
        if current is None:
            current = chunk
            continue

        if len(current.content) < min_size:
            current = replace(
                current,
                content=f"{current.content}\n\n{chunk.content}",
                end_offset=chunk.end_offset,
            )
        else:
            merged.append(replace(current, index=len(merged)))
            current = chunk

    if current is not None:
        merged.append(replace(current, index=len(merged)))
    return merged
