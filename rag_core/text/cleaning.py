from __future__ import annotations

import re
import unicodedata
from typing import Optional


_CODE_BLOCK_RE = re.compile(r"```[\s\S]*?```")
_URL_RE = re.compile(r"https?://[^\s]+")
_CONTROL_CHARS_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")
_HORIZONTAL_WS_RE = re.compile(r"[ \t]+")
_BLANK_LINES_RE = re.compile(r"\n{3,}")

_ASCII_REPLACEMENTS = (
    (re.compile(r"[“”]"), '"'),
    (re.compile(r"[‘’]"), "'"),
    (re.compile(r"[–—]"), "-"),
    (re.compile(r"…"), "..."),
    (re.compile(r"•"), "*"),
)

_REDACTIONS = (
    (re.compile(r"(?:api[_-]?key|apikey|secret|token)[:\s=]+['\"]?[\w-]{20,}['\"]?", re.IGNORECASE), "[REDACTED_API_KEY]"),
    (re.compile(r"\b[\w.-]+@[\w.-]+\.\w{2,}\b"), "[REDACTED_EMAIL]"),
    (re.compile(r"\b\d{4}[-\s]?\d{4}[-\s]?\d{4}[-\s]?\d{4}\b"), "[REDACTED_CARD]"),
    (re.compile(r"\b\d{3}[-.]?\d{3}[-.]?\d{4}\b"), "[REDACTED_PHONE]"),
    (re.compile(r"\b\d{3}-?\d{2}-?\d{4}\b"), "[REDACTED_SSN]"),
)

_HTML_ENTITIES = (
    ("&nbsp;", " "),
    ("&lt;", "<"),
    ("&gt;", ">"),
    ("&quot;", '"'),
    ("&#39;", "'"),
    ("&amp;", "&"),
)


def clean_text(
    text: str,
    *,
    remove_extra_whitespace: bool = True,
    normalize_unicode: bool = True,
    remove_control_chars: bool = True,
    preserve_code_blocks: bool = True,
    preserve_urls: bool = True,
    truncate_length: Optional[int] = None,
) -> str:
    """Normalize raw text before chunking.

    Fenced code blocks and URLs are swapped for placeholders while the
    whitespace and unicode passes run, then restored verbatim.
    """
    result = text

    code_blocks: list[str] = []
    if preserve_code_blocks:
        result = _CODE_BLOCK_RE.sub(lambda m: _stash(code_blocks, m.group(0), "CODE_BLOCK"), result)

    urls: list[str] = []
    if preserve_urls:
        result = _URL_RE.sub(lambda m: _stash(urls, m.group(0), "URL"), result)

    if remove_control_chars:
        result = _CONTROL_CHARS_RE.sub("", result)

    if normalize_unicode:
        result = unicodedata.normalize("NFKC", result)
        for pattern, repl in _ASCII_REPLACEMENTS:
            result = pattern.sub(repl, result)

    if remove_extra_whitespace:
        result = _HORIZONTAL_WS_RE.sub(" ", result)
        result = _BLANK_LINES_RE.sub("\n\n", result)
        result = "\n".join(line.strip() for line in result.split("\n"))

    for i, url in enumerate(urls):
        result = result.replace(f"__URL_{i}__", url, 1)
    for i, block in enumerate(code_blocks):
        result = result.replace(f"__CODE_BLOCK_{i}__", block, 1)

    if truncate_length and len(result) > truncate_length:
        result = result[:truncate_length] + "..."

    return result.strip()


def _stash(store: list[str], value: str, label: str) -> str:
    store.append(value)
    return f"__{label}_{len(store) - 1}__"


def sanitize_text(text: str) -> str:
    result = text
    for pattern, repl in _REDACTIONS:
        result = pattern.sub(repl, result)
    return result


def strip_html(html: str) -> str:
    text = re.sub(r"<script\b[^<]*(?:(?!</script>)<[^<]*)*</script>", "", html, flags=re.IGNORECASE)
    text = re.sub(r"<style\b[^<]*(?:(?!</style>)<[^<]*)*</style>", "", text, flags=re.IGNORECASE)
    text = re.sub(r"</(p|div|h[1-6]|li|tr)>", "\n", text, flags=re.IGNORECASE)
    text = re.sub(r"<br\s*/?>", "\n", text, flags=re.IGNORECASE)
    text = re.sub(r"<[^>]+>", "", text)
    for entity, repl in _HTML_ENTITIES:
        text = text.replace(entity, repl)
    return clean_text(text)
