from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Protocol, Sequence

from ..errors import ConfigurationError


_PUNCTUATION = frozenset(".,!?;:'\"()[]{}")
_ELLIPSIS = "..."

# Substring of the model id -> multiplier applied to the heuristic count.
MODEL_FAMILY_MULTIPLIERS: tuple[tuple[str, float], ...] = (
    ("claude", 1.10),
    ("gemini", 0.95),
)


class TokenCounter(Protocol):
    def count(self, text: str) -> int:
        raise NotImplementedError

    def truncate(self, text: str, max_tokens: int) -> str:
        raise NotImplementedError

    def split(self, text: str, max_tokens: int) -> list[str]:
        raise NotImplementedError


def _check_budget(max_tokens: int) -> int:
    if int(max_tokens) <= 0:
        raise ConfigurationError(f"max_tokens 必须大于 0: {max_tokens}")
    return int(max_tokens)


class HeuristicTokenCounter:
    """Word/punctuation based estimate of a BPE tokenizer.

    One token per whitespace-delimited word, half a token per punctuation
    character, and ``len(word) // 5`` extra tokens for words longer than ten
    characters. The estimate is monotone in prefix length, which is what the
    binary search in ``truncate`` relies on.
    """

    def count(self, text: str) -> int:
        words = text.split()
        tokens = float(len(words))
        tokens += 0.5 * sum(1 for ch in text if ch in _PUNCTUATION)
        tokens += sum(len(w) // 5 for w in words if len(w) > 10)
        return math.ceil(tokens)

    def truncate(self, text: str, max_tokens: int) -> str:
        max_tokens = _check_budget(max_tokens)
        if self.count(text) <= max_tokens:
            return text

        low, high = 0, len(text)
        while high - low > 10:
            mid = (low + high) // 2
            if self.count(text[:mid]) <= max_tokens:
                low = mid
            else:
                high = mid

        truncated = text[:low]
        last_sentence = truncated.rfind(". ")
        if last_sentence > low * 0.7:
            return truncated[: last_sentence + 1].strip()

        last_space = truncated.rfind(" ")
        if last_space > low * 0.9:
            return truncated[:last_space].strip()

        return truncated.strip()

    def split(self, text: str, max_tokens: int) -> list[str]:
        max_tokens = _check_budget(max_tokens)
        parts: list[str] = []
        remaining = text.strip()

        while remaining:
            if self.count(remaining) <= max_tokens:
                parts.append(remaining)
                break

            part = self.truncate(remaining, max_tokens)
            if not part:
                part = self._hard_prefix(remaining, max_tokens)
            parts.append(part)
            remaining = remaining[len(part) :].strip()

        return parts

    def _hard_prefix(self, text: str, max_tokens: int) -> str:
        # The binary search can bottom out at zero characters when the first
        # word alone is over budget; fall back to the longest fitting prefix.
        if self.count(text[:1]) > max_tokens:
            raise ConfigurationError(f"max_tokens={max_tokens} 容不下单个字符 {text[:1]!r}")
        n = 1
        while n < len(text) and self.count(text[: n + 1]) <= max_tokens:
            n += 1
        return text[:n]


class SimpleTokenCounter:
    def __init__(self, chars_per_token: int = 4):
        if int(chars_per_token) <= 0:
            raise ConfigurationError(f"chars_per_token 必须大于 0: {chars_per_token}")
        self._chars_per_token = int(chars_per_token)

    def count(self, text: str) -> int:
        return math.ceil(len(text) / self._chars_per_token)

    def truncate(self, text: str, max_tokens: int) -> str:
        max_chars = _check_budget(max_tokens) * self._chars_per_token
        if len(text) <= max_chars:
            return text

        truncated = text[:max_chars]
        last_sentence = truncated.rfind(". ")
        if last_sentence > max_chars * 0.7:
            return truncated[: last_sentence + 1]

        # The marker counts against the budget too.
        cut = max_chars - len(_ELLIPSIS)
        if cut <= 0:
            return truncated
        truncated = text[:cut]

        last_space = truncated.rfind(" ")
        if last_space > cut * 0.9:
            return truncated[:last_space] + _ELLIPSIS

        return truncated + _ELLIPSIS

    def split(self, text: str, max_tokens: int) -> list[str]:
        max_chars = _check_budget(max_tokens) * self._chars_per_token
        parts: list[str] = []
        remaining = text

        while remaining:
            if len(remaining) <= max_chars:
                parts.append(remaining)
                break

            window = remaining[:max_chars]
            split_point = max_chars
            last_sentence = window.rfind(". ")
            if last_sentence > max_chars * 0.5:
                split_point = last_sentence + 1
            else:
                last_space = window.rfind(" ")
                if last_space > max_chars * 0.7:
                    split_point = last_space

            parts.append(remaining[:split_point].strip())
            remaining = remaining[split_point:].strip()

        return parts


def create_token_counter(kind: str = "heuristic") -> TokenCounter:
    key = str(kind).lower().strip()
    if key in {"heuristic", "gpt"}:
        return HeuristicTokenCounter()
    if key == "simple":
        return SimpleTokenCounter()
    raise ConfigurationError(f"不支持的 token counter: {kind}")


def model_multiplier(model: str) -> float:
    key = str(model).lower()
    for family, multiplier in MODEL_FAMILY_MULTIPLIERS:
        if family in key:
            return multiplier
    return 1.0


def estimate_tokens(text: str, model: str = "gpt-4") -> int:
    base = HeuristicTokenCounter().count(text)
    return math.ceil(round(base * model_multiplier(model), 6))


@dataclass(frozen=True)
class ContextUsage:
    used: int
    remaining: int
    percent_used: float


def calculate_context_usage(system_prompt: str, messages: Sequence[str], max_context: int) -> ContextUsage:
    if int(max_context) <= 0:
        raise ConfigurationError(f"max_context 必须大于 0: {max_context}")
    counter = HeuristicTokenCounter()
    used = counter.count(system_prompt) + sum(counter.count(m) for m in messages)
    return ContextUsage(
        used=used,
        remaining=max(0, int(max_context) - used),
        percent_used=used / int(max_context) * 100,
    )
