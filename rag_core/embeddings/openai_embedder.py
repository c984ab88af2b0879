from __future__ import annotations

import importlib
from typing import Any, Optional, Sequence

from ..config import get_env
from ..errors import ConfigurationError, DependencyNotInstalledError, ProviderError
from ..logger import get_logger
from ..types import EmbeddingResult

logger = get_logger(__name__)


class OpenAIEmbeddingProvider:
    def __init__(
        self,
        *,
        model: str = "text-embedding-3-small",
        dimensions: int = 1536,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        client: Any = None,
    ):
        if int(dimensions) <= 0:
            raise ConfigurationError(f"dimensions 必须大于 0: {dimensions}")
        self._model = model
        self._dimensions = int(dimensions)
        self._client = client if client is not None else _create_openai_client(api_key=api_key, base_url=base_url)

    @property
    def model(self) -> str:
        return self._model

    @property
    def dimensions(self) -> int:
        return self._dimensions

    def embed(self, text: str) -> EmbeddingResult:
        return self.embed_batch([text])[0]

    def embed_batch(self, texts: Sequence[str]) -> list[EmbeddingResult]:
        inputs = list(texts)
        if not inputs:
            return []

        openai = _import_openai()
        try:
            response = self._client.embeddings.create(
                model=self._model, input=inputs, dimensions=self._dimensions
            )
        except openai.APIStatusError as e:
            raise ProviderError("OpenAI embedding 请求失败", status_code=int(e.status_code)) from e
        except openai.OpenAIError as e:
            raise ProviderError(f"OpenAI embedding 请求失败: {e}") from e

        data = sorted(response.data, key=lambda x: int(getattr(x, "index", 0)))
        if len(data) != len(inputs):
            raise ProviderError(f"OpenAI embedding 返回数量不一致: 期望 {len(inputs)}, 实际 {len(data)}")

        results: list[EmbeddingResult] = []
        for text, item in zip(inputs, data):
            vector = [float(x) for x in item.embedding]
            if len(vector) != self._dimensions:
                raise ProviderError(
                    f"OpenAI embedding 维度不一致: 期望 {self._dimensions}, 实际 {len(vector)}"
                )
            results.append(EmbeddingResult(embedding=vector, text=text, model=self._model, dimensions=len(vector)))

        logger.debug("Embedded %d texts with %s", len(results), self._model)
        return results


def _import_openai():
    try:
        return importlib.import_module("openai")
    except Exception as e:
        raise DependencyNotInstalledError("缺少可选依赖: openai，请安装 extra: openai") from e


def _create_openai_client(*, api_key: Optional[str], base_url: Optional[str]):
    api_key = api_key or get_env("OPENAI_API_KEY")
    if not api_key:
        raise ConfigurationError("缺少 OpenAI API key（参数 api_key 或环境变量 OPENAI_API_KEY）")

    openai = _import_openai()
    base_url = base_url or get_env("OPENAI_BASE_URL")
    if base_url:
        return openai.OpenAI(api_key=api_key, base_url=base_url)
    return openai.OpenAI(api_key=api_key)
