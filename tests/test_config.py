"""
Tests for JSON config loading, defaults and validation.
"""

import json
from pathlib import Path

import pytest

from rag_core.config import default_config, get_env, load_config, parse_config
from rag_core.errors import ConfigurationError


def _write(path: Path, payload) -> Path:
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


class TestLoadConfig:
    def test_reads_sections_and_fills_defaults(self, tmp_path) -> None:
        path = _write(
            tmp_path / "app.json",
            {
                "chunking": {"max_chunk_size": 500, "chunk_overlap": 50},
                "embeddings": {"provider": "openai", "model": "text-embedding-3-small", "dimensions": 1536},
                "retrieval": {"top_k": 3},
            },
        )

        cfg = load_config(str(path))

        assert cfg.chunking.max_chunk_size == 500
        assert cfg.chunking.separators == ("\n\n", "\n", ". ", ", ", " ")
        assert cfg.embeddings.provider == "openai"
        assert cfg.embeddings.dimensions == 1536
        assert cfg.retrieval.top_k == 3
        assert cfg.retrieval.min_score == 0.5
        assert cfg.vector_store.max_documents is None

    def test_relative_paths_resolve_against_config_dir(self, tmp_path) -> None:
        path = _write(tmp_path / "app.json", {"vector_store": {"persist_path": "store"}})

        cfg = load_config(str(path))

        assert cfg.base_dir == tmp_path
        assert Path(cfg.resolve_path(cfg.vector_store.persist_path)) == (tmp_path / "store").resolve()
        assert cfg.resolve_path(str(tmp_path)) == str(tmp_path)

    def test_missing_file(self, tmp_path) -> None:
        with pytest.raises(ConfigurationError):
            load_config(str(tmp_path / "nope.json"))

    def test_invalid_json(self, tmp_path) -> None:
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(ConfigurationError):
            load_config(str(path))

    def test_top_level_must_be_object(self, tmp_path) -> None:
        with pytest.raises(ConfigurationError):
            load_config(str(_write(tmp_path / "list.json", [1, 2])))


class TestParseConfig:
    @pytest.mark.parametrize(
        "raw",
        [
            {"chunking": {"max_chunk_size": 100, "chunk_overlap": 100}},
            {"chunking": {"max_chunk_size": 0}},
            {"embeddings": {"dimensions": 0}},
            {"vector_store": {"similarity_metric": "dot"}},
            {"vector_store": {"max_documents": 0}},
            {"retrieval": {"top_k": -1}},
            {"retrieval": {"top_k": "many"}},
        ],
    )
    def test_rejects_invalid_values(self, raw, tmp_path) -> None:
        with pytest.raises(ConfigurationError):
            parse_config(raw, base_dir=tmp_path)

    def test_log_level_falls_back_to_env(self, monkeypatch, tmp_path) -> None:
        monkeypatch.setenv("RAG_CORE_LOG_LEVEL", "DEBUG")

        assert default_config(tmp_path).logging.level == "DEBUG"

    def test_defaults(self, monkeypatch, tmp_path) -> None:
        monkeypatch.delenv("RAG_CORE_LOG_LEVEL", raising=False)

        cfg = default_config(tmp_path)

        assert cfg.embeddings.provider == "local"
        assert cfg.embeddings.dimensions == 512
        assert cfg.vector_store.provider == "persistent"
        assert cfg.logging.level == "INFO"


def test_get_env_treats_empty_as_missing(monkeypatch) -> None:
    monkeypatch.setenv("RAG_CORE_TEST_VALUE", "")

    assert get_env("RAG_CORE_TEST_VALUE", "fallback") == "fallback"
