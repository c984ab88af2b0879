"""
Tests for the in-memory vector store: dimension checks, capacity eviction,
search ranking, filters and export/import.
"""

import threading

import pytest

from rag_core.errors import ConfigurationError, DimensionMismatchError
from rag_core.types import VectorDocument, VectorStoreConfig
from rag_core.vectorstores import InMemoryVectorStore, PersistentVectorStore, create_vector_store


def _doc(doc_id: str, embedding, content: str = "", metadata=None) -> VectorDocument:
    return VectorDocument(id=doc_id, content=content or doc_id, embedding=list(embedding), metadata=metadata)


class TestVectorStoreConfig:
    @pytest.mark.parametrize(
        "kwargs",
        [{"dimensions": 0}, {"similarity_metric": "manhattan"}, {"max_documents": 0}],
    )
    def test_invalid_config(self, kwargs) -> None:
        with pytest.raises(ConfigurationError):
            VectorStoreConfig(**kwargs)


class TestAddAndGet:
    def test_add_stamps_created_at(self, store) -> None:
        store.add(_doc("doc1", [0.1, 0.2, 0.3], "Test content"))

        doc = store.get("doc1")

        assert store.size() == 1
        assert doc is not None
        assert doc.content == "Test content"
        assert doc.created_at is not None
        assert doc.created_at.tzinfo is not None

    def test_get_missing_returns_none(self, store) -> None:
        assert store.get("nope") is None

    def test_dimension_mismatch_leaves_store_unchanged(self, store) -> None:
        store.add(_doc("doc1", [0.1, 0.2, 0.3]))

        with pytest.raises(DimensionMismatchError) as exc_info:
            store.add(_doc("doc2", [0.1, 0.2]))

        assert exc_info.value.expected == 3
        assert exc_info.value.actual == 2
        assert store.size() == 1

    def test_readding_same_id_overwrites(self, store) -> None:
        store.add(_doc("doc1", [0.1, 0.2, 0.3], "old"))
        store.add(_doc("doc1", [0.3, 0.2, 0.1], "new"))

        assert store.size() == 1
        assert store.get("doc1").content == "new"

    def test_add_batch_keeps_documents_before_failure(self, store) -> None:
        docs = [_doc("a", [1, 0, 0]), _doc("b", [0, 1, 0]), _doc("bad", [1, 0]), _doc("c", [0, 0, 1])]

        with pytest.raises(DimensionMismatchError):
            store.add_batch(docs)

        assert store.size() == 2
        assert "a" in store and "b" in store
        assert "c" not in store


class TestCapacityEviction:
    def test_oldest_document_is_evicted(self) -> None:
        limited = InMemoryVectorStore(VectorStoreConfig(dimensions=3, max_documents=2))

        limited.add(_doc("doc1", [0.1, 0.2, 0.3]))
        limited.add(_doc("doc2", [0.4, 0.5, 0.6]))
        limited.add(_doc("doc3", [0.7, 0.8, 0.9]))

        assert limited.size() == 2
        assert {d.id for d in limited.export()} == {"doc2", "doc3"}

    def test_overwrite_at_capacity_does_not_evict(self) -> None:
        limited = InMemoryVectorStore(VectorStoreConfig(dimensions=3, max_documents=2))
        limited.add(_doc("doc1", [0.1, 0.2, 0.3]))
        limited.add(_doc("doc2", [0.4, 0.5, 0.6]))

        limited.add(_doc("doc1", [0.9, 0.9, 0.9], "updated"))

        assert {d.id for d in limited.export()} == {"doc1", "doc2"}

    def test_overwrite_refreshes_age(self) -> None:
        limited = InMemoryVectorStore(VectorStoreConfig(dimensions=3, max_documents=2))
        limited.add(_doc("doc1", [0.1, 0.2, 0.3]))
        limited.add(_doc("doc2", [0.4, 0.5, 0.6]))
        limited.add(_doc("doc1", [0.1, 0.2, 0.3]))

        limited.add(_doc("doc3", [0.7, 0.8, 0.9]))

        assert {d.id for d in limited.export()} == {"doc1", "doc3"}

    def test_import_may_exceed_capacity(self) -> None:
        limited = InMemoryVectorStore(VectorStoreConfig(dimensions=3, max_documents=2))

        limited.import_documents([_doc(f"d{i}", [0.1, 0.2, 0.3]) for i in range(4)])
        assert limited.size() == 4

        limited.add(_doc("new", [0.1, 0.2, 0.3]))
        assert limited.size() == 4
        assert "d0" not in limited


class TestSearch:
    def test_ranks_by_cosine_similarity(self, store) -> None:
        store.add_batch([_doc("doc1", [0.9, 0.1, 0.0]), _doc("doc2", [0.0, 0.1, 0.9])])

        results = store.search([1.0, 0.0, 0.0], top_k=2)

        assert [r.document.id for r in results] == ["doc1", "doc2"]
        assert results[0].score > results[1].score
        assert results[0].distance is None

    def test_euclidean_scores_convert_distance(self) -> None:
        euclid = InMemoryVectorStore(VectorStoreConfig(dimensions=3, similarity_metric="euclidean"))
        euclid.add(_doc("near", [1.0, 0.0, 0.0]))
        euclid.add(_doc("far", [4.0, 4.0, 0.0]))

        results = euclid.search([1.0, 0.0, 0.0], top_k=5)

        assert [r.document.id for r in results] == ["near", "far"]
        assert results[0].score == pytest.approx(1.0)
        assert results[0].distance == pytest.approx(0.0)
        assert results[1].distance == pytest.approx(5.0)
        assert results[1].score == pytest.approx(1 / 6)

    def test_top_k_limits_results(self, store) -> None:
        store.add_batch([_doc(f"d{i}", [1.0, float(i), 0.0]) for i in range(5)])

        assert len(store.search([1.0, 0.0, 0.0], top_k=3)) == 3
        assert store.search([1.0, 0.0, 0.0], top_k=0) == []

    def test_filter_skips_documents(self, store) -> None:
        store.add_batch(
            [
                _doc("doc1", [0.9, 0.1, 0.0], "Keep", {"keep": True}),
                _doc("doc2", [0.8, 0.2, 0.0], "Skip", {"keep": False}),
            ]
        )

        results = store.search([1.0, 0.0, 0.0], top_k=10, filter=lambda d: d.metadata["keep"])

        assert [r.document.id for r in results] == ["doc1"]

    def test_empty_store_returns_empty_list(self, store) -> None:
        assert store.search([1.0, 0.0, 0.0]) == []

    def test_query_dimension_mismatch(self, store) -> None:
        with pytest.raises(DimensionMismatchError):
            store.search([1.0, 0.0])

    def test_imported_document_with_wrong_length_fails_search(self, store) -> None:
        store.import_documents([_doc("short", [1.0, 0.0])])

        with pytest.raises(DimensionMismatchError):
            store.search([1.0, 0.0, 0.0])

    def test_zero_vector_document_scores_zero(self, store) -> None:
        store.add(_doc("zero", [0.0, 0.0, 0.0]))

        results = store.search([1.0, 0.0, 0.0])

        assert results[0].score == 0.0

    def test_ties_keep_insertion_order(self, store) -> None:
        store.add_batch([_doc("first", [1.0, 0.0, 0.0]), _doc("second", [2.0, 0.0, 0.0])])

        results = store.search([1.0, 0.0, 0.0], top_k=2)

        assert [r.document.id for r in results] == ["first", "second"]


class TestDeleteClearExportImport:
    def test_delete(self, store) -> None:
        store.add(_doc("doc1", [0.1, 0.2, 0.3]))

        assert store.delete("doc1") is True
        assert store.delete("doc1") is False
        assert store.size() == 0

    def test_clear(self, store) -> None:
        store.add_batch([_doc("doc1", [0.1, 0.2, 0.3]), _doc("doc2", [0.4, 0.5, 0.6])])

        store.clear()

        assert store.size() == 0
        assert len(store) == 0

    def test_export_import_round_trip(self, store) -> None:
        store.add_batch([_doc("doc1", [0.1, 0.2, 0.3], "Test 1"), _doc("doc2", [0.4, 0.5, 0.6], "Test 2")])

        exported = store.export()
        fresh = InMemoryVectorStore(VectorStoreConfig(dimensions=3))
        fresh.import_documents(exported)

        assert fresh.size() == store.size()
        for doc in exported:
            copy = fresh.get(doc.id)
            assert copy.content == doc.content
            assert copy.embedding == doc.embedding


class TestRecordIsolation:
    def test_exported_records_do_not_alias_store_state(self, store) -> None:
        store.add(_doc("doc1", [0.1, 0.2, 0.3], metadata={"tag": "a"}))

        exported = store.export()[0]
        exported.embedding[0] = 99.0
        exported.metadata["tag"] = "changed"

        kept = store.get("doc1")
        assert kept.embedding == [0.1, 0.2, 0.3]
        assert kept.metadata == {"tag": "a"}

    def test_imported_records_are_copied(self, store) -> None:
        embedding, metadata = [0.1, 0.2, 0.3], {"tag": "a"}
        store.import_documents([VectorDocument(id="doc1", content="c", embedding=embedding, metadata=metadata)])

        embedding.append(1.0)
        metadata["tag"] = "changed"

        kept = store.get("doc1")
        assert kept.embedding == [0.1, 0.2, 0.3]
        assert kept.metadata == {"tag": "a"}

    def test_two_stores_sharing_an_export_stay_independent(self, store) -> None:
        store.add(_doc("doc1", [0.1, 0.2, 0.3], metadata={"tag": "a"}))
        other = InMemoryVectorStore(VectorStoreConfig(dimensions=3))
        other.import_documents(store.export())

        other.get("doc1").metadata["tag"] = "changed"
        other.export()[0].embedding[1] = 5.0

        assert store.get("doc1").metadata == {"tag": "a"}
        assert other.get("doc1").embedding == [0.1, 0.2, 0.3]


class TestConcurrentAdds:
    def test_threads_respect_capacity(self) -> None:
        limited = InMemoryVectorStore(VectorStoreConfig(dimensions=3, max_documents=50))

        def worker(offset: int) -> None:
            for i in range(100):
                limited.add(_doc(f"t{offset}-{i}", [1.0, 0.0, 0.0]))

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert limited.size() == 50


class TestCreateVectorStore:
    def test_memory_by_default(self) -> None:
        assert isinstance(create_vector_store(), InMemoryVectorStore)

    def test_persistent_with_storage(self, kv_storage) -> None:
        created = create_vector_store(
            "persistent", VectorStoreConfig(dimensions=3), storage=kv_storage, storage_key="vectors"
        )

        assert isinstance(created, PersistentVectorStore)

    def test_persistent_without_storage_falls_back_to_memory(self) -> None:
        created = create_vector_store("persistent", VectorStoreConfig(dimensions=3))

        assert type(created) is InMemoryVectorStore

    def test_unknown_kind(self) -> None:
        with pytest.raises(ConfigurationError):
            create_vector_store("faiss")
