"""Tests for the full-text search index and the index batcher."""

from unittest.mock import MagicMock

from regsync.indexer import IndexBatcher


def fields_for(number, text="EPA approves the Ohio state implementation plan", **overrides):
    fields = {"document_number": number, "title": f"Air Quality Plans {number}", "abstract": None, "text": text}
    fields.update(overrides)
    return fields


class TestSearchIndex:
    def test_bulk_upsert_and_get(self, tmp_index):
        success, errors = tmp_index.bulk_upsert([("regulations", "2013-00001", fields_for("2013-00001"))])
        assert (success, errors) == (1, [])
        assert tmp_index.get("regulations", "2013-00001")["title"] == "Air Quality Plans 2013-00001"

    def test_upsert_overwrites(self, tmp_index):
        tmp_index.bulk_upsert([("regulations", "2013-00001", fields_for("2013-00001", text="first"))])
        tmp_index.bulk_upsert([("regulations", "2013-00001", fields_for("2013-00001", text="second"))])
        assert tmp_index.count("regulations") == 1
        assert tmp_index.get("regulations", "2013-00001")["text"] == "second"
        assert tmp_index.search("regulations", "first") == []

    def test_indexes_are_separate(self, tmp_index):
        tmp_index.bulk_upsert([("regulations", "2013-00001", fields_for("2013-00001"))])
        assert tmp_index.count("other") == 0
        assert tmp_index.get("other", "2013-00001") is None

    def test_search(self, tmp_index):
        tmp_index.bulk_upsert([
            ("regulations", "2013-00001", fields_for("2013-00001")),
            ("regulations", "2013-00002", fields_for("2013-00002", text="Fisheries of the Gulf of Alaska")),
        ])
        results = tmp_index.search("regulations", "implementation")
        assert [r["document_number"] for r in results] == ["2013-00001"]
        assert "text" not in results[0]
        assert "[implementation]" in results[0]["excerpt"]

    def test_unserializable_fields_reported(self, tmp_index):
        success, errors = tmp_index.bulk_upsert([
            ("regulations", "2013-00001", fields_for("2013-00001")),
            ("regulations", "2013-00002", {"text": object()}),
        ])
        assert success == 1
        assert [e["doc_id"] for e in errors] == ["2013-00002"]


class TestIndexBatcher:
    def test_flushes_when_full(self, tmp_index):
        batcher = IndexBatcher(tmp_index, batch_size=2)
        batcher.add("regulations", "2013-00001", fields_for("2013-00001"))
        assert len(batcher.pending) == 1
        assert tmp_index.count("regulations") == 0

        batcher.add("regulations", "2013-00002", fields_for("2013-00002"))
        assert batcher.pending == []
        assert tmp_index.count("regulations") == 2
        assert batcher.indexed == 2

    def test_final_flush_writes_leftovers(self, tmp_index):
        batcher = IndexBatcher(tmp_index, batch_size=2)
        for i in range(3):
            batcher.add("regulations", f"2013-0000{i}", fields_for(f"2013-0000{i}"))
        assert tmp_index.count("regulations") == 2
        assert batcher.flush() == []
        assert tmp_index.count("regulations") == 3
        assert batcher.indexed == 3

    def test_flush_empty_is_noop(self):
        index = MagicMock()
        assert IndexBatcher(index, batch_size=5).flush() == []
        index.bulk_upsert.assert_not_called()

    def test_errors_returned_and_kept(self):
        index = MagicMock()
        error = {"index_name": "regulations", "doc_id": "2013-00001", "error": "disk full"}
        index.bulk_upsert.return_value = (0, [error])
        batcher = IndexBatcher(index, batch_size=1)
        assert batcher.add("regulations", "2013-00001", {}) == [error]
        assert batcher.failed == [error]
        assert batcher.indexed == 0
