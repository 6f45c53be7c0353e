"""Tests for ScalarOrchestrator and ArrayOrchestrator."""

import copy

import pytest

from docjoin.errors import InvalidIdentifierError, StoreError
from docjoin.joiner import DocumentJoiner
from docjoin.orchestrator import ArrayOrchestrator, ScalarOrchestrator
from docjoin.schemas import JoinSpecification
from docjoin.store import InMemoryDocumentStore

SUB1 = JoinSpecification("sub1", "name", "subord")
SUB2 = JoinSpecification("sub2", "name", "subord")


def orchestrators(store):
    scalar = ScalarOrchestrator(DocumentJoiner(store))
    return scalar, ArrayOrchestrator(scalar)


class TestScalarOrchestrator:
    """Tests for join_one()."""

    def test_none_document(self, store):
        scalar, _ = orchestrators(store)
        assert scalar.join_one(None, [SUB1]) is None

    def test_applies_every_spec(self, store):
        scalar, _ = orchestrators(store)
        raw = store.get_collection("master").find_one({"name": "master-foo"})
        joined = scalar.join_one(raw, [SUB1, SUB2])
        assert joined["sub1"]["amount"] == 10
        assert joined["sub2"]["description"] == "answer to life, the universe, and everything"

    def test_raw_document_not_mutated(self, store):
        scalar, _ = orchestrators(store)
        raw = store.get_collection("master").find_one({"name": "master-foo"})
        before = copy.deepcopy(raw)
        joined = scalar.join_one(raw, [SUB1, SUB2])
        assert joined is not raw
        assert raw == before
        assert store.get_collection("master").find_one({"name": "master-foo"}) == before

    def test_zero_specs_returns_equal_copy(self, store):
        scalar, _ = orchestrators(store)
        raw = {"name": "p1", "nested": {"tags": ["a", "b"]}}
        joined = scalar.join_one(raw, [])
        assert joined == raw
        assert joined is not raw
        assert joined["nested"] is not raw["nested"]

    def test_later_spec_wins_on_collision(self):
        store = InMemoryDocumentStore({
            "A": [{"key": "x", "from": "A"}],
            "B": [{"key": "x", "from": "B"}],
        })
        scalar, _ = orchestrators(store)
        specs = [
            JoinSpecification("ref", "key", "A", result_field="out"),
            JoinSpecification("ref", "key", "B", result_field="out"),
        ]
        assert scalar.join_one({"ref": "x"}, specs)["out"] == {"key": "x", "from": "B"}

    def test_later_spec_reads_earlier_result(self):
        store = InMemoryDocumentStore({"C": [{"key": "x", "v": 1}]})
        scalar, _ = orchestrators(store)
        specs = [
            JoinSpecification("ref", "key", "C", result_field="ref_doc"),
            JoinSpecification("ref_doc", "key", "C", result_field="again"),
        ]
        joined = scalar.join_one({"ref": "x"}, specs)
        # ref_doc is a dict, so the second lookup finds nothing
        assert "again" not in joined

    def test_fail_fast_carries_partial(self, recording_store):
        scalar, _ = orchestrators(recording_store)
        bad = JoinSpecification("author", "_id", "authors")
        document = {"sub1": "sub-bar", "author": "nope", "sub2": "sub-baz"}
        with pytest.raises(InvalidIdentifierError) as exc_info:
            scalar.join_one(document, [SUB1, bad, SUB2])

        partial = exc_info.value.partial
        assert partial["sub1"] == {"name": "sub-bar", "amount": 10}
        assert partial["sub2"] == "sub-baz"
        assert exc_info.value.spec is bad
        assert [entry[1] for entry in recording_store.lookups()] == ["subord"]

    def test_soft_miss_does_not_stop_chain(self, store):
        scalar, _ = orchestrators(store)
        joined = scalar.join_one({"sub1": "missing", "sub2": "sub-baz"}, [SUB1, SUB2])
        assert joined["sub1"] == "missing"
        assert joined["sub2"]["amount"] == 42


class TestArrayOrchestrator:
    """Tests for join_many()."""

    @pytest.mark.parametrize("documents", [None, []])
    def test_empty_input(self, store, documents):
        _, array = orchestrators(store)
        assert array.join_many(documents, [SUB1]) == []

    def test_preserves_order(self, store):
        _, array = orchestrators(store)
        raw = store.get_collection("master").find().to_list()
        joined = array.join_many(raw, [SUB1, SUB2])
        assert [doc["name"] for doc in joined] == ["master-foo", "master-goo"]
        assert "sub2" not in joined[1]

    def test_failure_returns_prefix(self, recording_store):
        _, array = orchestrators(recording_store)
        recording_store.fail_lookup("boom", StoreError("down", transient=True))
        documents = [
            {"name": "d0", "sub1": "sub-bar"},
            {"name": "d1", "sub1": "sub-baz"},
            {"name": "d2", "sub1": "boom"},
            {"name": "d3", "sub1": "sub-bar"},
        ]
        with pytest.raises(StoreError) as exc_info:
            array.join_many(documents, [SUB1])

        partial = exc_info.value.partial
        assert [doc["name"] for doc in partial] == ["d0", "d1"]
        assert partial[1]["sub1"]["amount"] == 42
        assert len(recording_store.lookups()) == 3

    def test_failure_on_first_document(self, recording_store):
        _, array = orchestrators(recording_store)
        recording_store.fail_lookup("boom", StoreError("down"))
        with pytest.raises(StoreError) as exc_info:
            array.join_many([{"sub1": "boom"}, {"sub1": "sub-bar"}], [SUB1])
        assert exc_info.value.partial == []
