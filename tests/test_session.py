"""Tests for JoinSession registration and bind operations."""

import pytest

from docjoin.adapters import BulkAdapter, LookupAdapter, ScalarAdapter, StreamAdapter
from docjoin.errors import ConfigurationError
from docjoin.schemas import JoinSpecification
from docjoin.session import JoinSession
from docjoin.streams import CursorStream


class TestRegistration:
    """Tests for JoinSession.on()."""

    def test_on_accepts_mapping_with_aliases(self, store):
        session = JoinSession(store).on({"field": "sub1", "to": "name", "from": "subord"})
        assert session.joins() == (JoinSpecification("sub1", "name", "subord"),)

    def test_on_accepts_keyword_aliases(self, store):
        session = JoinSession(store).on(field="sub2", to="name", from_="subord", as_="sub2-doc")
        spec = session.joins()[0]
        assert spec.target_collection == "subord"
        assert spec.result_field == "sub2-doc"

    def test_on_accepts_specification(self, store):
        spec = JoinSpecification("sub1", "name", "subord")
        assert JoinSession(store).on(spec).joins() == (spec,)

    def test_on_is_chainable(self, store):
        session = JoinSession(store)
        assert session.on(field="a", to="b", from_="c").on(field="d", to="e", from_="f") is session
        assert len(session.joins()) == 2

    def test_on_missing_field(self, store):
        with pytest.raises(ConfigurationError):
            JoinSession(store).on(field="a", to="b")

    def test_initial_specs(self, store):
        session = JoinSession(store, [{"field": "a", "to": "b", "from": "c"}])
        assert len(session.joins()) == 1


class TestBindOperations:
    """Tests for wrap_* and the one-shot helpers."""

    @pytest.fixture
    def session(self, store):
        return JoinSession(store).on(field="sub1", to="name", from_="subord") \
                                 .on(field="sub2", to="name", from_="subord", as_="sub2-doc")

    def test_wrap_returns_adapters(self, session, store):
        cursor = store.get_collection("master").find()
        assert isinstance(session.wrap_bulk(cursor), BulkAdapter)
        assert isinstance(session.wrap_scalar(cursor), ScalarAdapter)
        assert isinstance(session.wrap_lookup(store.get_collection("master")), LookupAdapter)
        assert isinstance(session.wrap_stream(CursorStream(cursor)), StreamAdapter)

    def test_to_list(self, session, store):
        docs = session.to_list(store.get_collection("master").find())
        assert docs[0]["sub1"]["amount"] == 10
        assert docs[0]["sub2-doc"]["amount"] == 42
        assert docs[0]["sub2"] == "sub-baz"
        assert "sub2-doc" not in docs[1]

    def test_next(self, session, store):
        cursor = store.get_collection("master").find().sort("name", -1)
        doc = session.next(cursor)
        assert doc["name"] == "master-goo"
        assert doc["sub1"]["name"] == "sub-bar"

    def test_find_one(self, session, store):
        doc = session.find_one(store.get_collection("master"), {"name": "master-foo"})
        assert doc["sub2-doc"]["description"].startswith("answer")

    def test_each(self, session, store):
        received = []
        session.each(store.get_collection("master").find(), lambda err, doc: received.append((err, doc)))
        assert [doc["name"] if doc else None for _, doc in received] == ["master-foo", "master-goo", None]
        assert all(err is None for err, _ in received)

    def test_stream(self, session, store):
        received = []
        stream = session.stream(store.get_collection("master").find())
        stream.on("data", received.append).run()
        assert [doc["sub1"]["amount"] for doc in received] == [10, 10]

    def test_adapters_snapshot_specs_at_bind_time(self, session, store):
        adapter = session.wrap_bulk(store.get_collection("master").find())
        session.on(field="name", to="name", from_="subord", as_="late")
        docs = adapter.to_list()
        assert "late" not in docs[0]
        assert len(adapter.specs) == 2

    def test_join_many_and_join_one(self, session):
        assert session.join_many(None) == []
        assert session.join_one(None) is None
        assert session.join_one({"sub1": "sub-bar"})["sub1"]["amount"] == 10
