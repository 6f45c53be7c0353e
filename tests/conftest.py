import pytest
from bson import ObjectId

from docjoin.errors import StoreError
from docjoin.store import InMemoryDocumentStore

AUTHOR_ID = ObjectId("64b7f0c2a1b2c3d4e5f60718")


def master_docs():
    return [
        {"name": "master-foo", "sub1": "sub-bar", "sub2": "sub-baz"},
        {"name": "master-goo", "sub1": "sub-bar"},
    ]


def subord_docs():
    return [
        {"name": "sub-bar", "amount": 10},
        {"name": "sub-baz", "amount": 42, "description": "answer to life, the universe, and everything"},
    ]


class RecordingCollection:
    """Collection wrapper that logs lookups and raises injected failures."""

    def __init__(self, collection, store):
        self._collection = collection
        self._store = store
        self.name = collection.name

    def find_one(self, filter=None, *args, **kwargs):
        query = dict(filter or {})
        self._store.log.append(("lookup", self.name, query))
        for value in query.values():
            for failing, error in self._store.failures:
                if value == failing:
                    raise error
        return self._collection.find_one(query)

    def find(self, filter=None, *args, **kwargs):
        return self._collection.find(filter)


class RecordingStore:
    """DocumentStore that records every call, for ordering and failure tests."""

    def __init__(self, collections=None):
        self.inner = InMemoryDocumentStore(collections)
        self.log = []
        self.failures = []
        self.unavailable = set()

    def fail_lookup(self, value, error):
        self.failures.append((value, error))

    def get_collection(self, name):
        self.log.append(("get_collection", name))
        if name in self.unavailable:
            raise StoreError(f"collection '{name}' unavailable", transient=True)
        return RecordingCollection(self.inner.get_collection(name), self)

    def lookups(self):
        return [entry for entry in self.log if entry[0] == "lookup"]

    def close(self):
        pass


@pytest.fixture
def store():
    """In-memory store with a primary 'master' and a secondary 'subord' collection."""
    return InMemoryDocumentStore({"master": master_docs(), "subord": subord_docs()})


@pytest.fixture
def recording_store():
    """RecordingStore seeded like 'store', plus an 'authors' collection keyed by ObjectId."""
    return RecordingStore({
        "master": master_docs(),
        "subord": subord_docs(),
        "authors": [{"_id": AUTHOR_ID, "name": "Ada"}],
    })
