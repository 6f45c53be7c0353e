"""
Document store boundary for docjoin.

The join core only depends on the DocumentStore protocol. Concrete stores:

Usage:
    from docjoin.store import MongoDocumentStore, InMemoryDocumentStore

    store = MongoDocumentStore.from_config(config.mongo)

    # Or, for tests and dry runs
    store = InMemoryDocumentStore({"authors": [{"_id": 1, "name": "Ada"}]})
"""

from docjoin.store.client import (
    PRIMARY_KEY_FIELD,
    CollectionHandle,
    DocumentStore,
    InMemoryCollection,
    InMemoryCursor,
    InMemoryDocumentStore,
    coerce_identifier,
)
from docjoin.store.mongo import (
    MongoCollectionHandle,
    MongoDocumentStore,
    classify_store_error,
)

__all__ = [
    "PRIMARY_KEY_FIELD",
    "CollectionHandle",
    "DocumentStore",
    "InMemoryCollection",
    "InMemoryCursor",
    "InMemoryDocumentStore",
    "MongoCollectionHandle",
    "MongoDocumentStore",
    "classify_store_error",
    "coerce_identifier",
]
