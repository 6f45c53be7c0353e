"""
Document store interface for secondary lookups.

This module defines the protocol that any document store must implement,
allowing the join core to be decoupled from the actual storage backend.
The core only needs two capabilities:

1. Resolve a collection handle by name
2. Find at most one document matching an equality query

Implementations:
- InMemoryDocumentStore: For testing, dry runs and the CLI demo mode
- MongoDocumentStore: Real implementation backed by pymongo (store.mongo)
"""

from typing import Any, Iterator, Optional, Protocol, runtime_checkable

from bson import ObjectId
from bson.errors import InvalidId

from docjoin.errors import InvalidIdentifierError

# Reserved primary-key field name of the store
PRIMARY_KEY_FIELD = "_id"


@runtime_checkable
class CollectionHandle(Protocol):
    """Handle to one collection, able to run an equality lookup."""

    def find_one(self, filter: Optional[dict[str, Any]] = None, *args: Any, **kwargs: Any) -> Optional[dict[str, Any]]:
        """
        Find at most one document matching the query.

        Returns:
            The matching document, or None when nothing matches (not an error)
        """
        ...


@runtime_checkable
class DocumentStore(Protocol):
    """
    Protocol for the document store collaborator.

    This interface abstracts collection resolution so that:
    1. The join core has no pymongo imports
    2. The store can be swapped (MongoDB, in-memory, mock)
    3. Collection-handle caching stays the store's business
    """

    def get_collection(self, name: str) -> CollectionHandle:
        """
        Resolve a collection handle by name.

        Args:
            name: Collection name

        Returns:
            CollectionHandle for the collection

        Raises:
            StoreError: If the handle cannot be resolved
        """
        ...


def coerce_identifier(value: Any) -> ObjectId:
    """
    Coerce a foreign-key value into the store's canonical identifier type.

    ObjectId values pass through. 24-character hex strings and 12-byte
    values are converted.

    Raises:
        InvalidIdentifierError: If the value is not a valid ObjectId
    """
    if isinstance(value, ObjectId):
        return value
    if value is None:
        raise InvalidIdentifierError("Cannot coerce None to ObjectId")
    try:
        return ObjectId(value)
    except (InvalidId, TypeError) as e:
        raise InvalidIdentifierError(f"Cannot coerce {value!r} to ObjectId: {e}") from e


def _matches(document: dict[str, Any], query: dict[str, Any]) -> bool:
    return all(key in document and document[key] == value for key, value in query.items())


class InMemoryCursor:
    """
    Cursor over an in-memory result set.

    Mirrors the pymongo Cursor methods the adapters wrap: next() raising
    StopIteration when exhausted, iteration, and to_list().
    Documents are yielded as stored (not copied).
    """

    def __init__(self, documents: list[dict[str, Any]]):
        self._documents = list(documents)
        self._position = 0

    @property
    def alive(self) -> bool:
        """True while documents remain."""
        return self._position < len(self._documents)

    def sort(self, key: str, direction: int = 1) -> "InMemoryCursor":
        """Sort remaining documents by a single key (1 ascending, -1 descending)."""
        remaining = self._documents[self._position:]
        remaining.sort(key=lambda doc: doc.get(key), reverse=direction < 0)
        self._documents[self._position:] = remaining
        return self

    def limit(self, limit: int) -> "InMemoryCursor":
        """Restrict the cursor to the next 'limit' documents (0 means no limit)."""
        if limit:
            self._documents = self._documents[:self._position + limit]
        return self

    def next(self) -> dict[str, Any]:
        """Return the next document, raising StopIteration when exhausted."""
        if not self.alive:
            raise StopIteration
        document = self._documents[self._position]
        self._position += 1
        return document

    __next__ = next

    def __iter__(self) -> Iterator[dict[str, Any]]:
        return self

    def to_list(self, length: Optional[int] = None) -> list[dict[str, Any]]:
        """Materialize the remaining documents (at most 'length' if given)."""
        end = len(self._documents) if length is None else self._position + length
        documents = self._documents[self._position:end]
        self._position += len(documents)
        return documents


class InMemoryCollection:
    """One named collection of an InMemoryDocumentStore."""

    def __init__(self, name: str, documents: list[dict[str, Any]]):
        self.name = name
        self._documents = documents

    def insert_one(self, document: dict[str, Any]) -> Any:
        """Insert a document as given (no '_id' is generated)."""
        self._documents.append(document)
        return document.get(PRIMARY_KEY_FIELD)

    def insert_many(self, documents: list[dict[str, Any]]) -> list[Any]:
        """Insert several documents, returning their ids."""
        return [self.insert_one(document) for document in documents]

    def find(self, filter: Optional[dict[str, Any]] = None, *args: Any, **kwargs: Any) -> InMemoryCursor:
        """Return a cursor over documents matching every equality in filter."""
        query = filter or {}
        return InMemoryCursor([d for d in self._documents if _matches(d, query)])

    def find_one(self, filter: Optional[dict[str, Any]] = None, *args: Any, **kwargs: Any) -> Optional[dict[str, Any]]:
        """Return the first document matching every equality in filter, or None."""
        query = filter or {}
        for document in self._documents:
            if _matches(document, query):
                return document
        return None

    def count_documents(self, filter: Optional[dict[str, Any]] = None) -> int:
        """Count documents matching filter."""
        query = filter or {}
        return sum(1 for d in self._documents if _matches(d, query))


class InMemoryDocumentStore:
    """
    In-memory implementation of DocumentStore.

    Collections are created on first access, like MongoDB collections.
    """

    def __init__(self, collections: Optional[dict[str, list[dict[str, Any]]]] = None):
        self._collections: dict[str, list[dict[str, Any]]] = {}
        for name, documents in (collections or {}).items():
            self.insert(name, documents)

    def insert(self, name: str, documents: list[dict[str, Any]]) -> list[Any]:
        """Insert documents into the named collection."""
        return self.get_collection(name).insert_many(documents)

    def get_collection(self, name: str) -> InMemoryCollection:
        """Return the named collection, creating it if needed."""
        documents = self._collections.setdefault(name, [])
        return InMemoryCollection(name, documents)

    def list_collection_names(self) -> list[str]:
        """List collection names."""
        return list(self._collections.keys())

    def close(self) -> None:
        """Nothing to release."""
        pass
