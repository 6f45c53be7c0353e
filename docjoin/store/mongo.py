"""
MongoDB document store - the pymongo boundary.

This module provides the single boundary where docjoin talks to MongoDB.

Error classification:
- StoreError propagated unchanged
- Timeouts, auto-reconnects and connection failures -> StoreError(transient=True)
- Any other PyMongoError -> StoreError(transient=False)
"""

import logging
from typing import TYPE_CHECKING, Any, Optional

from pymongo import MongoClient
from pymongo.collection import Collection
from pymongo.errors import (
    AutoReconnect,
    ConnectionFailure,
    ExecutionTimeout,
    NetworkTimeout,
    PyMongoError,
    ServerSelectionTimeoutError,
    WTimeoutError,
)

from docjoin.errors import StoreError

if TYPE_CHECKING:
    from docjoin.config import MongoSettings

logger = logging.getLogger(__name__)

TRANSIENT_ERRORS = (
    AutoReconnect,
    ConnectionFailure,
    ExecutionTimeout,
    NetworkTimeout,
    ServerSelectionTimeoutError,
    WTimeoutError,
)


def classify_store_error(error: Exception, context: str) -> StoreError:
    """
    Map a driver exception to StoreError.

    Args:
        error: The exception raised by pymongo (or the store)
        context: What was being attempted, for the message

    Returns:
        StoreError with the transient flag set by error type
    """
    if isinstance(error, StoreError):
        return error
    transient = isinstance(error, (TimeoutError,) + TRANSIENT_ERRORS)
    return StoreError(f"{context}: {error}", transient=transient)


class MongoCollectionHandle:
    """
    CollectionHandle over a pymongo Collection.

    find_one classifies driver errors; every other attribute is the
    underlying Collection's.
    """

    def __init__(self, collection: Collection):
        self._collection = collection

    @property
    def collection(self) -> Collection:
        """The wrapped pymongo Collection."""
        return self._collection

    def find_one(self, filter: Optional[dict[str, Any]] = None, *args: Any, **kwargs: Any) -> Optional[dict[str, Any]]:
        """
        Run an equality lookup.

        Raises:
            StoreError: If the lookup fails
        """
        try:
            return self._collection.find_one(filter, *args, **kwargs)
        except PyMongoError as e:
            raise classify_store_error(
                e, f"Lookup in '{self._collection.name}' failed"
            ) from e

    def __getattr__(self, name: str) -> Any:
        return getattr(self._collection, name)


class MongoDocumentStore:
    """
    DocumentStore backed by a pymongo database.

    Handles are cheap and resolved per lookup; pymongo pools the
    connections underneath.
    """

    @classmethod
    def from_config(cls, settings: "MongoSettings") -> "MongoDocumentStore":
        """
        Create a MongoDocumentStore from MongoSettings.

        Args:
            settings: Connection settings (uri or host/port, dbname, credentials)

        Returns:
            Configured MongoDocumentStore instance
        """
        kwargs: dict[str, Any] = {
            "serverSelectionTimeoutMS": settings.timeout_ms,
        }
        if settings.username and settings.password:
            kwargs["username"] = settings.username
            kwargs["password"] = settings.password

        if settings.uri:
            client = MongoClient(settings.uri, **kwargs)
        else:
            client = MongoClient(settings.host, settings.port, **kwargs)

        logger.debug(f"Connecting to MongoDB database '{settings.dbname}'")
        return cls(client, settings.dbname)

    def __init__(self, client: MongoClient, dbname: str):
        """
        Initialize the store.

        Args:
            client: Open pymongo MongoClient
            dbname: Name of the database holding the collections
        """
        self._client = client
        self._dbname = dbname

    @property
    def database(self):
        """The pymongo Database."""
        return self._client[self._dbname]

    def get_collection(self, name: str) -> MongoCollectionHandle:
        """
        Resolve a collection handle by name.

        Raises:
            StoreError: If the driver rejects the collection name
        """
        try:
            return MongoCollectionHandle(self.database.get_collection(name))
        except (PyMongoError, TypeError) as e:
            raise classify_store_error(e, f"Cannot resolve collection '{name}'") from e

    def ping(self) -> bool:
        """
        Check connectivity with the admin ping command.

        Raises:
            StoreError: If the server cannot be reached
        """
        try:
            self._client.admin.command("ping")
        except PyMongoError as e:
            raise classify_store_error(e, "Cannot connect to MongoDB") from e
        return True

    def close(self) -> None:
        """Close the underlying client."""
        self._client.close()
