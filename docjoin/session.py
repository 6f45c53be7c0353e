"""
JoinSession - registration plus one bind operation per consumption pattern.

A session owns an ordered registry of join specifications and a handle to
the document store. It keeps no per-document state; bound adapters take a
snapshot of the specifications at bind time.

Usage:
    session = JoinSession(store)
    session.on({"field": "author", "to": "_id", "from": "authors"}) \\
           .on(field="tags", to="slug", from_="tags", as_="tag_doc")

    docs = session.wrap_bulk(posts.find()).to_list()
    post = session.wrap_lookup(posts).find_one({"slug": "hello"})

    for doc in session.wrap_scalar(posts.find()):
        ...

    stream = session.stream(posts.find().sort("created", 1))
    stream.on("data", handle).on("end", done).run()
"""

from typing import Any, Callable, Optional

from docjoin.adapters import BulkAdapter, LookupAdapter, ScalarAdapter, StreamAdapter
from docjoin.joiner import DocumentJoiner
from docjoin.orchestrator import ArrayOrchestrator, ScalarOrchestrator
from docjoin.registry import JoinSpecRegistry, SpecLike
from docjoin.schemas import JoinSpecification
from docjoin.store.client import DocumentStore
from docjoin.streams import CursorStream

# Keyword spellings for the short aliases that are Python keywords
KEYWORD_ALIASES = {"from_": "from", "as_": "as", "id_": "id"}


class JoinSession:
    """
    Joins secondary documents into documents from one source.

    Attributes:
        store: The DocumentStore used for secondary lookups
        registry: The ordered JoinSpecRegistry
    """

    def __init__(self, store: DocumentStore, specs: Optional[list[SpecLike]] = None):
        """
        Initialize the session.

        Args:
            store: DocumentStore for collection resolution and lookups
            specs: Optional initial join specifications
        """
        self.store = store
        self.registry = JoinSpecRegistry(specs)
        self._scalar = ScalarOrchestrator(DocumentJoiner(store))
        self._array = ArrayOrchestrator(self._scalar)

    # -------------------------------------------------------------------------
    # Registration
    # -------------------------------------------------------------------------

    def on(self, spec: Optional[SpecLike] = None, **fields: Any) -> "JoinSession":
        """
        Register a join.

        Args:
            spec: JoinSpecification, or mapping with long names
                (source_field, target_field, target_collection, result_field,
                is_identifier_lookup) or short aliases (field, to, from, as, id)
            **fields: Same keys as keywords; from_, as_ and id_ stand in for
                the aliases that are Python keywords

        Returns:
            This session, for chaining

        Raises:
            ConfigurationError: If a required field is missing
        """
        fields = {KEYWORD_ALIASES.get(key, key): value for key, value in fields.items()}
        self.registry.register(spec, **fields)
        return self

    def joins(self) -> tuple[JoinSpecification, ...]:
        """Registered joins, in registration order."""
        return self.registry.list()

    # -------------------------------------------------------------------------
    # Direct orchestration
    # -------------------------------------------------------------------------

    def join_one(self, document: Optional[dict[str, Any]]) -> Optional[dict[str, Any]]:
        """Join one raw document (a working copy is returned)."""
        return self._scalar.join_one(document, self.joins())

    def join_many(self, documents: Optional[list[dict[str, Any]]]) -> list[dict[str, Any]]:
        """Join a batch of raw documents (working copies are returned)."""
        return self._array.join_many(documents, self.joins())

    # -------------------------------------------------------------------------
    # Bind operations
    # -------------------------------------------------------------------------

    def wrap_bulk(self, cursor: Any) -> BulkAdapter:
        """Wrap a cursor's to_list()."""
        return BulkAdapter(cursor, self._scalar, self.joins())

    def wrap_scalar(self, cursor: Any) -> ScalarAdapter:
        """Wrap a cursor's next() and iteration."""
        return ScalarAdapter(cursor, self._scalar, self.joins())

    def wrap_lookup(self, collection: Any) -> LookupAdapter:
        """Wrap a collection's find_one()."""
        return LookupAdapter(collection, self._scalar, self.joins())

    def wrap_stream(self, stream: Any) -> StreamAdapter:
        """Wrap an event source with on/pause/resume."""
        return StreamAdapter(stream, self._scalar, self.joins())

    # -------------------------------------------------------------------------
    # One-shot helpers
    # -------------------------------------------------------------------------

    def to_list(self, cursor: Any, *args: Any, **kwargs: Any) -> Any:
        """Materialize a cursor with joins applied."""
        return self.wrap_bulk(cursor).to_list(*args, **kwargs)

    def next(self, cursor: Any, *args: Any, **kwargs: Any) -> Any:
        """Fetch the next document of a cursor with joins applied."""
        return self.wrap_scalar(cursor).next(*args, **kwargs)

    def each(self, cursor: Any, callback: Callable[[Optional[BaseException], Any], Any]) -> None:
        """Call callback(err, doc) for every joined document, then (None, None)."""
        self.wrap_scalar(cursor).each(callback)

    def find_one(self, collection: Any, *args: Any, **kwargs: Any) -> Any:
        """find_one() on a collection with joins applied."""
        return self.wrap_lookup(collection).find_one(*args, **kwargs)

    def stream(self, cursor: Any) -> StreamAdapter:
        """Push-based stream over a cursor, emitting joined documents in order."""
        return self.wrap_stream(CursorStream(cursor))

    def __repr__(self) -> str:
        return f"JoinSession(joins={len(self.registry)})"

