"""
Builder-style join registration.

    builder = JoinBuilder(store)
    builder.on("sub1").to("name").from_("subord").as_("sub1")
    builder.on("sub2").to("name").from_("subord").as_("sub2_doc")
    session = builder.session()

Each call appends one value to its own list. The lists are paired up into
quadruples (field, target field, target collection, result field) only when
the builder is resolved, so a mismatched count is reported then, as a
ConfigurationError, before any document is joined.
"""

from typing import TYPE_CHECKING, Optional

from docjoin.errors import ConfigurationError
from docjoin.schemas import JoinSpecification

if TYPE_CHECKING:
    from docjoin.session import JoinSession
    from docjoin.store import DocumentStore


class JoinBuilder:
    """Chained on/to/from_/as_ registration, normalized to JoinSpecifications."""

    def __init__(self, store: Optional["DocumentStore"] = None):
        self._store = store
        self._on: list[str] = []
        self._to: list[str] = []
        self._from: list[str] = []
        self._as: list[str] = []

    def on(self, field_name: str) -> "JoinBuilder":
        self._on.append(field_name)
        return self

    def to(self, field_name: str) -> "JoinBuilder":
        self._to.append(field_name)
        return self

    def from_(self, collection_name: str) -> "JoinBuilder":
        self._from.append(collection_name)
        return self

    def as_(self, field_name: str) -> "JoinBuilder":
        self._as.append(field_name)
        return self

    def specifications(self) -> list[JoinSpecification]:
        """
        Pair the recorded values into JoinSpecifications.

        Raises:
            ConfigurationError: If the on/to/from/as counts differ, or a
                quadruple is missing a required field
        """
        counts = (len(self._on), len(self._to), len(self._from), len(self._as))
        if len(set(counts)) != 1:
            raise ConfigurationError(
                "Join must have the same number of on(), to(), from_() and as_() arguments "
                f"(on: {counts[0]}, to: {counts[1]}, from: {counts[2]}, as: {counts[3]})"
            )
        return [
            JoinSpecification(
                source_field=on,
                target_field=to,
                target_collection=from_,
                result_field=as_,
            )
            for on, to, from_, as_ in zip(self._on, self._to, self._from, self._as)
        ]

    def session(self, store: Optional["DocumentStore"] = None) -> "JoinSession":
        """
        Resolve the builder into a JoinSession.

        Args:
            store: Store to use; defaults to the builder's store

        Raises:
            ConfigurationError: If counts mismatch or no store is available
        """
        from docjoin.session import JoinSession

        store = store if store is not None else self._store
        if store is None:
            raise ConfigurationError("JoinBuilder needs a document store to build a session")
        session = JoinSession(store)
        for spec in self.specifications():
            session.on(spec)
        return session
