"""
DocumentJoiner - resolve one join specification against one document.

resolve() steps:
1. No document -> None (no-op)
2. Missing/empty reference value -> document unchanged (soft miss)
3. Identifier-lookup mode -> coerce value (InvalidIdentifierError on failure)
4. Resolve the target collection handle (StoreError on failure)
5. find_one({target_field: value}) (StoreError on failure)
6. No match -> document unchanged, result_field untouched (soft miss)
7. Match -> document[result_field] = copy of the matched document

The document passed in is the caller's working copy and is mutated in place.
"""

import copy
import logging
from typing import Any, Optional

from docjoin.errors import JoinResolutionError, StoreError
from docjoin.schemas import JoinSpecification
from docjoin.store.client import DocumentStore, coerce_identifier

logger = logging.getLogger(__name__)

# Values treated as "no reference" (0 and False are real keys)
EMPTY_VALUES = (None, "")


def is_empty_reference(value: Any) -> bool:
    """True when a reference value means the document has no reference."""
    if value in EMPTY_VALUES:
        return True
    return isinstance(value, (list, dict, tuple)) and len(value) == 0


class DocumentJoiner:
    """
    Joins a single secondary document into a primary document.

    The collection handle is requested from the store on every lookup; the
    store decides whether handles are cached.
    """

    def __init__(self, store: DocumentStore):
        """
        Initialize the joiner.

        Args:
            store: DocumentStore used for collection resolution and lookups
        """
        self._store = store

    @property
    def store(self) -> DocumentStore:
        return self._store

    def resolve(
        self, document: Optional[dict[str, Any]], spec: JoinSpecification
    ) -> Optional[dict[str, Any]]:
        """
        Resolve one join specification against one document.

        Args:
            document: Working document (mutated in place), or None
            spec: The join to apply

        Returns:
            The (possibly augmented) document, or None if document was None

        Raises:
            InvalidIdentifierError: If identifier coercion fails
            StoreError: If collection resolution or the lookup fails
        """
        if document is None:
            return None

        value = document.get(spec.source_field)
        if is_empty_reference(value):
            logger.debug(f"Soft miss: no '{spec.source_field}' reference to join")
            return document

        if spec.is_identifier_lookup:
            try:
                value = coerce_identifier(value)
            except JoinResolutionError as e:
                e.spec = spec
                raise

        query = {spec.target_field: value}
        matched = self._find_one(spec, query)
        if matched is None:
            logger.debug(
                f"Soft miss: no '{spec.target_collection}' document where "
                f"{spec.target_field} == {value!r}"
            )
            return document

        # Joined documents never share the store's objects
        document[spec.result_field] = copy.deepcopy(matched)
        return document

    def _find_one(self, spec: JoinSpecification, query: dict[str, Any]) -> Optional[dict[str, Any]]:
        """
        Resolve the handle and run the equality lookup.

        Error classification:
        - StoreError: already classified by the store, propagate
        - TimeoutError: builtin timeout is transient
        - Exception: anything else is a non-transient StoreError
        """
        logger.debug(f"Looking up {query!r} in '{spec.target_collection}'")
        try:
            handle = self._store.get_collection(spec.target_collection)
            return handle.find_one(query)
        except StoreError as e:
            e.spec = spec
            raise
        except Exception as e:
            raise StoreError(
                f"Lookup in '{spec.target_collection}' failed: {e}",
                spec=spec,
                transient=isinstance(e, TimeoutError),
            ) from e
