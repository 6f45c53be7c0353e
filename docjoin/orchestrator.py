"""
Orchestrators - apply the registered joins to documents.

ScalarOrchestrator.join_one(document, specs):
    Deep-copies the document into a working document and applies each
    specification in registration order. The first hard error stops the
    chain; later specifications are not applied and the error carries the
    working document as it stood after the last successful step.

ArrayOrchestrator.join_many(documents, specs):
    Applies join_one to each document in input order. The first hard error
    stops the batch; the error carries the list of documents joined before
    the failing one. The failing document and the rest are dropped.

Specifications are never applied concurrently, and documents are never
joined concurrently: later specifications may read fields written by
earlier ones, and delivery order must match source order.
"""

import copy
import logging
from typing import Any, Iterable, Optional, Sequence

from docjoin.errors import JoinResolutionError
from docjoin.joiner import DocumentJoiner
from docjoin.schemas import JoinSpecification

logger = logging.getLogger(__name__)


def working_copy(document: dict[str, Any]) -> dict[str, Any]:
    """Private deep copy of a raw document; the store's object is never mutated."""
    return copy.deepcopy(document)


class ScalarOrchestrator:
    """Applies every specification, in order, to one document."""

    def __init__(self, joiner: DocumentJoiner):
        self._joiner = joiner

    @property
    def joiner(self) -> DocumentJoiner:
        return self._joiner

    def join_one(
        self,
        document: Optional[dict[str, Any]],
        specs: Sequence[JoinSpecification],
    ) -> Optional[dict[str, Any]]:
        """
        Join one document.

        Args:
            document: Raw document (not mutated), or None
            specs: Specifications in registration order

        Returns:
            Joined working copy, or None if document was None

        Raises:
            JoinResolutionError: On the first hard error, with
                partial set to the partially joined working copy
        """
        if document is None:
            return None

        working = working_copy(document)
        for index, spec in enumerate(specs):
            try:
                working = self._joiner.resolve(working, spec)
            except JoinResolutionError as e:
                logger.warning(
                    f"Join {index + 1}/{len(specs)} "
                    f"('{spec.source_field}' -> {spec.target_collection}.{spec.target_field}) "
                    f"failed, skipping remaining joins: {e}"
                )
                e.partial = working
                raise
        return working


class ArrayOrchestrator:
    """Applies the ScalarOrchestrator to every document of a batch, in order."""

    def __init__(self, scalar: ScalarOrchestrator):
        self._scalar = scalar

    @property
    def scalar(self) -> ScalarOrchestrator:
        return self._scalar

    def join_many(
        self,
        documents: Optional[Iterable[dict[str, Any]]],
        specs: Sequence[JoinSpecification],
    ) -> list[dict[str, Any]]:
        """
        Join a batch of documents.

        Args:
            documents: Raw documents (not mutated); None or empty yields []
            specs: Specifications in registration order

        Returns:
            Joined working copies, in input order

        Raises:
            JoinResolutionError: On the first document that fails, with
                partial set to the list of documents joined before it
        """
        joined: list[dict[str, Any]] = []
        if not documents:
            return joined

        for index, document in enumerate(documents):
            try:
                joined.append(self._scalar.join_one(document, specs))
            except JoinResolutionError as e:
                logger.warning(
                    f"Batch stopped at document {index}: {len(joined)} joined, "
                    f"remaining documents dropped"
                )
                e.partial = joined
                raise
        return joined
