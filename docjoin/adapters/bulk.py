"""
BulkAdapter - joins on the "materialize all documents" primitive.

Wraps Cursor.to_list(). The whole raw batch is joined once by the
ArrayOrchestrator and the joined batch is delivered in source order. An
empty or None batch is the terminal signal and passes straight through.
"""

from typing import Any, Optional, Sequence

from docjoin.adapters.base import PullAdapter
from docjoin.orchestrator import ArrayOrchestrator, ScalarOrchestrator
from docjoin.schemas import JoinSpecification


class BulkAdapter(PullAdapter):
    """Decorates to_list() so the returned documents are joined."""

    def __init__(
        self,
        source: Any,
        orchestrator: ScalarOrchestrator,
        specs: Sequence[JoinSpecification],
    ):
        super().__init__(source, orchestrator, specs)
        self._array = ArrayOrchestrator(orchestrator)

    def to_list(self, *args: Any, **kwargs: Any) -> Optional[list[dict[str, Any]]]:
        """
        Materialize and join all documents.

        Same arguments as the source's to_list(), plus an optional trailing
        continuation called as callback(error, documents).

        Raises:
            JoinResolutionError: On the first failing document; partial holds
                the documents joined before it
        """
        return self._intercept(args, kwargs)

    def _fetch(self, *args: Any, **kwargs: Any) -> Any:
        return self._source.to_list(*args, **kwargs)

    def _is_exhausted(self, raw: Any) -> bool:
        return not raw

    def _join(self, raw: Any) -> list[dict[str, Any]]:
        return self._array.join_many(raw, self._specs)
