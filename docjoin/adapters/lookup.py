"""
LookupAdapter - joins on the "find exactly one document" primitive.

Wraps Collection.find_one(filter, *args, **kwargs). A found document is
joined before delivery; None (or an empty document) passes through
unchanged and the adapter stays usable for the next lookup.
"""

from typing import Any, Optional

from docjoin.adapters.base import PullAdapter


class LookupAdapter(PullAdapter):
    """Decorates find_one() so the found document is joined."""

    closes_on_exhaustion = False

    def find_one(self, *args: Any, **kwargs: Any) -> Optional[dict[str, Any]]:
        """
        Find one document and join it.

        Raises:
            JoinResolutionError: On a hard join error; partial holds the
                partially joined document
        """
        return self._intercept(args, kwargs)

    def _fetch(self, *args: Any, **kwargs: Any) -> Any:
        return self._source.find_one(*args, **kwargs)

    def _is_exhausted(self, raw: Any) -> bool:
        return not raw

    def _join(self, raw: Any) -> Optional[dict[str, Any]]:
        return self._orchestrator.join_one(raw, self._specs)
