"""
ScalarAdapter - joins on the "fetch next document" primitive.

Wraps Cursor.next(). Accepts the primitive's own arguments unchanged and an
optional continuation, so next(), next(cb), next(options) and
next(options, cb) all behave like the undecorated call. The source's bound
method is always used, so repeated calls advance the same cursor state.
"""

import logging
from typing import Any, Callable, Optional

from docjoin.adapters.base import AdapterState, PullAdapter
from docjoin.errors import JoinResolutionError

logger = logging.getLogger(__name__)


class ScalarAdapter(PullAdapter):
    """Decorates next() and iteration so each document is joined."""

    def next(self, *args: Any, **kwargs: Any) -> Optional[dict[str, Any]]:
        """
        Fetch and join the next document.

        Raises:
            StopIteration: When the source is exhausted (return mode)
            JoinResolutionError: On a hard join error; partial holds the
                partially joined document
        """
        return self._intercept(args, kwargs)

    def __next__(self) -> dict[str, Any]:
        # Sources may signal exhaustion with None instead of StopIteration
        if self.state == AdapterState.CLOSED:
            raise StopIteration
        document = self._intercept((), {})
        if document is None:
            raise StopIteration
        return document

    def __iter__(self) -> "ScalarAdapter":
        return self

    def each(self, callback: Callable[[Optional[BaseException], Any], Any]) -> None:
        """
        Call callback(None, doc) for every joined document, then callback(None, None).

        Iteration stops early when the callback returns False. Any error is
        delivered once as callback(error, partial) and ends the iteration.
        """
        while True:
            try:
                document = self._intercept((), {})
            except StopIteration:
                callback(None, None)
                return
            except JoinResolutionError as e:
                callback(e, e.partial)
                return
            except Exception as e:
                logger.warning(f"Cursor failed during each(): {e}")
                callback(e, None)
                return
            if document is None:
                callback(None, None)
                return
            if callback(None, document) is False:
                return

    def _fetch(self, *args: Any, **kwargs: Any) -> Any:
        return self._source.next(*args, **kwargs)

    def _is_exhausted(self, raw: Any) -> bool:
        return raw is None

    def _join(self, raw: Any) -> Optional[dict[str, Any]]:
        return self._orchestrator.join_one(raw, self._specs)
