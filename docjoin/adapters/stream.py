"""
StreamAdapter - joins on a push-based per-document event source.

The source emits 'data' events eagerly. To keep delivery order equal to
source order, each raw document is handled as:

    pause source -> join -> deliver to the listener -> resume source

under this adapter's lock, so document n+1 is never delivered before the
join of document n has completed, even with several 'data' listeners or
emitting threads. Listeners for other events are registered unchanged.

A hard join error is emitted as an 'error' event carrying the exception
(its 'partial' holds the partially joined document); the failing document
is not delivered to 'data' listeners.
"""

import logging
from typing import Any, Callable, Sequence

from docjoin.adapters.base import Adapter, AdapterState
from docjoin.errors import JoinResolutionError
from docjoin.orchestrator import ScalarOrchestrator
from docjoin.schemas import JoinSpecification

logger = logging.getLogger(__name__)

Listener = Callable[..., Any]


class StreamAdapter(Adapter):
    """Decorates on('data', listener) so every emitted document is joined."""

    def __init__(
        self,
        source: Any,
        orchestrator: ScalarOrchestrator,
        specs: Sequence[JoinSpecification],
    ):
        super().__init__(source, orchestrator, specs)
        self._proxies: dict[Listener, list[Listener]] = {}
        self._consumer_paused = False
        self._source.on("end", self._on_end)

    def on(self, event: str, listener: Listener) -> "StreamAdapter":
        """Register a listener; 'data' listeners receive joined documents."""
        if event != "data":
            self._source.on(event, listener)
            return self

        def proxy(document: Any) -> None:
            self._on_data(listener, document)

        self._proxies.setdefault(listener, []).append(proxy)
        self._source.on("data", proxy)
        return self

    add_listener = on

    def remove_listener(self, event: str, listener: Listener) -> "StreamAdapter":
        """Remove a listener previously registered through this adapter."""
        if event == "data" and self._proxies.get(listener):
            proxy = self._proxies[listener].pop()
            if not self._proxies[listener]:
                del self._proxies[listener]
            self._source.remove_listener("data", proxy)
        else:
            self._source.remove_listener(event, listener)
        return self

    def pause(self) -> "StreamAdapter":
        """Pause the stream; the adapter will not resume it until resume()."""
        self._consumer_paused = True
        self._source.pause()
        return self

    def resume(self) -> "StreamAdapter":
        """Resume a stream paused by the consumer."""
        self._consumer_paused = False
        self._source.resume()
        return self

    def _on_data(self, listener: Listener, document: Any) -> None:
        if document is None:
            listener(document)
            return

        with self._lock:
            self._source.pause()
            try:
                self.state = AdapterState.JOINING
                try:
                    joined = self._orchestrator.join_one(document, self._specs)
                except JoinResolutionError as e:
                    logger.warning(f"Stream document not delivered, join failed: {e}")
                    self.state = AdapterState.IDLE
                    self._source.emit("error", e)
                    return
                self.state = AdapterState.DELIVERING
                listener(joined)
            finally:
                if self.state != AdapterState.CLOSED:
                    self.state = AdapterState.IDLE
                if not self._consumer_paused:
                    self._source.resume()

    def _on_end(self, *args: Any) -> None:
        self.state = AdapterState.CLOSED
