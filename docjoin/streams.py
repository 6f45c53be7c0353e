"""
CursorStream - push-based event source over a pull cursor.

Emits one 'data' event per document, then 'end' and 'close'. A cursor
failure emits 'error' then 'close'. Flow is explicit: run() (or resume())
pumps documents until the cursor is exhausted or the stream is paused.

    stream = CursorStream(collection.find())
    stream.on("data", handle).on("end", done)
    stream.run()

pause() takes effect before the next document is pulled, including from
inside a 'data' listener. An 'error' event with no listener raises the
error from run().
"""

import logging
import threading
from collections import defaultdict
from typing import Any, Callable, Iterator

logger = logging.getLogger(__name__)

EVENTS = frozenset({"data", "end", "error", "close"})


class CursorStream:
    """Event emitter with pause/resume driven by a cursor."""

    def __init__(self, cursor: Iterator[dict[str, Any]]):
        """
        Initialize the stream.

        Args:
            cursor: Any iterator of documents (pymongo Cursor, InMemoryCursor)
        """
        self._cursor = cursor
        self._listeners: dict[str, list[Callable[..., Any]]] = defaultdict(list)
        self._paused = False
        self._ended = False
        self._pumping = False
        self._state_lock = threading.Lock()

    @property
    def cursor(self) -> Iterator[dict[str, Any]]:
        return self._cursor

    @property
    def paused(self) -> bool:
        return self._paused

    @property
    def ended(self) -> bool:
        return self._ended

    def on(self, event: str, listener: Callable[..., Any]) -> "CursorStream":
        """Register a listener for 'data', 'end', 'error' or 'close'."""
        if event not in EVENTS:
            raise ValueError(f"Unknown stream event: {event}. Valid: {sorted(EVENTS)}")
        self._listeners[event].append(listener)
        return self

    add_listener = on

    def remove_listener(self, event: str, listener: Callable[..., Any]) -> "CursorStream":
        """Remove a listener (no-op if it is not registered)."""
        if listener in self._listeners.get(event, []):
            self._listeners[event].remove(listener)
        return self

    def listeners(self, event: str) -> list[Callable[..., Any]]:
        return list(self._listeners.get(event, []))

    def emit(self, event: str, *args: Any) -> bool:
        """
        Call every listener for event, in registration order.

        Returns:
            True if the event had listeners

        Raises:
            The error itself, for an 'error' event with no listeners
        """
        listeners = self.listeners(event)
        if event == "error" and not listeners:
            error = args[0] if args else None
            if isinstance(error, BaseException):
                raise error
            raise RuntimeError(f"Unhandled stream error: {error!r}")
        for listener in listeners:
            listener(*args)
        return bool(listeners)

    def pause(self) -> "CursorStream":
        self._paused = True
        return self

    def resume(self) -> "CursorStream":
        self._paused = False
        self._pump()
        return self

    def run(self) -> "CursorStream":
        """Start (or continue) flowing; returns when ended or paused."""
        return self.resume()

    def close(self) -> None:
        """End the stream early and close the cursor if it supports it."""
        if self._ended:
            return
        self._ended = True
        close = getattr(self._cursor, "close", None)
        if callable(close):
            close()
        self.emit("close")

    def _pump(self) -> None:
        while True:
            with self._state_lock:
                if self._pumping or self._paused or self._ended:
                    return
                self._pumping = True
            try:
                self._flow()
            finally:
                with self._state_lock:
                    self._pumping = False

    def _flow(self) -> None:
        while not self._paused and not self._ended:
            try:
                document = next(self._cursor)
            except StopIteration:
                self._ended = True
                self.emit("end")
                self.emit("close")
                return
            except Exception as e:
                logger.warning(f"Cursor failed, ending stream: {e}")
                self._ended = True
                try:
                    self.emit("error", e)
                finally:
                    self.emit("close")
                return
            self.emit("data", document)
