"""
Base adapter and the interception state machine.

An adapter wraps exactly one retrieval primitive of a source and routes each
produced document through the orchestrators before releasing it to the
original consumer. Every other attribute of the source is forwarded, so a
consumer unaware of joins sees the same call shape, with richer documents.

States:
    IDLE -> FETCHING -> JOINING -> DELIVERING -> IDLE
    FETCHING -> CLOSED when the source signals exhaustion (no join runs,
    the terminal signal passes straight through)

Delivery modes (same semantics):
- return mode: the augmented result is returned; a hard join error is
  raised carrying 'partial'
- continuation mode: a trailing callable argument (or callback=) is
  invoked as callback(error, result); a hard join error is delivered as
  callback(error, error.partial)
"""

import threading
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Callable, Optional, Sequence

from docjoin.errors import JoinResolutionError
from docjoin.orchestrator import ScalarOrchestrator
from docjoin.schemas import JoinSpecification

Continuation = Callable[[Optional[BaseException], Any], Any]


class AdapterState(str, Enum):
    """Interception state of an adapter."""
    IDLE = "idle"
    FETCHING = "fetching"
    JOINING = "joining"
    DELIVERING = "delivering"
    CLOSED = "closed"


def split_continuation(
    args: Sequence[Any], kwargs: dict[str, Any]
) -> tuple[tuple[Any, ...], dict[str, Any], Optional[Continuation]]:
    """
    Separate a continuation from the primitive's own arguments.

    Accepts next(cb), next(options, cb) and next(options, callback=cb); the
    remaining arguments are passed to the raw primitive exactly as given.
    """
    kwargs = dict(kwargs)
    callback = kwargs.pop("callback", None)
    if callback is None and args and callable(args[-1]):
        callback = args[-1]
        args = args[:-1]
    return tuple(args), kwargs, callback


class Adapter(ABC):
    """
    Abstract base class for consumption adapters.

    Holds the wrapped source, the orchestrator, and a snapshot of the join
    specifications taken when the adapter was bound. The lock is owned by
    this adapter instance only, so unrelated sessions never serialize
    against each other.
    """

    def __init__(
        self,
        source: Any,
        orchestrator: ScalarOrchestrator,
        specs: Sequence[JoinSpecification],
    ):
        """
        Initialize the adapter.

        Args:
            source: The source whose primitive is wrapped
            orchestrator: ScalarOrchestrator used for joins
            specs: Join specifications in registration order
        """
        self._source = source
        self._orchestrator = orchestrator
        self._specs = tuple(specs)
        self._lock = threading.RLock()
        self.state = AdapterState.IDLE

    @property
    def source(self) -> Any:
        """The wrapped (undecorated) source."""
        return self._source

    @property
    def specs(self) -> tuple[JoinSpecification, ...]:
        return self._specs

    def __getattr__(self, name: str) -> Any:
        # Only reached for attributes the adapter does not define
        if name == "_source":
            raise AttributeError(name)
        return getattr(self._source, name)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(source={self._source!r}, joins={len(self._specs)}, state={self.state.value})"


class PullAdapter(Adapter):
    """
    Adapter for primitives the consumer calls (bulk, scalar, lookup).

    Subclasses provide the raw call, the exhaustion test and the join.
    """

    closes_on_exhaustion = True

    @abstractmethod
    def _fetch(self, *args: Any, **kwargs: Any) -> Any:
        """Invoke the undecorated primitive."""
        pass

    @abstractmethod
    def _is_exhausted(self, raw: Any) -> bool:
        """True when the raw result is a terminal/empty signal."""
        pass

    @abstractmethod
    def _join(self, raw: Any) -> Any:
        """Run the orchestrator over the raw result."""
        pass

    def _intercept(self, args: Sequence[Any], kwargs: dict[str, Any]) -> Any:
        """Fetch, join and deliver one raw result."""
        args, kwargs, callback = split_continuation(args, kwargs)
        with self._lock:
            self.state = AdapterState.FETCHING
            try:
                raw = self._fetch(*args, **kwargs)
            except StopIteration:
                self.state = AdapterState.CLOSED
                if callback is None:
                    raise
                return callback(None, None)
            except Exception as e:
                self.state = AdapterState.IDLE
                if callback is None:
                    raise
                return callback(e, None)

            if self._is_exhausted(raw):
                self.state = (
                    AdapterState.CLOSED if self.closes_on_exhaustion else AdapterState.IDLE
                )
                return self._deliver(callback, None, raw)

            self.state = AdapterState.JOINING
            try:
                joined = self._join(raw)
            except JoinResolutionError as e:
                return self._deliver(callback, e, e.partial)
            return self._deliver(callback, None, joined)

    def _deliver(
        self, callback: Optional[Continuation], error: Optional[JoinResolutionError], result: Any
    ) -> Any:
        """Hand the result to the original continuation (or return/raise it)."""
        if self.state != AdapterState.CLOSED:
            self.state = AdapterState.DELIVERING
        try:
            if callback is not None:
                return callback(error, result)
            if error is not None:
                raise error
            return result
        finally:
            # A continuation may re-enter the adapter; keep the state it left
            if self.state == AdapterState.DELIVERING:
                self.state = AdapterState.IDLE
